"""
Couriers domain package.

Public API:
- Domain models: Courier, CourierStatus
- Directory adapters: CourierDirectory, InMemoryCourierDirectory, HttpCourierDirectory
- Radius search: GeoCourierLocator, LocatorResult
- Load filter: filter_by_load
"""
from .models import Courier, CourierStatus
from .selection import filter_by_load
from .directory import CourierDirectory, CourierDirectoryError, InMemoryCourierDirectory, HttpCourierDirectory
from .locator import GeoCourierLocator, LocatorResult, NearbyCourier

__all__ = [
    "Courier",
    "CourierStatus",
    "filter_by_load",
    "CourierDirectory",
    "CourierDirectoryError",
    "InMemoryCourierDirectory",
    "HttpCourierDirectory",
    "GeoCourierLocator",
    "LocatorResult",
    "NearbyCourier",
]
