import math
from typing import Dict, List

import pytest

from couriers.directory import InMemoryCourierDirectory
from couriers.locator import GeoCourierLocator, LocatorResult, NearbyCourier
from couriers.models import Courier, CourierStatus
from dispatch.config import DispatchConfig, InMemoryDispatchConfigStore
from dispatch.engine import AssignmentEngine
from dispatch.leases import CourierLeaseManager
from dispatch.log import InMemoryDispatchLogStore
from orders.models import Order
from orders.store import InMemoryOrderStore
from zones.geofence import EARTH_RADIUS_M
from zones.registry import InMemoryZoneRegistry

# Example: Center of Harare
HARARE = (-17.824858, 31.053028)


def offset_north(point, meters):
    """Point `meters` due north of `point` (great-circle exact)."""
    lat, lon = point
    return (lat + math.degrees(meters / EARTH_RADIUS_M), lon)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedLocator:
    """
    Stands in for GeoCourierLocator: answers from a radius -> couriers table
    and remembers every radius it was asked for.
    """
    def __init__(self, script: Dict[int, List[Courier]] = None):
        self.script = script or {}
        self.calls: List[int] = []

    def find_nearby(self, point, radius_m):
        self.calls.append(radius_m)
        couriers = self.script.get(radius_m, [])
        return LocatorResult(
            radius_m=radius_m,
            matches=[NearbyCourier(courier=c, distance_m=float(i)) for i, c in enumerate(couriers)],
        )


class DispatchEnv:
    """
    In-memory wiring of every store the engine needs.
    """
    def __init__(self, config=None, locator=None, offers=None, clock=None, zones=None):
        self.orders = InMemoryOrderStore()
        self.directory = InMemoryCourierDirectory()
        self.logs = InMemoryDispatchLogStore()
        self.config_store = InMemoryDispatchConfigStore(config or DispatchConfig())
        self.zones = zones if zones is not None else InMemoryZoneRegistry()
        self.clock = clock or FakeClock()
        self.leases = CourierLeaseManager(clock=self.clock)
        self.locator = locator or GeoCourierLocator(self.directory)
        self.engine = AssignmentEngine(
            orders=self.orders,
            couriers=self.directory,
            locator=self.locator,
            logs=self.logs,
            config_store=self.config_store,
            zones=self.zones,
            offers=offers,
            leases=self.leases,
            clock=self.clock,
        )

    def place_order(self, order_id="order_1", location=HARARE):
        return self.orders.add(Order.new(order_id, *location))

    def add_courier(self, courier_id, location=HARARE, status=CourierStatus.ACTIVE):
        return self.directory.add(Courier.new(courier_id, *location, status=status))


@pytest.fixture
def pickup_point():
    return HARARE


@pytest.fixture
def env():
    return DispatchEnv()


@pytest.fixture
def courier_a():
    return Courier.new("courier_a", *offset_north(HARARE, 1900))


@pytest.fixture
def courier_b():
    return Courier.new("courier_b", *offset_north(HARARE, 1950))
