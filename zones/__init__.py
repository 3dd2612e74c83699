#Marks zones as a package.
#Re-exports the zone registry and the geofence helpers so other modules
#import from zones without knowing internal file names.
#No business logic.

from .geofence import haversine_meters, bounding_box, point_in_polygon
from .registry import DispatchZone, ZoneRegistry, InMemoryZoneRegistry

__all__ = [
           "haversine_meters",
           "bounding_box",
             "point_in_polygon",
             "DispatchZone",
             "ZoneRegistry",
             "InMemoryZoneRegistry",
             ]
