#Purpose: Radius search for active couriers around a delivery point.
#Builds the "who is close enough" list the engine offers the order to.
#Typical responsibilities:
#ask the directory for active couriers inside the radius' bounding box
#drop the box corners with an exact haversine check
#sort nearest first (ties broken by courier id so runs are repeatable)
#never raise: directory errors come back as a failed LocatorResult
#Output: a LocatorResult the engine can tell apart from "nobody nearby".

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from zones.geofence import bounding_box, haversine_meters
from .directory import CourierDirectory
from .models import Courier, CourierStatus

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class NearbyCourier:
    courier: Courier
    distance_m: float


@dataclass(frozen=True)
class LocatorResult:
    """
    Output of one radius search.
    ok=False means the directory failed: `couriers` is empty but that does
    NOT mean nobody is nearby.
    """
    radius_m: float
    matches: List[NearbyCourier] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def couriers(self) -> List[Courier]:
        return [match.courier for match in self.matches]

    def __len__(self) -> int:
        return len(self.matches)


class GeoCourierLocator:
    def __init__(self, directory: CourierDirectory):
        self.directory = directory

    def find_nearby(self, point: LatLon, radius_m: float) -> LocatorResult:
        """
        Active couriers within radius_m of point, nearest first.
        """
        try:
            min_lat, max_lat, min_lon, max_lon = bounding_box(point, radius_m)
            boxed = self.directory.active_within(min_lat, max_lat, min_lon, max_lon)
        except Exception as exc:
            logger.warning("Courier lookup failed at %sm around %s: %s", radius_m, point, exc)
            return LocatorResult(radius_m=radius_m, error=exc)

        matches: List[NearbyCourier] = []
        for courier in boxed:
            if courier.status != CourierStatus.ACTIVE:
                continue
            distance = haversine_meters(point, courier.location)
            if distance <= radius_m:
                matches.append(NearbyCourier(courier=courier, distance_m=distance))

        matches.sort(key=lambda match: (match.distance_m, match.courier.id))
        return LocatorResult(radius_m=radius_m, matches=matches)
