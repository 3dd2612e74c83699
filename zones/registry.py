"""
Purpose: Named delivery zones and their fee/time attributes.
What it does:
- DispatchZone: immutable snapshot of a zone
- ZoneRegistry protocol: create / list / get / update / find_containing
- InMemoryZoneRegistry: lock-guarded implementation

The engine consults the registry once per order to attach zone-derived
parameters (fee, minimum delivery time) and, when coverage is enforced,
to refuse orders outside every active zone.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from dispatch.errors import DuplicateZone, InvalidZone, ZoneNotFound
from .geofence import LatLon, point_in_polygon

UPDATABLE_FIELDS = (
    "name",
    "boundary",
    "delivery_fee",
    "minimum_delivery_time",
    "maximum_delivery_time",
    "is_active",
)


@dataclass(frozen=True)
class DispatchZone:
    id: str
    name: str
    boundary: Tuple[LatLon, ...]
    delivery_fee: Decimal
    minimum_delivery_time: int
    maximum_delivery_time: Optional[int] = None
    is_active: bool = True

    def contains(self, point: LatLon) -> bool:
        return point_in_polygon(point, self.boundary)


def validate_zone(zone: DispatchZone) -> None:
    """
    Basic sanity checks.
    """
    if not zone.name or not zone.name.strip():
        raise InvalidZone("name must not be blank")

    if len(zone.boundary) < 3:
        raise InvalidZone("boundary needs at least 3 points")

    for lat, lon in zone.boundary:
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise InvalidZone(f"boundary point ({lat}, {lon}) is out of range")

    if zone.delivery_fee < 0:
        raise InvalidZone("delivery_fee must be >= 0")

    if zone.minimum_delivery_time < 0:
        raise InvalidZone("minimum_delivery_time must be >= 0")

    if zone.maximum_delivery_time is not None and zone.maximum_delivery_time < zone.minimum_delivery_time:
        raise InvalidZone("maximum_delivery_time must be >= minimum_delivery_time")


def normalize_boundary(points: Sequence[Any]) -> Tuple[LatLon, ...]:
    """Accepts (lat, lon) pairs or {"latitude": .., "longitude": ..} mappings."""
    normalized = []
    for point in points:
        if isinstance(point, Mapping):
            normalized.append((float(point["latitude"]), float(point["longitude"])))
        else:
            lat, lon = point
            normalized.append((float(lat), float(lon)))
    return tuple(normalized)


class ZoneRegistry(Protocol):
    def create(
        self,
        name: str,
        boundary: Sequence[Any],
        delivery_fee,
        minimum_delivery_time: int,
        maximum_delivery_time: Optional[int] = None,
        is_active: bool = True,
    ) -> DispatchZone:
        ...

    def list(self) -> List[DispatchZone]:
        ...

    def get(self, zone_id: str) -> DispatchZone:
        ...

    def update(self, zone_id: str, fields: Mapping[str, Any]) -> DispatchZone:
        ...

    def find_containing(self, point: LatLon) -> Optional[DispatchZone]:
        ...


@dataclass
class InMemoryZoneRegistry:
    _zones: Dict[str, DispatchZone] = field(default_factory=dict)
    _ids: Any = field(default_factory=lambda: itertools.count(1), repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def create(
        self,
        name: str,
        boundary: Sequence[Any],
        delivery_fee,
        minimum_delivery_time: int,
        maximum_delivery_time: Optional[int] = None,
        is_active: bool = True,
    ) -> DispatchZone:
        with self._lock:
            zone = DispatchZone(
                id=str(next(self._ids)),
                name=name,
                boundary=normalize_boundary(boundary),
                delivery_fee=Decimal(str(delivery_fee)),
                minimum_delivery_time=int(minimum_delivery_time),
                maximum_delivery_time=maximum_delivery_time,
                is_active=is_active,
            )
            validate_zone(zone)

            # exact, case-sensitive match
            if any(existing.name == name for existing in self._zones.values()):
                raise DuplicateZone(name)

            self._zones[zone.id] = zone
            return zone

    def list(self) -> List[DispatchZone]:
        return sorted(self._zones.values(), key=lambda zone: zone.name)

    def get(self, zone_id: str) -> DispatchZone:
        zone = self._zones.get(str(zone_id))
        if zone is None:
            raise ZoneNotFound(zone_id)
        return zone

    def update(self, zone_id: str, fields: Mapping[str, Any]) -> DispatchZone:
        with self._lock:
            current = self.get(zone_id)

            unknown = set(fields) - set(UPDATABLE_FIELDS)
            if unknown:
                raise InvalidZone(f"unknown zone fields: {', '.join(sorted(unknown))}")

            changes = dict(fields)
            if "boundary" in changes:
                changes["boundary"] = normalize_boundary(changes["boundary"])
            if "delivery_fee" in changes:
                changes["delivery_fee"] = Decimal(str(changes["delivery_fee"]))

            updated = replace(current, **changes)
            validate_zone(updated)

            if updated.name != current.name and any(
                other.name == updated.name for other in self._zones.values() if other.id != current.id
            ):
                raise DuplicateZone(updated.name)

            self._zones[current.id] = updated
            return updated

    def find_containing(self, point: LatLon) -> Optional[DispatchZone]:
        for zone in self.list():
            if zone.is_active and zone.contains(point):
                return zone
        return None
