"""
Purpose: Core data models for the couriers domain.
What it does:
Defines the structure of a Courier and their status without relying on Django ORM constraints.
The courier directory owns these records; the dispatch core only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Tuple

LatLon = Tuple[float, float]


class CourierStatus(str, Enum):
    """
    Standardizes the state a courier can be in.
    Only ACTIVE couriers are visible to the locator.
    """
    ACTIVE = "active"
    BUSY = "busy"
    INACTIVE = "inactive"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Courier:
    """
    A purely stateless representation of a Courier at a specific point in time.
    """
    id: str
    location: LatLon
    status: CourierStatus
    name: str = ""
    last_ping_at: datetime | None = None

    @classmethod
    def new(
        cls,
        courier_id: str,
        lat: float,
        lon: float,
        status: str | CourierStatus = CourierStatus.ACTIVE,
        name: str = "",
        last_ping_at: datetime | None = None
    ) -> Courier:
        if isinstance(status, str):
            status = CourierStatus(status)

        return cls(
            id=courier_id,
            location=(lat, lon),
            status=status,
            name=name,
            last_ping_at=last_ping_at or datetime.now(timezone.utc)
        )
