"""
Purpose: Domain models for the Orders capability.
What it does:
- Defines the order as the dispatch engine sees it:
- Order (id, delivery coordinates, status, assigned courier, timestamps)

Defines enums/constants:
- OrderStatus = placed | assigned | picked_up | delivered | failed

Rule: No persistence, no dispatch logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

LatLon = Tuple[float, float]


class OrderStatus(str, Enum):
    PLACED = "placed"
    ASSIGNED = "assigned"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    FAILED = "failed"


# Statuses that count against a courier's concurrent order limit
ACTIVE_ORDER_STATUSES = (OrderStatus.ASSIGNED, OrderStatus.PICKED_UP)


@dataclass
class Order:
    """
    Represents a single order waiting for (or bound to) a courier.
    The dispatch engine only mutates status and courier_id.
    """

    id: str
    delivery_location: LatLon
    status: OrderStatus = OrderStatus.PLACED
    courier_id: Optional[str] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def new(
        cls,
        order_id: str,
        lat: float,
        lon: float,
        status: str | OrderStatus = OrderStatus.PLACED,
        courier_id: Optional[str] = None,
    ) -> Order:
        if isinstance(status, str):
            status = OrderStatus(status)

        return cls(
            id=order_id,
            delivery_location=(lat, lon),
            status=status,
            courier_id=courier_id,
        )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_ORDER_STATUSES
