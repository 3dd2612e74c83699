"""
Purpose: Persistence contract for orders, as consumed by the dispatch engine.
What it does:
- OrderStore protocol: get / save / active_order_count / bind_courier
- InMemoryOrderStore: thread-safe dict-backed implementation used by the
  simulation script and the tests.

bind_courier is the compare-and-swap the engine relies on: the courier's
active order count is re-checked under the same lock that writes the binding,
so two concurrent runs cannot both push a courier past its limit.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from .models import Order, OrderStatus


class OrderStore(Protocol):
    def get(self, order_id: str) -> Optional[Order]:
        ...

    def save(self, order: Order) -> Order:
        ...

    def active_order_count(self, courier_id: str) -> int:
        ...

    def bind_courier(self, order_id: str, courier_id: str, max_active_orders: Optional[int] = None) -> bool:
        ...


@dataclass
class InMemoryOrderStore:
    """
    Orders kept by id. Every read hands out the stored object itself,
    so callers see bindings made through bind_courier immediately.
    """

    _orders: Dict[str, Order] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add(self, order: Order) -> Order:
        with self._lock:
            # idempotency: dont double insert
            self._orders.setdefault(order.id, order)
            return self._orders[order.id]

    def get(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def save(self, order: Order) -> Order:
        with self._lock:
            self._orders[order.id] = order
        return order

    def active_order_count(self, courier_id: str) -> int:
        return sum(
            1
            for order in list(self._orders.values())
            if order.courier_id == courier_id and order.is_active
        )

    def bind_courier(self, order_id: str, courier_id: str, max_active_orders: Optional[int] = None) -> bool:
        """
        Atomically bind the order to the courier.
        Returns False (and changes nothing) if the courier is already at
        max_active_orders or the order vanished.
        """
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return False

            if max_active_orders is not None and self.active_order_count(courier_id) >= max_active_orders:
                return False

            order.courier_id = courier_id
            order.status = OrderStatus.ASSIGNED
            return True
