"""
Orders domain package.

Public API:
- Domain models: Order, OrderStatus
- Persistence: OrderStore, InMemoryOrderStore
"""
from .models import Order, OrderStatus, ACTIVE_ORDER_STATUSES
from .store import OrderStore, InMemoryOrderStore

__all__ = ["Order",
           "OrderStatus",
             "ACTIVE_ORDER_STATUSES",
               "OrderStore",
               "InMemoryOrderStore",
               ]
