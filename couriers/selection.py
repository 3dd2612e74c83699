"""
Purpose: Business rules for which located couriers may be offered an order.
What it does:
Accepts the nearest-first list from the locator and drops couriers who are
already carrying as many orders as the dispatch config allows.
Order is preserved: no secondary ranking happens here.
"""

from typing import Callable, List, Optional

from .models import Courier


def filter_by_load(
    couriers: List[Courier],
    active_order_count: Callable[[str], int],
    max_orders_per_courier: Optional[int],
) -> List[Courier]:
    """
    Returns only couriers whose active order count is below the limit.
    A limit of None disables the filter.
    """
    if max_orders_per_courier is None:
        return list(couriers)

    eligible = []

    for courier in couriers:
        if active_order_count(courier.id) >= max_orders_per_courier:
            continue

        eligible.append(courier)

    return eligible
