"""
Wires the dispatch core to the Django stores.

start_auto_assignment is the internal (non-HTTP) entry point the order
creation workflow calls once an order is placed.
"""
import logging

from couriers.locator import GeoCourierLocator
from dispatch.engine import AssignmentEngine
from dispatch.leases import CourierLeaseManager

from .stores import (
    DjangoCourierDirectory,
    DjangoDispatchConfigStore,
    DjangoDispatchLogStore,
    DjangoOrderStore,
    DjangoZoneRegistry,
)

logger = logging.getLogger(__name__)

# One lease table per worker process, shared by every engine built here
_courier_leases = CourierLeaseManager()


def build_engine(offers=None):
    directory = DjangoCourierDirectory()
    return AssignmentEngine(
        orders=DjangoOrderStore(),
        couriers=directory,
        locator=GeoCourierLocator(directory),
        logs=DjangoDispatchLogStore(),
        config_store=DjangoDispatchConfigStore(),
        zones=DjangoZoneRegistry(),
        offers=offers,
        leases=_courier_leases,
    )


def start_auto_assignment(order_id):
    """
    Returns {success, order?, dispatch_log?, error?}; never raises.
    order / dispatch_log are domain records (orders.Order, dispatch.DispatchLog).
    """
    logger.info("Starting auto-assignment for order %s", order_id)
    return build_engine().start_auto_assignment(order_id)
