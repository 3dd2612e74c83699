"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Accepts a placed order, searches for active couriers in widening radii and
binds the order to the first courier that accepts, writing every step to
the order's DispatchLog.

States of one run:

    SEARCHING -> ASSIGNED   (a courier accepted and the bind succeeded)
    SEARCHING -> FAILED     (radii exhausted, deadline passed, or outside every zone)

Per candidate: OFFERED -> ACCEPTED | DECLINED | TIMED_OUT (see dispatch.offers).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from couriers.models import Courier
from couriers.selection import filter_by_load
from orders.models import Order, OrderStatus

from .config import DispatchConfig, DispatchConfigStore
from .errors import CourierNotFound, DispatchError, LocatorFailure, OrderNotFound
from .leases import CourierLeaseManager, LeaseManager
from .log import AttemptOutcome, DispatchLog, DispatchLogStore, FailureReason
from .offers import OUTCOME_FOR_STATE, AutoAcceptChannel, OfferChannel, OfferState, resolve_offer_state

if TYPE_CHECKING:
    from couriers.directory import CourierDirectory
    from couriers.locator import GeoCourierLocator, LocatorResult
    from orders.store import OrderStore
    from zones.registry import DispatchZone, ZoneRegistry

logger = logging.getLogger(__name__)


@dataclass
class AssignmentResult:
    success: bool
    order: Optional[Order] = None
    dispatch_log: Optional[DispatchLog] = None
    courier: Optional[Courier] = None
    zone: Optional["DispatchZone"] = None
    error: Optional[str] = None

    @property
    def delivery_fee(self):
        return self.zone.delivery_fee if self.zone else None

    @property
    def minimum_delivery_time(self):
        return self.zone.minimum_delivery_time if self.zone else None

    def as_dict(self) -> Dict[str, Any]:
        """Shape returned by the internal start_auto_assignment entry point."""
        payload: Dict[str, Any] = {"success": self.success}
        if self.order is not None:
            payload["order"] = self.order
        if self.dispatch_log is not None:
            payload["dispatch_log"] = self.dispatch_log
        if self.error is not None:
            payload["error"] = self.error
        return payload


class AssignmentEngine:
    """
    Coordinates the binding of one Order to one Courier.
    Runs for distinct orders are independent and may execute concurrently;
    within a run every step is sequential.
    """
    def __init__(
        self,
        orders: "OrderStore",
        couriers: "CourierDirectory",
        locator: "GeoCourierLocator",
        logs: DispatchLogStore,
        config_store: DispatchConfigStore,
        zones: Optional["ZoneRegistry"] = None,
        offers: Optional[OfferChannel] = None,
        leases: Optional[LeaseManager] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.orders = orders
        self.couriers = couriers
        self.locator = locator
        self.logs = logs
        self.config_store = config_store
        self.zones = zones
        self.offers = offers or AutoAcceptChannel()
        self.leases = leases or CourierLeaseManager(clock=clock)
        self._clock = clock

    # ------------------------------------------------------------------
    # Auto-assignment
    # ------------------------------------------------------------------

    def auto_assign(self, order_id: str) -> AssignmentResult:
        """
        Widen-and-retry search. Raises OrderNotFound before touching anything;
        every other outcome, including "nobody found", is an AssignmentResult.
        """
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        config = self.config_store.get()
        deadline = self._clock() + config.order_assignment_timeout

        log = DispatchLog(order_id=order.id)
        zone = self._resolve_zone(order, log)
        self.logs.upsert(log)

        if zone is None and config.enforce_zone_coverage:
            logger.info("Order %s is outside every active zone; not searching.", order.id)
            return self._fail(order, log, config, FailureReason.OUTSIDE_SERVICE_ZONE, zone)

        try:
            return self._widen_and_retry(order, log, config, deadline, zone)
        except Exception:
            # the log must never be left searching
            log.mark_failed(FailureReason.ERROR)
            self.logs.upsert(log)
            raise

    def _widen_and_retry(
        self,
        order: Order,
        log: DispatchLog,
        config: DispatchConfig,
        deadline: float,
        zone: Optional["DispatchZone"],
    ) -> AssignmentResult:
        current_radius = config.search_radius
        attempts = 0

        while attempts < config.max_increments:
            if self._clock() >= deadline:
                return self._fail(order, log, config, FailureReason.DEADLINE_EXCEEDED, zone)

            result = self._search(order, current_radius, config)
            log.record_search(radius=current_radius, found=len(result), failed=not result.ok)
            logger.info(
                "Order %s: search %d/%d at %sm found %d courier(s).",
                order.id, attempts + 1, config.max_increments, current_radius, len(result),
            )

            if len(result) > 0:
                courier = self._offer_candidates(order, result.couriers, log, config, deadline)
                if courier is not None:
                    log.mark_assigned(courier.id)
                    self.logs.upsert(log)
                    bound = self.orders.get(order.id) or order
                    logger.info("Order %s assigned to courier %s at %sm.", order.id, courier.id, current_radius)
                    return AssignmentResult(True, order=bound, dispatch_log=log, courier=courier, zone=zone)

            current_radius += config.incremental_radius
            attempts += 1

        return self._fail(order, log, config, FailureReason.EXHAUSTED, zone)

    def start_auto_assignment(self, order_id: str) -> Dict[str, Any]:
        """
        Internal entry point for the order-creation workflow.
        Never raises: returns {success, order?, dispatch_log?, error?}.
        """
        try:
            return self.auto_assign(order_id).as_dict()
        except DispatchError as exc:
            logger.warning("Auto-assignment for order %s refused: %s", order_id, exc)
            return {"success": False, "error": str(exc)}
        except Exception:
            logger.exception("Auto-assignment error for order %s", order_id)
            return {"success": False, "error": "Auto-assignment failed"}

    # ------------------------------------------------------------------
    # Manual assignment
    # ------------------------------------------------------------------

    def manual_assign(self, order_id: str, courier_id: str) -> AssignmentResult:
        """
        Operator override: binds directly, no search and no load limit.
        """
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        courier = self.couriers.get(courier_id)
        if courier is None:
            raise CourierNotFound(courier_id)

        if not self.orders.bind_courier(order.id, courier.id):
            raise OrderNotFound(order_id)

        log = self.logs.get(order.id) or DispatchLog(order_id=order.id)
        attempt = log.record_offer(courier.id)
        log.resolve_offer(attempt, AttemptOutcome.ACCEPTED)
        log.mark_assigned(courier.id)
        self.logs.upsert(log)

        logger.info("Order %s manually assigned to courier %s.", order.id, courier.id)
        return AssignmentResult(True, order=self.orders.get(order.id) or order, dispatch_log=log, courier=courier)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _resolve_zone(self, order: Order, log: DispatchLog) -> Optional["DispatchZone"]:
        if self.zones is None:
            return None

        zone = self.zones.find_containing(order.delivery_location)
        if zone is not None:
            log.zone_id = zone.id
        return zone

    def _search(self, order: Order, radius: int, config: DispatchConfig) -> "LocatorResult":
        """
        One radius search. A failed lookup is retried at the same radius;
        an empty result is not.
        """
        result = self.locator.find_nearby(order.delivery_location, radius)
        retries = 0
        while not result.ok and retries < config.locator_retries:
            retries += 1
            logger.warning("%s (retry %d/%d)", LocatorFailure(radius, result.error), retries, config.locator_retries)
            result = self.locator.find_nearby(order.delivery_location, radius)

        if not result.ok:
            logger.warning("%s; widening.", LocatorFailure(radius, result.error))
        return result

    def _offer_candidates(
        self,
        order: Order,
        candidates: List[Courier],
        log: DispatchLog,
        config: DispatchConfig,
        deadline: float,
    ) -> Optional[Courier]:
        """
        Offers the order to candidates nearest first, each for at most
        offer_timeout seconds. Returns the courier that accepted and was
        bound, or None.
        """
        eligible = filter_by_load(candidates, self.orders.active_order_count, config.max_orders_per_delivery_man)
        if len(eligible) < len(candidates):
            logger.info(
                "Order %s: %d courier(s) skipped at capacity (%d orders).",
                order.id, len(candidates) - len(eligible), config.max_orders_per_delivery_man,
            )

        # a courier answers each order at most once per run
        already_offered = {attempt.courier_id for attempt in log.assignment_attempts}

        for courier in eligible:
            if courier.id in already_offered:
                continue

            remaining = deadline - self._clock()
            if remaining <= 0:
                return None
            offer_timeout = min(remaining, config.offer_timeout)

            with self.leases.lease(courier.id, holder=order.id, ttl_seconds=offer_timeout) as acquired:
                if not acquired:
                    logger.warning("Order %s: courier %s is being offered another order; skipping.", order.id, courier.id)
                    continue

                attempt = log.record_offer(courier.id)
                state = resolve_offer_state(self.offers.offer(order, courier, offer_timeout))

                if state != OfferState.ACCEPTED:
                    log.resolve_offer(attempt, OUTCOME_FOR_STATE[state])
                    logger.info("Order %s: courier %s %s the offer.", order.id, courier.id, state.value)
                    continue

                # compare-and-swap on the courier's load
                if not self.orders.bind_courier(order.id, courier.id, config.max_orders_per_delivery_man):
                    log.resolve_offer(attempt, AttemptOutcome.REJECTED)
                    logger.warning("Order %s: courier %s filled up before the bind; trying next.", order.id, courier.id)
                    continue

                log.resolve_offer(attempt, AttemptOutcome.ACCEPTED)
                return courier

        return None

    def _fail(
        self,
        order: Order,
        log: DispatchLog,
        config: DispatchConfig,
        reason: FailureReason,
        zone: Optional["DispatchZone"],
    ) -> AssignmentResult:
        log.mark_failed(reason)
        self.logs.upsert(log)

        if config.mark_order_failed_on_exhaustion:
            order.status = OrderStatus.FAILED
            order = self.orders.save(order)

        logger.info("Order %s not assigned: %s after %d search(es).", order.id, reason.value, len(log.search_attempts))
        return AssignmentResult(False, order=order, dispatch_log=log, zone=zone, error=reason.value)
