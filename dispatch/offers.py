"""
Purpose: Courier-side acceptance of an offered order.
What it does:
Models each candidate as a small sub-state machine:

    OFFERED -> ACCEPTED | DECLINED | TIMED_OUT

An OfferChannel delivers the offer and reports the outcome within the
timeout it is given. The default AutoAcceptChannel accepts instantly,
which makes the first eligible candidate the assigned courier.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional, Protocol

from couriers.models import Courier
from orders.models import Order

from .log import AttemptOutcome


class OfferState(str, Enum):
    OFFERED = "offered"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TIMED_OUT = "timed_out"


# How each terminal offer state is written to the dispatch log
OUTCOME_FOR_STATE: Dict[OfferState, AttemptOutcome] = {
    OfferState.OFFERED: AttemptOutcome.PENDING,
    OfferState.ACCEPTED: AttemptOutcome.ACCEPTED,
    OfferState.DECLINED: AttemptOutcome.REJECTED,
    OfferState.TIMED_OUT: AttemptOutcome.TIMEOUT,
}


class OfferStateException(Exception):
    """Raised when a channel reports a non-terminal or unknown state."""
    pass


class OfferChannel(Protocol):
    def offer(self, order: Order, courier: Courier, timeout_seconds: float) -> OfferState:
        ...


class AutoAcceptChannel:
    """Every offer is accepted on the spot."""

    def offer(self, order: Order, courier: Courier, timeout_seconds: float) -> OfferState:
        return OfferState.ACCEPTED


class ScriptedOfferChannel:
    """
    Replies from a per-courier table; couriers not listed get `default`.
    Used by the simulation script to model declines and no-shows.
    """

    def __init__(self, replies: Optional[Dict[str, OfferState]] = None, default: OfferState = OfferState.ACCEPTED):
        self.replies = dict(replies or {})
        self.default = default
        self.offers_made = []

    def offer(self, order: Order, courier: Courier, timeout_seconds: float) -> OfferState:
        self.offers_made.append((order.id, courier.id))
        return self.replies.get(courier.id, self.default)


class CallbackOfferChannel:
    """
    Adapts a plain callable (order, courier, timeout) -> bool | None.
    True accepts, False declines, None means no answer before the timeout.
    """

    def __init__(self, callback: Callable[[Order, Courier, float], Optional[bool]]):
        self.callback = callback

    def offer(self, order: Order, courier: Courier, timeout_seconds: float) -> OfferState:
        answer = self.callback(order, courier, timeout_seconds)
        if answer is None:
            return OfferState.TIMED_OUT
        return OfferState.ACCEPTED if answer else OfferState.DECLINED


def resolve_offer_state(state) -> OfferState:
    """
    Normalizes whatever the channel returned into a terminal OfferState.
    """
    try:
        state = OfferState(state)
    except ValueError:
        raise OfferStateException(f"Unknown offer state: {state!r}") from None

    if state == OfferState.OFFERED:
        raise OfferStateException("Offer channel returned before the courier answered")
    return state
