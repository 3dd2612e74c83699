#Expose the high-level pipeline pieces:
#Dispatch config (policy knobs + singleton store)
#Dispatch log (audit trail)
#Offers and leases (per-candidate acceptance, per-courier exclusivity)
#Assignment engine (the "one call" entry point)

from .errors import (
    DispatchError,
    OrderNotFound,
    CourierNotFound,
    ZoneNotFound,
    DuplicateZone,
    InvalidZone,
    InvalidDispatchConfig,
    ConfigUnavailable,
    LocatorFailure,
)
from .config import DispatchConfig, DispatchConfigStore, InMemoryDispatchConfigStore, default_dispatch_config
from .log import (
    AttemptOutcome,
    AssignmentAttempt,
    DispatchLog,
    DispatchLogStore,
    DispatchStatus,
    FailureReason,
    InMemoryDispatchLogStore,
    SearchAttempt,
)
from .leases import CourierLeaseManager
from .offers import AutoAcceptChannel, CallbackOfferChannel, OfferState, ScriptedOfferChannel
from .engine import AssignmentEngine, AssignmentResult #the main class to call to dispatch an order to a courier

__all__ = [
    "DispatchError",
    "OrderNotFound",
    "CourierNotFound",
    "ZoneNotFound",
    "DuplicateZone",
    "InvalidZone",
    "InvalidDispatchConfig",
    "ConfigUnavailable",
    "LocatorFailure",
    "DispatchConfig",
    "DispatchConfigStore",
    "InMemoryDispatchConfigStore",
    "default_dispatch_config",
    "AttemptOutcome",
    "AssignmentAttempt",
    "DispatchLog",
    "DispatchLogStore",
    "DispatchStatus",
    "FailureReason",
    "InMemoryDispatchLogStore",
    "SearchAttempt",
    "CourierLeaseManager",
    "AutoAcceptChannel",
    "CallbackOfferChannel",
    "OfferState",
    "ScriptedOfferChannel",
    "AssignmentEngine",
    "AssignmentResult",
]
