"""
Purpose: Central configuration for the auto-assignment loop.
What it does:

Stores all tunable thresholds/caps for finding couriers:

SEARCH_RADIUS = 1000 m, INCREMENTAL_RADIUS = 500 m, MAX_INCREMENTS = 3
MAX_RADIUS = 5000 m, ORDER_ASSIGNMENT_TIMEOUT = 30 s, OFFER_TIMEOUT = 10 s
MAX_ORDERS_PER_DELIVERY_MAN = 5

The config is a process-wide singleton persisted by a DispatchConfigStore.
Reading it creates it with defaults when absent; that get-or-create must be
atomic so concurrent first reads end up with one row.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Protocol

from .errors import InvalidDispatchConfig

# Wire names (camelCase, as exposed over HTTP) -> attribute names
WIRE_FIELDS = {
    "searchRadius": "search_radius",
    "incrementalRadius": "incremental_radius",
    "maxIncrements": "max_increments",
    "maxRadius": "max_radius",
    "orderAssignmentTimeout": "order_assignment_timeout",
    "offerTimeout": "offer_timeout",
    "maxOrdersPerDeliveryMan": "max_orders_per_delivery_man",
    "locatorRetries": "locator_retries",
    "enforceZoneCoverage": "enforce_zone_coverage",
    "markOrderFailedOnExhaustion": "mark_order_failed_on_exhaustion",
}


@dataclass(frozen=True)
class DispatchConfig:
    """
    Central configuration for courier search and assignment.
    """

    # --- Radius search ---
    # First radius searched, in meters.
    search_radius: int = 1000

    # Added to the radius after every empty search.
    incremental_radius: int = 500

    # Number of searches per auto-assignment run.
    # The loop stops after this many regardless of the absolute radius reached.
    max_increments: int = 3

    # Hard ceiling a well-tuned deployment stays under:
    # search_radius + max_increments * incremental_radius <= max_radius.
    # Informational; not enforced by the loop.
    max_radius: int = 5000

    # --- Timing ---
    # Deadline in seconds for one whole auto-assignment run.
    order_assignment_timeout: int = 30

    # Seconds one courier gets to answer an offer before the next candidate is tried.
    # Capped by whatever is left of order_assignment_timeout.
    offer_timeout: int = 10

    # --- Load ---
    # Couriers at or above this many active orders are skipped.
    max_orders_per_delivery_man: int = 5

    # --- Failure handling ---
    # Extra lookups at the same radius when the courier directory fails.
    locator_retries: int = 1

    # Refuse orders outside every active zone instead of treating zones as advisory.
    enforce_zone_coverage: bool = False

    # On exhaustion, set the order to failed instead of leaving it placed.
    mark_order_failed_on_exhaustion: bool = False

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.search_radius <= 0:
            raise InvalidDispatchConfig("searchRadius must be > 0")

        if self.incremental_radius <= 0:
            raise InvalidDispatchConfig("incrementalRadius must be > 0")

        if self.max_increments < 1:
            raise InvalidDispatchConfig("maxIncrements must be >= 1")

        if self.max_radius <= 0:
            raise InvalidDispatchConfig("maxRadius must be > 0")

        if self.order_assignment_timeout <= 0:
            raise InvalidDispatchConfig("orderAssignmentTimeout must be > 0")

        if self.offer_timeout <= 0:
            raise InvalidDispatchConfig("offerTimeout must be > 0")

        if self.max_orders_per_delivery_man < 1:
            raise InvalidDispatchConfig("maxOrdersPerDeliveryMan must be >= 1")

        if self.locator_retries < 0:
            raise InvalidDispatchConfig("locatorRetries must be >= 0")

    @property
    def widest_radius(self) -> int:
        """Radius used by the last search of a run."""
        return self.search_radius + (self.max_increments - 1) * self.incremental_radius

    def radii(self):
        """Every radius one run will try, in order."""
        return [self.search_radius + step * self.incremental_radius for step in range(self.max_increments)]

    def merged(self, changes: Mapping[str, Any]) -> DispatchConfig:
        """
        New config with `changes` applied. Accepts wire (camelCase) or attribute
        names; values are coerced to the field's type. Validates the result.
        """
        types = {f.name: f.type for f in fields(self)}
        normalized: Dict[str, Any] = {}

        for key, value in changes.items():
            name = WIRE_FIELDS.get(key, key)
            if name not in types:
                raise InvalidDispatchConfig(f"Unknown config field: {key}")
            normalized[name] = _coerce(name, types[name], value)

        updated = replace(self, **normalized)
        updated.validate()
        return updated

    def to_wire(self) -> Dict[str, Any]:
        values = asdict(self)
        return {wire: values[name] for wire, name in WIRE_FIELDS.items()}


def _coerce(name: str, type_name: str, value: Any) -> Any:
    # field types are strings because of `from __future__ import annotations`
    if type_name == "bool":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    if isinstance(value, bool):
        raise InvalidDispatchConfig(f"{name} must be a number")

    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidDispatchConfig(f"{name} must be a number") from None


def default_dispatch_config() -> DispatchConfig:
    """
    Convenience factory for the default config.
    """
    config = DispatchConfig()
    config.validate()
    return config


class DispatchConfigStore(Protocol):
    def get(self) -> DispatchConfig:
        ...

    def update(self, changes: Mapping[str, Any]) -> DispatchConfig:
        ...


class InMemoryDispatchConfigStore:
    """
    Singleton holder. get() and update() share one lock, so the
    create-on-first-read cannot run twice.
    """
    def __init__(self, initial: Optional[DispatchConfig] = None):
        self._config = initial
        self._lock = threading.Lock()
        self.creations = 0

    def get(self) -> DispatchConfig:
        with self._lock:
            if self._config is None:
                self._config = default_dispatch_config()
                self.creations += 1
            return self._config

    def update(self, changes: Mapping[str, Any]) -> DispatchConfig:
        with self._lock:
            if self._config is None:
                self._config = default_dispatch_config()
                self.creations += 1
            self._config = self._config.merged(changes)
            return self._config
