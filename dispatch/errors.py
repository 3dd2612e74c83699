"""
Error kinds raised by the dispatch core.

Not-found and duplicate errors are raised before any state is touched, so a
caller that catches them can assume nothing was written.
Exhausting the search is NOT an error: it is a failed AssignmentResult.
"""


class DispatchError(Exception):
    """Base class for every error the dispatch core raises on purpose."""
    pass


class OrderNotFound(DispatchError):
    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class CourierNotFound(DispatchError):
    def __init__(self, courier_id):
        super().__init__(f"Courier {courier_id} not found")
        self.courier_id = courier_id


class ZoneNotFound(DispatchError):
    def __init__(self, zone_id):
        super().__init__(f"Zone {zone_id} not found")
        self.zone_id = zone_id


class DuplicateZone(DispatchError):
    def __init__(self, name):
        super().__init__(f"Dispatch Zone with name '{name}' already exists. Please create another one.")
        self.name = name


class InvalidZone(DispatchError):
    """Raised when zone fields fail bounds checks (boundary, fee, times)."""
    pass


class InvalidDispatchConfig(DispatchError):
    """Raised when a config update carries unknown keys or out-of-range values."""
    pass


class ConfigUnavailable(DispatchError):
    """The config store could neither read nor create the singleton."""
    pass


class LocatorFailure(DispatchError):
    """
    Wraps an error from the courier directory. The locator never raises this;
    it is attached to failed LocatorResults and logged by the engine.
    """
    def __init__(self, radius, cause=None):
        super().__init__(f"Courier lookup failed at radius {radius}m: {cause}")
        self.radius = radius
        self.cause = cause
