from django.db import models
from django.utils import timezone
from phonenumber_field.modelfields import PhoneNumberField


class Courier(models.Model):
    """
    Delivery man as stored by the courier directory.
    Location is the last reported position; only ACTIVE couriers are located.
    """
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        BUSY = "busy", "Busy"
        INACTIVE = "inactive", "Inactive"
        OFFLINE = "offline", "Offline"

    name = models.CharField(max_length=255)

    # Uses PHONENUMBER_DEFAULT_REGION from settings to validate local numbers
    phone_number = PhoneNumberField(blank=True, null=True, unique=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.INACTIVE, db_index=True)

    current_lat = models.FloatField(blank=True, null=True)
    current_lng = models.FloatField(blank=True, null=True)
    location_updated_at = models.DateTimeField(blank=True, null=True)

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"


class Order(models.Model):
    """
    The slice of the marketplace order the dispatch core reads and writes.
    Lifecycle: Placed -> Assigned -> Picked Up -> Delivered (or Failed).
    """
    class Status(models.TextChoices):
        PLACED = "placed", "Placed"
        ASSIGNED = "assigned", "Assigned"
        PICKED_UP = "picked_up", "Picked Up"
        DELIVERED = "delivered", "Delivered"
        FAILED = "failed", "Failed"

    # Courier is set only by the dispatch engine or a manual assignment
    courier = models.ForeignKey(Courier, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PLACED)

    delivery_address = models.TextField(blank=True)
    # Coordinates the courier needs to reach
    delivery_lat = models.FloatField()
    delivery_lng = models.FloatField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Order #{self.id} - {self.status}"


class DispatchConfig(models.Model):
    """
    Process-wide singleton, always stored under SINGLETON_PK.
    Use DispatchConfig.load() rather than querying directly.
    """
    SINGLETON_PK = 1

    search_radius = models.PositiveIntegerField(default=1000, help_text="Meters")
    incremental_radius = models.PositiveIntegerField(default=500, help_text="Meters")
    max_increments = models.PositiveIntegerField(default=3)
    max_radius = models.PositiveIntegerField(default=5000, help_text="Meters")
    order_assignment_timeout = models.PositiveIntegerField(default=30, help_text="Seconds")
    offer_timeout = models.PositiveIntegerField(default=10, help_text="Seconds per courier offer")
    max_orders_per_delivery_man = models.PositiveIntegerField(default=5)

    locator_retries = models.PositiveIntegerField(default=1)
    enforce_zone_coverage = models.BooleanField(default=False)
    mark_order_failed_on_exhaustion = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    @classmethod
    def load(cls):
        # get_or_create retries the read on IntegrityError, so concurrent
        # first reads converge on one row
        config, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return config

    def __str__(self):
        return "Dispatch configuration"


class DispatchZone(models.Model):
    name = models.CharField(max_length=255, unique=True)
    # Ordered boundary: [{"latitude": -17.8, "longitude": 31.0}, ...]
    coordinates = models.JSONField(default=list)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2)
    minimum_delivery_time = models.PositiveIntegerField(help_text="Minutes")
    maximum_delivery_time = models.PositiveIntegerField(blank=True, null=True, help_text="Minutes")
    status = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class DispatchLog(models.Model):
    """
    One row per order (upserted), never deleted.
    """
    class Status(models.TextChoices):
        SEARCHING = "searching", "Searching"
        ASSIGNED = "assigned", "Assigned"
        PICKED_UP = "picked_up", "Picked Up"
        DELIVERED = "delivered", "Delivered"
        FAILED = "failed", "Failed"

    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='dispatch_log')
    courier = models.ForeignKey(Courier, on_delete=models.SET_NULL, null=True, blank=True, related_name='dispatch_logs')
    zone = models.ForeignKey(DispatchZone, on_delete=models.SET_NULL, null=True, blank=True, related_name='dispatch_logs')

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SEARCHING)
    failure_reason = models.CharField(max_length=40, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Dispatch for order #{self.order_id} - {self.status}"


class SearchAttempt(models.Model):
    log = models.ForeignKey(DispatchLog, on_delete=models.CASCADE, related_name='search_attempts')
    radius = models.PositiveIntegerField()
    couriers_found = models.PositiveIntegerField(default=0)
    failed = models.BooleanField(default=False)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['id']


class AssignmentAttempt(models.Model):
    class Outcome(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"
        TIMEOUT = "timeout", "Timeout"

    log = models.ForeignKey(DispatchLog, on_delete=models.CASCADE, related_name='assignment_attempts')
    courier = models.ForeignKey(Courier, on_delete=models.SET_NULL, null=True, blank=True, related_name='assignment_attempts')
    status = models.CharField(max_length=20, choices=Outcome.choices, default=Outcome.PENDING)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['id']
