"""
Django ORM implementations of the dispatch core's persistence contracts.

Each store converts between ORM rows and the framework-free domain objects
(orders.Order, couriers.Courier, dispatch.DispatchLog, dispatch.DispatchConfig,
zones.DispatchZone) so the AssignmentEngine never touches the ORM directly.
Ids cross the boundary as strings.
"""
import logging
from dataclasses import replace
from decimal import Decimal

from django.db import IntegrityError, transaction

from couriers.models import Courier as CourierRecord, CourierStatus
from dispatch.config import DispatchConfig as DispatchConfigRecord, WIRE_FIELDS
from dispatch.errors import DuplicateZone, InvalidZone, ZoneNotFound
from dispatch.log import (
    AssignmentAttempt as AssignmentAttemptRecord,
    AttemptOutcome,
    DispatchLog as DispatchLogRecord,
    DispatchStatus,
    FailureReason,
    SearchAttempt as SearchAttemptRecord,
)
from orders.models import ACTIVE_ORDER_STATUSES, Order as OrderRecord, OrderStatus
from zones.registry import UPDATABLE_FIELDS, DispatchZone as ZoneRecord, normalize_boundary, validate_zone

from . import models

logger = logging.getLogger(__name__)

CONFIG_FIELDS = tuple(WIRE_FIELDS.values())


def _pk(value):
    """ORM primary key from an external id, or None if it cannot be one."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ----------------
# Orders
# ----------------

def order_to_record(order):
    return OrderRecord(
        id=str(order.pk),
        delivery_location=(order.delivery_lat, order.delivery_lng),
        status=OrderStatus(order.status),
        courier_id=str(order.courier_id) if order.courier_id else None,
        created_at=order.created_at,
    )


class DjangoOrderStore:
    def get(self, order_id):
        pk = _pk(order_id)
        if pk is None:
            return None
        order = models.Order.objects.filter(pk=pk).first()
        return order_to_record(order) if order else None

    def save(self, record):
        models.Order.objects.filter(pk=_pk(record.id)).update(
            status=record.status.value,
            courier_id=_pk(record.courier_id),
        )
        return record

    def active_order_count(self, courier_id):
        return models.Order.objects.filter(
            courier_id=_pk(courier_id),
            status__in=[status.value for status in ACTIVE_ORDER_STATUSES],
        ).count()

    def bind_courier(self, order_id, courier_id, max_active_orders=None):
        """
        Locks the courier row, re-checks its load, then binds.
        Two runs binding the same courier serialize on the row lock.
        """
        with transaction.atomic():
            courier = models.Courier.objects.select_for_update().filter(pk=_pk(courier_id)).first()
            order = models.Order.objects.select_for_update().filter(pk=_pk(order_id)).first()
            if courier is None or order is None:
                return False

            if max_active_orders is not None and self.active_order_count(courier.pk) >= max_active_orders:
                return False

            order.courier = courier
            order.status = models.Order.Status.ASSIGNED
            order.save(update_fields=['courier', 'status', 'updated_at'])
            return True


# ----------------
# Couriers
# ----------------

def courier_to_record(courier):
    return CourierRecord(
        id=str(courier.pk),
        location=(courier.current_lat, courier.current_lng),
        status=CourierStatus(courier.status),
        name=courier.name,
        last_ping_at=courier.location_updated_at,
    )


class DjangoCourierDirectory:
    def get(self, courier_id):
        pk = _pk(courier_id)
        if pk is None:
            return None
        courier = models.Courier.objects.filter(pk=pk).first()
        return courier_to_record(courier) if courier else None

    def active_within(self, min_lat, max_lat, min_lon, max_lon):
        couriers = models.Courier.objects.filter(
            status=models.Courier.Status.ACTIVE,
            current_lat__isnull=False,
            current_lng__isnull=False,
            current_lat__gte=min_lat,
            current_lat__lte=max_lat,
            current_lng__gte=min_lon,
            current_lng__lte=max_lon,
        )
        return [courier_to_record(courier) for courier in couriers]


# ----------------
# Dispatch logs
# ----------------

def log_to_record(log):
    return DispatchLogRecord(
        order_id=str(log.order_id),
        status=DispatchStatus(log.status),
        courier_id=str(log.courier_id) if log.courier_id else None,
        zone_id=str(log.zone_id) if log.zone_id else None,
        failure_reason=FailureReason(log.failure_reason) if log.failure_reason else None,
        search_attempts=[
            SearchAttemptRecord(
                radius=attempt.radius,
                found=attempt.couriers_found,
                timestamp=attempt.timestamp,
                failed=attempt.failed,
            )
            for attempt in log.search_attempts.all()
        ],
        assignment_attempts=[
            AssignmentAttemptRecord(
                courier_id=str(attempt.courier_id) if attempt.courier_id else None,
                outcome=AttemptOutcome(attempt.status),
                timestamp=attempt.timestamp,
            )
            for attempt in log.assignment_attempts.all()
        ],
        created_at=log.created_at,
        updated_at=log.updated_at,
    )


class DjangoDispatchLogStore:
    def upsert(self, record):
        """
        One row per order. Attempts are rewritten from the record so the
        stored sequences always match what the engine appended.
        """
        with transaction.atomic():
            log, created = models.DispatchLog.objects.update_or_create(
                order_id=_pk(record.order_id),
                defaults={
                    'status': record.status.value,
                    'courier_id': _pk(record.courier_id),
                    'zone_id': _pk(record.zone_id),
                    'failure_reason': record.failure_reason.value if record.failure_reason else "",
                    'updated_at': record.updated_at,
                },
            )
            if created:
                log.created_at = record.created_at
                log.save(update_fields=['created_at'])
            else:
                record.created_at = log.created_at

            log.search_attempts.all().delete()
            models.SearchAttempt.objects.bulk_create([
                models.SearchAttempt(
                    log=log,
                    radius=attempt.radius,
                    couriers_found=attempt.found,
                    failed=attempt.failed,
                    timestamp=attempt.timestamp,
                )
                for attempt in record.search_attempts
            ])

            log.assignment_attempts.all().delete()
            models.AssignmentAttempt.objects.bulk_create([
                models.AssignmentAttempt(
                    log=log,
                    courier_id=_pk(attempt.courier_id),
                    status=attempt.outcome.value,
                    timestamp=attempt.timestamp,
                )
                for attempt in record.assignment_attempts
            ])
        return record

    def get(self, order_id):
        pk = _pk(order_id)
        if pk is None:
            return None
        log = models.DispatchLog.objects.filter(order_id=pk).first()
        return log_to_record(log) if log else None

    def queryset(self, status=None, start=None, end=None):
        """
        Filtered, newest-first logs with everything the audit view displays.
        The date range applies only when both ends are given.
        """
        logs = models.DispatchLog.objects.select_related('order', 'courier', 'zone').prefetch_related(
            'search_attempts',
            'assignment_attempts__courier',
        )
        if status:
            logs = logs.filter(status=status)
        if start is not None and end is not None:
            logs = logs.filter(created_at__gte=start, created_at__lte=end)
        return logs.order_by('-created_at', '-id')

    def list(self, status=None, start=None, end=None):
        return [log_to_record(log) for log in self.queryset(status, start, end)]


# ----------------
# Config
# ----------------

def config_to_record(config):
    return DispatchConfigRecord(**{name: getattr(config, name) for name in CONFIG_FIELDS})


class DjangoDispatchConfigStore:
    def get(self):
        return config_to_record(models.DispatchConfig.load())

    def update(self, changes):
        """
        Validates the merged config before writing, then upserts the singleton.
        """
        with transaction.atomic():
            current = config_to_record(models.DispatchConfig.load())
            merged = current.merged(changes)
            models.DispatchConfig.objects.update_or_create(
                pk=models.DispatchConfig.SINGLETON_PK,
                defaults={name: getattr(merged, name) for name in CONFIG_FIELDS},
            )
        logger.info("Dispatch config updated: %s", sorted(changes))
        return merged


# ----------------
# Zones
# ----------------

def zone_to_record(zone):
    return ZoneRecord(
        id=str(zone.pk),
        name=zone.name,
        boundary=normalize_boundary(zone.coordinates),
        delivery_fee=Decimal(zone.delivery_fee),
        minimum_delivery_time=zone.minimum_delivery_time,
        maximum_delivery_time=zone.maximum_delivery_time,
        is_active=zone.status,
    )


def _boundary_to_json(boundary):
    return [{"latitude": lat, "longitude": lon} for lat, lon in boundary]


class DjangoZoneRegistry:
    def create(self, name, boundary, delivery_fee, minimum_delivery_time, maximum_delivery_time=None, is_active=True):
        record = ZoneRecord(
            id="",
            name=name,
            boundary=normalize_boundary(boundary),
            delivery_fee=Decimal(str(delivery_fee)),
            minimum_delivery_time=int(minimum_delivery_time),
            maximum_delivery_time=maximum_delivery_time,
            is_active=is_active,
        )
        validate_zone(record)

        if models.DispatchZone.objects.filter(name=name).exists():
            raise DuplicateZone(name)

        try:
            with transaction.atomic():
                zone = models.DispatchZone.objects.create(
                    name=record.name,
                    coordinates=_boundary_to_json(record.boundary),
                    delivery_fee=record.delivery_fee,
                    minimum_delivery_time=record.minimum_delivery_time,
                    maximum_delivery_time=record.maximum_delivery_time,
                    status=record.is_active,
                )
        except IntegrityError:
            # lost a create race on the unique name
            raise DuplicateZone(name) from None
        return zone_to_record(zone)

    def list(self):
        return [zone_to_record(zone) for zone in models.DispatchZone.objects.order_by('name')]

    def get(self, zone_id):
        pk = _pk(zone_id)
        zone = models.DispatchZone.objects.filter(pk=pk).first() if pk is not None else None
        if zone is None:
            raise ZoneNotFound(zone_id)
        return zone_to_record(zone)

    def update(self, zone_id, fields):
        current = self.get(zone_id)

        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise InvalidZone(f"unknown zone fields: {', '.join(sorted(unknown))}")

        changes = dict(fields)
        if "boundary" in changes:
            changes["boundary"] = normalize_boundary(changes["boundary"])
        if "delivery_fee" in changes:
            changes["delivery_fee"] = Decimal(str(changes["delivery_fee"]))

        updated = replace(current, **changes)
        validate_zone(updated)

        if updated.name != current.name and models.DispatchZone.objects.filter(name=updated.name).exclude(pk=_pk(current.id)).exists():
            raise DuplicateZone(updated.name)

        try:
            with transaction.atomic():
                models.DispatchZone.objects.filter(pk=_pk(current.id)).update(
                    name=updated.name,
                    coordinates=_boundary_to_json(updated.boundary),
                    delivery_fee=updated.delivery_fee,
                    minimum_delivery_time=updated.minimum_delivery_time,
                    maximum_delivery_time=updated.maximum_delivery_time,
                    status=updated.is_active,
                )
        except IntegrityError:
            raise DuplicateZone(updated.name) from None
        return updated

    def find_containing(self, point):
        for zone in models.DispatchZone.objects.filter(status=True).order_by('name'):
            record = zone_to_record(zone)
            if record.contains(point):
                return record
        return None
