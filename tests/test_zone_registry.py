from decimal import Decimal

import pytest

from dispatch.errors import DuplicateZone, InvalidZone, ZoneNotFound
from zones.registry import InMemoryZoneRegistry

AVONDALE = [(-17.80, 31.03), (-17.80, 31.06), (-17.78, 31.06), (-17.78, 31.03)]
CBD = [
    {"latitude": -17.84, "longitude": 31.03},
    {"latitude": -17.84, "longitude": 31.07},
    {"latitude": -17.81, "longitude": 31.07},
    {"latitude": -17.81, "longitude": 31.03},
]


@pytest.fixture
def registry():
    registry = InMemoryZoneRegistry()
    registry.create("CBD", CBD, delivery_fee="2.50", minimum_delivery_time=20)
    registry.create("Avondale", AVONDALE, delivery_fee=3, minimum_delivery_time=25, maximum_delivery_time=45)
    return registry


def test_create_normalizes_boundary_and_fee(registry):
    cbd = registry.list()[1]

    assert cbd.name == "CBD"
    assert cbd.boundary[0] == (-17.84, 31.03)
    assert cbd.delivery_fee == Decimal("2.50")
    assert cbd.is_active


def test_list_is_sorted_by_name(registry):
    registry.create("Borrowdale", AVONDALE, delivery_fee=4, minimum_delivery_time=30)

    assert [zone.name for zone in registry.list()] == ["Avondale", "Borrowdale", "CBD"]


def test_duplicate_name_fails_and_does_not_mutate(registry):
    before = registry.list()

    with pytest.raises(DuplicateZone):
        registry.create("CBD", AVONDALE, delivery_fee=9, minimum_delivery_time=1)

    assert registry.list() == before


def test_duplicate_check_is_case_sensitive(registry):
    registry.create("cbd", CBD, delivery_fee=1, minimum_delivery_time=10)

    assert [zone.name for zone in registry.list()] == ["Avondale", "CBD", "cbd"]


def test_update_changes_fee_time_and_status(registry):
    zone = registry.list()[0]

    updated = registry.update(zone.id, {"delivery_fee": "3.75", "minimum_delivery_time": 15, "is_active": False})

    assert updated.delivery_fee == Decimal("3.75")
    assert updated.minimum_delivery_time == 15
    assert not updated.is_active
    assert registry.get(zone.id) == updated


def test_update_unknown_zone_fails(registry):
    with pytest.raises(ZoneNotFound):
        registry.update("999", {"delivery_fee": 1})


def test_update_cannot_rename_onto_another_zone(registry):
    avondale = registry.list()[0]

    with pytest.raises(DuplicateZone):
        registry.update(avondale.id, {"name": "CBD"})

    assert registry.get(avondale.id).name == "Avondale"


@pytest.mark.parametrize("kwargs", [
    {"name": "Tiny", "boundary": AVONDALE[:2], "delivery_fee": 1, "minimum_delivery_time": 1},
    {"name": "Cheap", "boundary": AVONDALE, "delivery_fee": -1, "minimum_delivery_time": 1},
    {"name": "Fast", "boundary": AVONDALE, "delivery_fee": 1, "minimum_delivery_time": -1},
    {"name": "Odd", "boundary": AVONDALE, "delivery_fee": 1, "minimum_delivery_time": 30, "maximum_delivery_time": 10},
    {"name": "  ", "boundary": AVONDALE, "delivery_fee": 1, "minimum_delivery_time": 1},
])
def test_create_rejects_invalid_zones(kwargs):
    registry = InMemoryZoneRegistry()

    with pytest.raises(InvalidZone):
        registry.create(**kwargs)

    assert registry.list() == []


def test_find_containing_skips_inactive_zones(registry):
    point = (-17.79, 31.05)  # inside Avondale only
    avondale = registry.find_containing(point)
    assert avondale.name == "Avondale"

    registry.update(avondale.id, {"is_active": False})

    assert registry.find_containing(point) is None
    assert registry.find_containing((0.0, 0.0)) is None
