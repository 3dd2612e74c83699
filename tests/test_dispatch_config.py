import threading

import pytest

from dispatch.config import DispatchConfig, InMemoryDispatchConfigStore, default_dispatch_config
from dispatch.errors import InvalidDispatchConfig


def test_defaults():
    config = default_dispatch_config()

    assert config.search_radius == 1000
    assert config.incremental_radius == 500
    assert config.max_increments == 3
    assert config.max_radius == 5000
    assert config.order_assignment_timeout == 30
    assert config.offer_timeout == 10
    assert config.max_orders_per_delivery_man == 5


def test_radii_grow_by_exactly_the_increment():
    config = DispatchConfig(search_radius=1000, incremental_radius=500, max_increments=3)

    assert config.radii() == [1000, 1500, 2000]
    assert config.widest_radius == 2000


def test_get_creates_singleton_with_defaults_on_first_read():
    store = InMemoryDispatchConfigStore()

    first = store.get()
    second = store.get()

    assert first == DispatchConfig()
    assert first is second
    assert store.creations == 1


def test_concurrent_first_reads_create_exactly_one_singleton():
    """
    N callers racing on an empty store must end with one creation, and all
    of them must see the same object.
    """
    store = InMemoryDispatchConfigStore()
    barrier = threading.Barrier(16)
    seen = []

    def read():
        barrier.wait()
        seen.append(store.get())

    threads = [threading.Thread(target=read) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.creations == 1
    assert len(seen) == 16
    assert all(config is seen[0] for config in seen)


def test_update_merges_wire_fields_and_creates_if_absent():
    store = InMemoryDispatchConfigStore()

    updated = store.update({"searchRadius": "1200", "maxIncrements": 4})

    assert store.creations == 1
    assert updated.search_radius == 1200
    assert updated.max_increments == 4
    # untouched fields keep their defaults
    assert updated.incremental_radius == 500
    assert store.get() == updated


def test_update_accepts_attribute_names_and_booleans():
    store = InMemoryDispatchConfigStore()

    updated = store.update({"mark_order_failed_on_exhaustion": "true", "enforceZoneCoverage": True})

    assert updated.mark_order_failed_on_exhaustion is True
    assert updated.enforce_zone_coverage is True


@pytest.mark.parametrize("changes", [
    {"searchRadius": 0},
    {"incrementalRadius": -5},
    {"maxIncrements": 0},
    {"orderAssignmentTimeout": 0},
    {"offerTimeout": 0},
    {"maxOrdersPerDeliveryMan": 0},
    {"locatorRetries": -1},
    {"searchRadius": "wide"},
    {"searchRadius": True},
    {"colour": "blue"},
])
def test_invalid_updates_are_rejected_and_leave_config_untouched(changes):
    store = InMemoryDispatchConfigStore()
    before = store.get()

    with pytest.raises(InvalidDispatchConfig):
        store.update(changes)

    assert store.get() == before


def test_to_wire_uses_camel_case_keys():
    wire = DispatchConfig().to_wire()

    assert wire["searchRadius"] == 1000
    assert wire["incrementalRadius"] == 500
    assert wire["maxOrdersPerDeliveryMan"] == 5
    assert wire["offerTimeout"] == 10
    assert "search_radius" not in wire
