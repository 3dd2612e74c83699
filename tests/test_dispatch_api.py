import pytest
from rest_framework.test import APIClient

from logistics import models
from logistics.services import start_auto_assignment

from conftest import HARARE, offset_north

pytestmark = pytest.mark.django_db

CONFIG_URL = "/api/v1/dispatch/config/"
ZONES_URL = "/api/v1/dispatch/zones/"
ASSIGN_URL = "/api/v1/dispatch/assign/"
AUTO_ASSIGN_URL = "/api/v1/dispatch/auto-assign/"
LOGS_URL = "/api/v1/dispatch/logs/"

AROUND_HARARE = [
    {"latitude": -17.9, "longitude": 30.9},
    {"latitude": -17.9, "longitude": 31.2},
    {"latitude": -17.7, "longitude": 31.2},
    {"latitude": -17.7, "longitude": 30.9},
]


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def order():
    return models.Order.objects.create(delivery_address="Samora Machel Ave", delivery_lat=HARARE[0], delivery_lng=HARARE[1])


def make_courier(name, meters_north, status=models.Courier.Status.ACTIVE):
    lat, lng = offset_north(HARARE, meters_north)
    return models.Courier.objects.create(name=name, status=status, current_lat=lat, current_lng=lng)


# ----------------
# Config
# ----------------

def test_config_get_creates_defaults(client):
    response = client.get(CONFIG_URL)

    assert response.status_code == 200
    assert response.data["searchRadius"] == 1000
    assert response.data["incrementalRadius"] == 500
    assert response.data["maxIncrements"] == 3
    assert response.data["maxRadius"] == 5000
    assert response.data["orderAssignmentTimeout"] == 30
    assert response.data["offerTimeout"] == 10
    assert response.data["maxOrdersPerDeliveryMan"] == 5
    assert models.DispatchConfig.objects.count() == 1


def test_config_put_merges_fields(client):
    response = client.put(CONFIG_URL, {"searchRadius": 1200, "maxIncrements": 4}, format="json")

    assert response.status_code == 200
    assert response.data["searchRadius"] == 1200
    assert response.data["maxIncrements"] == 4
    assert response.data["incrementalRadius"] == 500
    assert client.get(CONFIG_URL).data["searchRadius"] == 1200
    assert models.DispatchConfig.objects.count() == 1


def test_config_routes_accept_a_missing_trailing_slash(client):
    response = client.put(CONFIG_URL.rstrip("/"), {"offerTimeout": 15}, format="json")

    assert response.status_code == 200
    assert response.data["offerTimeout"] == 15
    assert client.get(CONFIG_URL.rstrip("/")).data["offerTimeout"] == 15


def test_zone_and_log_routes_accept_a_missing_trailing_slash(client):
    assert client.post(ZONES_URL.rstrip("/"), _zone_body(), format="json").status_code == 201
    zone_id = client.get(ZONES_URL.rstrip("/")).data[0]["id"]

    assert client.put(f"{ZONES_URL}{zone_id}", {"deliveryFee": "1.00"}, format="json").status_code == 200
    assert client.get(LOGS_URL.rstrip("/")).status_code == 200


@pytest.mark.parametrize("body", [
    {"searchRadius": 0},
    {"maxIncrements": "many"},
    {"colour": "blue"},
])
def test_config_put_rejects_bad_values(client, body):
    response = client.put(CONFIG_URL, body, format="json")

    assert response.status_code == 400
    assert client.get(CONFIG_URL).data["searchRadius"] == 1000


# ----------------
# Zones
# ----------------

def _zone_body(name="CBD", **overrides):
    body = {"name": name, "coordinates": AROUND_HARARE, "deliveryFee": "2.50", "minimumDeliveryTime": 20}
    body.update(overrides)
    return body


def test_create_zone(client):
    response = client.post(ZONES_URL, _zone_body(), format="json")

    assert response.status_code == 201
    assert response.data["name"] == "CBD"
    assert response.data["deliveryFee"] == "2.50"
    assert response.data["status"] is True
    assert response.data["coordinates"][0] == {"latitude": -17.9, "longitude": 30.9}


def test_create_duplicate_zone_is_400(client):
    client.post(ZONES_URL, _zone_body(), format="json")

    response = client.post(ZONES_URL, _zone_body(deliveryFee="9.00"), format="json")

    assert response.status_code == 400
    assert "already exists" in response.data["message"]
    assert models.DispatchZone.objects.count() == 1


def test_create_zone_with_short_boundary_is_400(client):
    response = client.post(ZONES_URL, _zone_body(coordinates=AROUND_HARARE[:2]), format="json")

    assert response.status_code == 400
    assert models.DispatchZone.objects.count() == 0


def test_list_zones_sorted_by_name(client):
    for name in ("Mbare", "Avondale", "CBD"):
        client.post(ZONES_URL, _zone_body(name), format="json")

    response = client.get(ZONES_URL)

    assert [zone["name"] for zone in response.data] == ["Avondale", "CBD", "Mbare"]


def test_update_zone(client):
    zone_id = client.post(ZONES_URL, _zone_body(), format="json").data["id"]

    response = client.put(f"{ZONES_URL}{zone_id}/", {"deliveryFee": "3.75", "status": False}, format="json")

    assert response.status_code == 200
    assert response.data["deliveryFee"] == "3.75"
    assert response.data["status"] is False
    assert response.data["name"] == "CBD"


def test_update_unknown_zone_is_404(client):
    response = client.put(f"{ZONES_URL}999/", {"deliveryFee": "1.00"}, format="json")

    assert response.status_code == 404
    assert response.data["message"] == "Zone 999 not found"


# ----------------
# Manual assignment
# ----------------

def test_manual_assign(client, order):
    courier = make_courier("Tendai", 8000)

    response = client.post(ASSIGN_URL, {"orderId": order.pk, "courierId": courier.pk}, format="json")

    assert response.status_code == 200
    assert "success" not in response.data
    assert response.data["order"]["courier"] == courier.pk
    assert response.data["order"]["status"] == "assigned"

    log = response.data["dispatchLog"]
    assert log["status"] == "assigned"
    assert log["searchAttempts"] == []
    assert [(a["courier"]["id"], a["status"]) for a in log["assignmentAttempts"]] == [(courier.pk, "accepted")]


def test_manual_assign_unknown_order_is_404(client):
    courier = make_courier("Tendai", 100)

    response = client.post(ASSIGN_URL, {"orderId": 999, "courierId": courier.pk}, format="json")

    assert response.status_code == 404
    assert response.data == {"message": "Order 999 not found"}


def test_manual_assign_unknown_courier_is_404_and_writes_nothing(client, order):
    response = client.post(ASSIGN_URL, {"orderId": order.pk, "courierId": 999}, format="json")

    assert response.status_code == 404
    assert models.DispatchLog.objects.count() == 0
    order.refresh_from_db()
    assert order.courier_id is None


# ----------------
# Auto-assignment
# ----------------

def test_auto_assign_binds_nearest_active_courier(client, order):
    far = make_courier("Far", 1400)
    near = make_courier("Near", 1200)
    make_courier("Sleeping", 50, status=models.Courier.Status.OFFLINE)

    response = client.post(AUTO_ASSIGN_URL, {"orderId": order.pk}, format="json")

    assert response.status_code == 200
    assert response.data["success"] is True
    assert response.data["order"]["courier"] == near.pk
    log = response.data["dispatchLog"]
    assert [(a["radius"], a["deliveryMenFound"]) for a in log["searchAttempts"]] == [(1000, 0), (1500, 2)]
    assert log["courier"]["id"] == near.pk
    assert far.pk not in [a["courier"]["id"] for a in log["assignmentAttempts"]]


def test_auto_assign_nobody_nearby_is_not_an_http_error(client, order):
    make_courier("Too far", 9000)

    response = client.post(AUTO_ASSIGN_URL, {"orderId": order.pk}, format="json")

    assert response.status_code == 200
    assert response.data["success"] is False
    assert response.data["error"] == "exhausted"
    assert response.data["order"]["courier"] is None
    assert response.data["order"]["status"] == "placed"
    assert len(response.data["dispatchLog"]["searchAttempts"]) == 3
    assert response.data["dispatchLog"]["failureReason"] == "exhausted"


def test_auto_assign_respects_courier_load(client, order):
    client.put(CONFIG_URL, {"maxOrdersPerDeliveryMan": 1}, format="json")
    busy = make_courier("Busy", 100)
    free = make_courier("Free", 600)
    models.Order.objects.create(delivery_lat=0, delivery_lng=0, courier=busy, status=models.Order.Status.PICKED_UP)

    response = client.post(AUTO_ASSIGN_URL, {"orderId": order.pk}, format="json")

    assert response.data["order"]["courier"] == free.pk


def test_auto_assign_attaches_zone(client, order):
    client.post(ZONES_URL, _zone_body("Harare", deliveryFee="4.00", minimumDeliveryTime=25), format="json")
    make_courier("Near", 100)

    response = client.post(AUTO_ASSIGN_URL, {"orderId": order.pk}, format="json")

    assert response.data["zone"]["name"] == "Harare"
    assert response.data["zone"]["deliveryFee"] == "4.00"
    assert response.data["dispatchLog"]["zone"] == models.DispatchZone.objects.get().pk


def test_auto_assign_unknown_order_is_404(client):
    response = client.post(AUTO_ASSIGN_URL, {"orderId": 999}, format="json")

    assert response.status_code == 404
    assert models.DispatchLog.objects.count() == 0


def test_rerunning_auto_assign_keeps_one_log(client, order):
    client.post(AUTO_ASSIGN_URL, {"orderId": order.pk}, format="json")
    make_courier("Latecomer", 100)

    response = client.post(AUTO_ASSIGN_URL, {"orderId": order.pk}, format="json")

    assert response.data["success"] is True
    assert models.DispatchLog.objects.count() == 1
    assert len(response.data["dispatchLog"]["searchAttempts"]) == 1


def test_start_auto_assignment_entry_point(order):
    make_courier("Near", 100)

    outcome = start_auto_assignment(str(order.pk))

    assert outcome["success"] is True
    assert outcome["order"].courier_id is not None
    assert start_auto_assignment("999") == {"success": False, "error": "Order 999 not found"}


# ----------------
# Logs
# ----------------

@pytest.fixture
def two_logs(client):
    assigned = models.Order.objects.create(delivery_lat=HARARE[0], delivery_lng=HARARE[1])
    failed = models.Order.objects.create(delivery_lat=0.0, delivery_lng=0.0)
    make_courier("Near", 100)
    client.post(AUTO_ASSIGN_URL, {"orderId": assigned.pk}, format="json")
    client.post(AUTO_ASSIGN_URL, {"orderId": failed.pk}, format="json")
    return assigned, failed


def test_logs_newest_first(client, two_logs):
    assigned, failed = two_logs

    response = client.get(LOGS_URL)

    assert response.status_code == 200
    assert [log["order"]["id"] for log in response.data] == [failed.pk, assigned.pk]


def test_logs_filter_by_status(client, two_logs):
    assigned, _ = two_logs

    response = client.get(LOGS_URL, {"status": "assigned"})

    assert [log["order"]["id"] for log in response.data] == [assigned.pk]


def test_logs_date_range_needs_both_ends(client, two_logs):
    assert len(client.get(LOGS_URL, {"startDate": "2999-01-01T00:00:00Z"}).data) == 2
    assert client.get(LOGS_URL, {"startDate": "2999-01-01T00:00:00Z", "endDate": "2999-12-31T00:00:00Z"}).data == []
    assert len(client.get(LOGS_URL, {"startDate": "2000-01-01T00:00:00Z", "endDate": "2999-12-31T00:00:00Z"}).data) == 2


def test_logs_reject_unknown_status(client):
    assert client.get(LOGS_URL, {"status": "lost"}).status_code == 400
