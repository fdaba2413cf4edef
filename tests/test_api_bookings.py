"""API tests for the public storefront: catalog, coupon preview and checkout."""
from decimal import Decimal

from ticketing.utils.payments import FAILED

API = "/api/v1"


def _checkout(client, catalog, visitor_data, items, coupon_code=None):
    body = {
        "time_slot_id": str(catalog.slot_id),
        "items": [{"sku_id": str(sku_id), "quantity": qty} for sku_id, qty in items],
        "coupon_code": coupon_code,
        **visitor_data,
    }
    return client.post(f"{API}/bookings/", json=body)


def test_catalog(client, catalog):
    dates = client.get(f"{API}/catalog/dates").json()
    assert [d["id"] for d in dates] == [str(catalog.date_id)]

    slots = client.get(f"{API}/catalog/dates/{catalog.date_id}/time-slots").json()
    assert len(slots) == 1
    assert {s["name"]: s["available_quantity"] for s in slots[0]["skus"]} == {
        "Individual": 10,
        "Group of 4": 5,
    }

    skus = client.get(f"{API}/catalog/skus").json()
    assert [s["name"] for s in skus] == ["Individual", "Group of 4"]

    availability = client.get(f"{API}/catalog/time-slots/{catalog.slot_id}/availability").json()
    assert availability["start_time"] == "10:00:00"


def test_unknown_slot_is_404(client, catalog):
    response = client.get(f"{API}/catalog/time-slots/{catalog.date_id}/availability")
    assert response.status_code == 404


def test_coupon_preview(client, catalog, make_coupon):
    make_coupon("SAVE10", event_id=catalog.event_id)

    response = client.post(f"{API}/coupons/validate", json={
        "code": "save10", "event_id": str(catalog.event_id), "order_total": "2400",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert Decimal(body["discount_amount"]) == Decimal("240")
    assert Decimal(body["final_total"]) == Decimal("2160")
    assert body["coupon"]["code"] == "SAVE10"


def test_coupon_preview_without_event(client, catalog, make_coupon):
    make_coupon("EVT10", event_id=catalog.event_id)

    response = client.post(f"{API}/coupons/validate", json={"code": "EVT10", "order_total": "1000"})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert Decimal(body["final_total"]) == Decimal("900")


def test_coupon_preview_rejection_is_still_200(client, catalog):
    response = client.post(f"{API}/coupons/validate", json={"code": "NOPE", "order_total": 100})
    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "error_message": "Invalid coupon code",
        "discount_amount": None,
        "final_total": None,
        "coupon": None,
    }


def test_checkout_pay_confirm(client, catalog, visitor_data, make_coupon, notifier):
    make_coupon("SAVE10")

    response = _checkout(client, catalog, visitor_data, [(catalog.individual_id, 2)], "SAVE10")
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert Decimal(order["total_amount"]) == Decimal("2160")

    payment = client.post(f"{API}/bookings/{order['id']}/payment").json()
    assert payment["amount_paise"] == 216000
    assert "merchant_order_id=" in payment["redirect_url"]

    confirmed = client.post(f"{API}/bookings/{order['id']}/confirm").json()
    assert confirmed["changed"] is True
    assert confirmed["order"]["status"] == "confirmed"
    assert confirmed["order"]["qr_payload"]
    assert [m.recipient for m in notifier.sent] == ["asha@example.com"]

    replay = client.post(f"{API}/bookings/{order['id']}/confirm").json()
    assert replay["changed"] is False
    assert len(notifier.sent) == 1


def test_confirm_without_payment(client, catalog, visitor_data):
    order = _checkout(client, catalog, visitor_data, [(catalog.individual_id, 1)]).json()
    response = client.post(f"{API}/bookings/{order['id']}/confirm")
    assert response.status_code == 402


def test_confirm_after_failed_payment(client, catalog, visitor_data, gateway):
    order = _checkout(client, catalog, visitor_data, [(catalog.individual_id, 1)]).json()
    payment = client.post(f"{API}/bookings/{order['id']}/payment").json()
    gateway.mark_failed(payment["merchant_order_id"])

    response = client.post(f"{API}/bookings/{order['id']}/confirm")
    assert response.status_code == 402
    assert client.get(f"{API}/bookings/{order['id']}").json()["status"] == "pending"


def test_checkout_insufficient_inventory(client, catalog, visitor_data):
    response = _checkout(client, catalog, visitor_data, [(catalog.group_id, 6)])
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error"] == "insufficient_inventory"
    assert detail["available"] == 5
    assert detail["requested"] == 6


def test_checkout_invalid_coupon(client, catalog, visitor_data):
    response = _checkout(client, catalog, visitor_data, [(catalog.individual_id, 1)], "NOPE")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid coupon code"


def test_checkout_invalid_visitor(client, catalog, visitor_data):
    visitor_data["phone"] = "123"
    response = _checkout(client, catalog, visitor_data, [(catalog.individual_id, 1)])
    assert response.status_code == 422


def test_cancel(client, catalog, visitor_data):
    order = _checkout(client, catalog, visitor_data, [(catalog.individual_id, 3)]).json()

    response = client.post(f"{API}/bookings/{order['id']}/cancel", json={"reason": "changed plans"})
    assert response.status_code == 200
    assert response.json()["order"]["status"] == "cancelled"
    assert response.json()["order"]["cancel_reason"] == "changed plans"

    availability = client.get(f"{API}/catalog/time-slots/{catalog.slot_id}/availability").json()
    assert {s["name"]: s["available_quantity"] for s in availability["skus"]}["Individual"] == 10


def test_unknown_order_is_404(client):
    response = client.get(f"{API}/bookings/00000000-0000-4000-8000-000000000000")
    assert response.status_code == 404


def test_store_outage_is_503(client):
    from sqlalchemy.exc import OperationalError

    from ticketing.db.session import get_db
    from ticketing.main import app

    class BrokenSession:
        def query(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_db] = lambda: BrokenSession()
    response = client.get(f"{API}/catalog/skus")

    assert response.status_code == 503
    assert response.json()["error"] == "store_unavailable"
