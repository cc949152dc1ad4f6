from fastapi.testclient import TestClient
from jose import jwt

from berry_events.core.config import settings
from berry_events.main import app

PLUMBING = {
    "service_id": "plumbing",
    "selections": {"issue": "burst-pipe", "urgency": "emergency"},
    "tip_amount": "100",
}

EFT = {
    "payment_method": "eft",
    "bank_name": "Capitec",
    "branch_code": "470010",
    "account_number": "1234567890",
    "account_holder": "T. Nkosi",
}


def _bearer(user_id):
    token = jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


def _place_order(client, headers=None):
    client.post("/api/v1/cart/items", json=PLUMBING, headers=headers)
    res = client.post("/api/v1/cart/checkout", json=EFT, headers=headers)
    assert res.status_code == 201
    return res.json()["order"]


def test_list_orders_requires_auth(api):
    client, _ = api
    assert client.get("/api/v1/orders").status_code == 401


def test_user_lists_and_reads_own_orders(api):
    client, _ = api
    headers = _bearer(11)
    order = _place_order(client, headers)
    assert order["user_id"] == 11
    assert order["account_last4"] == "7890"
    assert order["payment_method"] == "eft"

    listed = client.get("/api/v1/orders", headers=headers).json()
    assert [o["id"] for o in listed] == [order["id"]]

    res = client.get(f"/api/v1/orders/{order['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["items"][0]["service_id"] == "plumbing"
    assert res.headers.get("Cache-Control") == "no-store"

    assert client.get("/api/v1/orders", headers=_bearer(12)).json() == []
    assert client.get(f"/api/v1/orders/{order['id']}", headers=_bearer(12)).status_code == 404


def test_guest_reads_order_from_own_session_only(api):
    client, _ = api
    order = _place_order(client)
    assert client.get(f"/api/v1/orders/{order['id']}").status_code == 200
    assert TestClient(app).get(f"/api/v1/orders/{order['id']}").status_code == 404


def test_missing_order_is_404(api):
    client, _ = api
    res = client.get("/api/v1/orders/999", headers=_bearer(1))
    assert res.status_code == 404
    assert res.json()["detail"]["message"] == "Order not found"


def test_status_transitions(api):
    client, _ = api
    headers = _bearer(3)
    order = _place_order(client, headers)
    url = f"/api/v1/orders/{order['id']}/status"

    res = client.patch(url, json={"status": "in_progress"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["status"] == "in_progress"
    assert client.patch(url, json={"status": "completed"}, headers=headers).json()["status"] == "completed"

    res = client.patch(url, json={"status": "cancelled"}, headers=headers)
    assert res.status_code == 422
    assert res.json()["detail"]["field_errors"] == {"status": "invalid transition"}
    assert client.patch(url, json={"status": "shipped"}, headers=headers).status_code == 422


def test_confirmed_order_can_be_cancelled(api):
    client, _ = api
    headers = _bearer(4)
    order = _place_order(client, headers)
    res = client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "cancelled"}, headers=headers)
    assert res.json()["status"] == "cancelled"


def test_receipt_pdf(api):
    client, _ = api
    headers = _bearer(5)
    order = _place_order(client, headers)
    res = client.get(f"/api/v1/orders/{order['id']}/receipt.pdf", headers=headers)
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.content.startswith(b"%PDF")
    assert order["order_number"] in res.headers["content-disposition"]
