import logging
from decimal import Decimal

from jose import jwt

from berry_events.core.config import settings

CLEANING = {
    "service_id": "house-cleaning",
    "selections": {
        "cleaning_type": "deep-clean",
        "property_size": "medium",
        "add_ons": ["windows"],
        "materials": "bring",
    },
    "tip_amount": "50",
    "gate_code": "#4821",
}

CARD = {
    "payment_method": "card",
    "card_brand": "visa",
    "card_number": "4242424242424242",
    "cvv": "987",
    "cardholder_name": "Test Guest",
}


def _bearer(user_id):
    token = jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


def test_guest_cart_sets_session_cookie(api):
    client, _ = api
    res = client.get("/api/v1/cart")
    assert res.status_code == 200
    assert res.json()["items"] == []
    set_cookie = res.headers.get("set-cookie", "")
    assert "cartSession=" in set_cookie
    assert "HttpOnly" in set_cookie
    assert f"Max-Age={14 * 24 * 60 * 60}" in set_cookie
    assert res.headers.get("Cache-Control") == "no-store"

    cart_id = res.json()["id"]
    again = client.get("/api/v1/cart")
    assert again.json()["id"] == cart_id
    assert "cartSession=" not in again.headers.get("set-cookie", "")


def test_add_item_returns_item_and_cart(api):
    client, _ = api
    res = client.post("/api/v1/cart/items", json=CLEANING)
    assert res.status_code == 201
    body = res.json()
    assert Decimal(str(body["item"]["subtotal"])) == Decimal("565")
    assert Decimal(str(body["item"]["base_price"])) == Decimal("585")
    assert len(body["cart"]["items"]) == 1
    assert "#4821" not in res.text
    assert "gate_code" not in body["item"]


def test_fourth_item_is_rejected(api):
    client, _ = api
    for _ in range(3):
        assert client.post("/api/v1/cart/items", json=CLEANING).status_code == 201
    res = client.post("/api/v1/cart/items", json=CLEANING)
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == (
        "Cart limit reached. Maximum 3 services allowed per booking."
    )
    assert len(client.get("/api/v1/cart").json()["items"]) == 3


def test_unknown_service_is_422(api):
    client, _ = api
    res = client.post("/api/v1/cart/items", json={"service_id": "ufo-repair"})
    assert res.status_code == 422
    assert res.json()["detail"]["field_errors"] == {"service_id": "Unknown service"}


def test_update_and_remove_item(api):
    client, _ = api
    item_id = client.post("/api/v1/cart/items", json=CLEANING).json()["item"]["id"]
    res = client.patch(
        f"/api/v1/cart/items/{item_id}",
        json={"tip_amount": "75", "selections": {"cleaning_type": "basic"}},
    )
    assert res.status_code == 200
    assert Decimal(str(res.json()["tip_amount"])) == Decimal("75")
    assert Decimal(str(res.json()["subtotal"])) == Decimal("280")

    assert client.patch(f"/api/v1/cart/items/{item_id}", json={"tip_amount": "-1"}).status_code == 422

    res = client.delete(f"/api/v1/cart/items/{item_id}")
    assert res.status_code == 200
    assert res.json()["items"] == []
    assert client.delete(f"/api/v1/cart/items/{item_id}").status_code == 404


def test_items_of_another_guest_are_404(api):
    client, _ = api
    from fastapi.testclient import TestClient
    from berry_events.main import app

    item_id = client.post("/api/v1/cart/items", json=CLEANING).json()["item"]["id"]
    stranger = TestClient(app)
    assert stranger.delete(f"/api/v1/cart/items/{item_id}").status_code == 404
    assert len(client.get("/api/v1/cart").json()["items"]) == 1


def test_clear_cart(api):
    client, _ = api
    client.post("/api/v1/cart/items", json=CLEANING)
    client.post("/api/v1/cart/items", json=CLEANING)
    res = client.delete("/api/v1/cart")
    assert res.status_code == 200
    assert res.json()["items"] == []


def test_checkout_creates_order_and_empties_cart(api):
    client, _ = api
    client.post("/api/v1/cart/items", json=CLEANING)
    res = client.post("/api/v1/cart/checkout", json=CARD)
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Order created successfully"
    order = body["order"]
    assert order["order_number"].startswith("BE-")
    assert Decimal(str(order["subtotal"])) == Decimal("565")
    assert Decimal(str(order["total_tips"])) == Decimal("50")
    # 565 * 0.15 = 84.75
    assert Decimal(str(order["platform_fee"])) == Decimal("85")
    assert Decimal(str(order["total_amount"])) == Decimal("700")
    assert order["card_last4"] == "4242"
    assert "4242424242424242" not in res.text
    assert "cvv" not in res.text
    assert client.get("/api/v1/cart").json()["items"] == []


def test_checkout_errors(api):
    client, _ = api
    res = client.post("/api/v1/cart/checkout", json=CARD)
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Cart is empty"

    client.post("/api/v1/cart/items", json=CLEANING)
    res = client.post("/api/v1/cart/checkout")
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Payment method required"

    res = client.post("/api/v1/cart/checkout", json={"payment_method": "card", "card_brand": "visa"})
    assert res.status_code == 422
    assert "card_last4" in res.json()["detail"]["field_errors"]


def test_validation_errors_do_not_echo_payment_numbers(api, caplog):
    client, _ = api
    caplog.set_level(logging.WARNING)
    client.post("/api/v1/cart/items", json=CLEANING)
    res = client.post(
        "/api/v1/cart/checkout",
        json={**CARD, "payment_method": "bitcoin", "account_number": "9876543210123"},
    )
    assert res.status_code == 422
    assert "payment_method" in res.json()["detail"]["field_errors"]
    for secret in ("4242424242424242", "9876543210123"):
        assert secret not in res.text
        assert all(secret not in r.getMessage() for r in caplog.records)


def test_signed_in_user_has_own_cart(api):
    client, _ = api
    headers = _bearer(7)
    res = client.post("/api/v1/cart/items", json=CLEANING, headers=headers)
    assert res.status_code == 201
    assert res.json()["cart"]["user_id"] == 7
    assert "cartSession=" not in res.headers.get("set-cookie", "")
    # the anonymous cart of the same browser is separate
    assert client.get("/api/v1/cart").json()["items"] == []
