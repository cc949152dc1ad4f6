from decimal import Decimal


def test_list_and_read_services(api):
    client, _ = api
    res = client.get("/api/v1/services")
    assert res.status_code == 200
    ids = [s["id"] for s in res.json()]
    assert "house-cleaning" in ids and "chef-catering" in ids

    one = client.get("/api/v1/services/plumbing").json()
    assert one["category"] == "plumbing"
    assert "keywords" not in one["add_ons"][0]
    assert client.get("/api/v1/services/nope").status_code == 404


def test_quote(api):
    client, _ = api
    res = client.post(
        "/api/v1/pricing/quote",
        json={"service_id": "plumbing", "selections": {"issue": "burst-pipe", "urgency": "emergency"}},
    )
    assert res.status_code == 200
    assert Decimal(str(res.json()["base_price"])) == Decimal("1000")

    zero = client.post("/api/v1/pricing/quote", json={"service_id": "unknown"}).json()
    assert Decimal(str(zero["total_price"])) == Decimal("0")


def test_hours_estimate(api):
    client, _ = api
    res = client.post("/api/v1/estimates/hours", json={"category": "cleaning", "add_on_count": 2})
    assert res.json() == {"category": "cleaning", "hours": 4.0}


def test_suggestions_include_policy(api):
    client, _ = api
    res = client.post("/api/v1/add-ons/suggest", json={"category": "cleaning", "text": "sofa stains"})
    body = res.json()
    assert [s["id"] for s in body["suggestions"]] == ["upholstery"]
    assert body["min_chars"] == 3
    assert body["debounce_ms"] == 400


def test_payment_preview(api):
    client, _ = api
    res = client.post(
        "/api/v1/payments/preview",
        json={
            "pending_drafts": [
                {"service_id": "house-cleaning", "pricing": {"base_price": "500", "materials_discount": "50", "total_price": "450"}}
            ],
            "current_draft": {"service_id": "plumbing", "pricing": {"base_price": "300", "total_price": "300"}},
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert Decimal(str(body["subtotal"])) == Decimal("800")
    assert Decimal(str(body["grand_total"])) == Decimal("750")
    assert Decimal(str(body["commission"])) == Decimal("113")


def test_health_and_root(api):
    client, _ = api
    assert client.get("/healthz/live").json()["status"] == "ok"
    assert client.get("/").json() == {"message": "Welcome to Berry Events Booking API"}
