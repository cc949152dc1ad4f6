"""
Locust load script for the guest booking flow.

Each simulated guest:
- Opens a cart (GET /api/v1/cart), receiving the cartSession cookie
- Requests quotes and hour estimates while "configuring" a service
- Adds up to three services to the cart
- Checks out with a masked card descriptor, then starts a fresh cart

Configure with env vars or Locust UI:
- HOST: pass via `--host http://localhost:8000`
- BE_MAX_ITEMS: items to add before checkout (default 2, capped at 3)
- BE_CHECKOUT_RATIO: probability a full cart is checked out vs cleared (default 0.7)

Run:
  locust -f load/locustfile.py --host http://localhost:8000
"""

from __future__ import annotations

import os
import random
from typing import Dict, List

from locust import HttpUser, task, between, events
import logging


# --- Config -------------------------------------------------------------------

MAX_ITEMS = max(1, min(3, int(os.getenv("BE_MAX_ITEMS", "2") or 2)))
CHECKOUT_RATIO = float(os.getenv("BE_CHECKOUT_RATIO", "0.7") or 0.7)

SAMPLE_ITEMS: List[Dict] = [
    {
        "service_id": "house-cleaning",
        "selections": {
            "property_type": "house",
            "cleaning_type": "deep-clean",
            "property_size": "medium",
            "add_ons": ["windows"],
            "materials": "bring",
        },
        "tip_amount": "50",
    },
    {
        "service_id": "plumbing",
        "selections": {"issue": "leak", "urgency": "urgent"},
        "gate_code": "#4821",
    },
    {
        "service_id": "garden-maintenance",
        "selections": {"garden_size": "medium", "condition": "overgrown", "recurrence": "monthly"},
    },
    {
        "service_id": "chef-catering",
        "selections": {"menu": "braai-feast", "add_ons": ["dessert"]},
        "tip_amount": "100",
    },
]

CARD = {
    "payment_method": "card",
    "card_brand": "visa",
    "card_number": "4242424242424242",
    "cardholder_name": "Load Test",
}


def _safe_json(resp) -> Dict:
    try:
        return resp.json()
    except ValueError:
        return {}


# --- The User Model -----------------------------------------------------------

class GuestBooker(HttpUser):
    wait_time = between(1, 3)

    items_in_cart: int = 0

    def on_start(self):
        r = self.client.get("/api/v1/cart", name="/cart")
        self.items_in_cart = len(_safe_json(r).get("items") or [])

    @task(5)
    def quote(self):
        item = random.choice(SAMPLE_ITEMS)
        self.client.post(
            "/api/v1/pricing/quote",
            json={"service_id": item["service_id"], "selections": item["selections"]},
            name="/pricing/quote",
        )

    @task(2)
    def estimate(self):
        self.client.post(
            "/api/v1/estimates/hours",
            json={"category": "cleaning", "cleaning_type": "deep-clean", "room_count": "3-4", "add_on_count": 1},
            name="/estimates/hours",
        )

    @task(2)
    def suggest(self):
        self.client.post(
            "/api/v1/add-ons/suggest",
            json={"category": "cleaning", "text": "the oven and windows are filthy"},
            name="/add-ons/suggest",
        )

    @task(4)
    def add_item(self):
        if self.items_in_cart >= MAX_ITEMS:
            self.finish_cart()
            return
        r = self.client.post("/api/v1/cart/items", json=random.choice(SAMPLE_ITEMS), name="/cart/items")
        if r.status_code == 201:
            self.items_in_cart = len(_safe_json(r).get("cart", {}).get("items") or [])
        elif r.status_code == 400:
            # Cart already full; drain it
            self.finish_cart()

    def finish_cart(self):
        if random.random() < CHECKOUT_RATIO:
            self.client.post("/api/v1/cart/checkout", json=CARD, name="/cart/checkout")
        else:
            self.client.delete("/api/v1/cart", name="/cart [clear]")
        self.items_in_cart = 0


# --- Optional event hooks -----------------------------------------------------

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    logging.getLogger("locust").info(f"Starting guest booking test; {MAX_ITEMS} items per cart")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    logging.getLogger("locust").info("Test finished")
