from datetime import datetime, timezone
from decimal import Decimal

import pytest

from berry_events import crud, models, schemas
from berry_events.crud import crud_gate_code
from berry_events.schemas import PaymentDescriptor
from berry_events.services import checkout
from berry_events.services.checkout import checkout_cart, order_number
from berry_events.utils.errors import (
    EmptyCart,
    MissingPaymentMethod,
    PersistenceError,
    ValidationError,
)

CARD = PaymentDescriptor(
    payment_method="card",
    card_brand="visa",
    card_number="4242 4242 4242 4242",
    cvv="123",
    cardholder_name="Thandi M",
)


def _cart_with_plumbing(db, tip="100", gate_code=None, user_id=None):
    res = crud.cart.get_or_create_cart(db, user_id=user_id)
    item = crud.cart.add_item(
        db,
        res.cart.id,
        schemas.CartItemCreate(
            service_id="plumbing",
            selections=schemas.BookingSelections(issue="burst-pipe", urgency="emergency"),
            tip_amount=Decimal(tip),
            gate_code=gate_code,
        ),
    )
    return res.cart, item


def test_payment_descriptor_masks_numbers():
    assert CARD.card_last4 == "4242"
    dumped = CARD.model_dump()
    assert "card_number" not in dumped
    assert "cvv" not in dumped
    eft = PaymentDescriptor(payment_method="eft", bank_name="FNB", account_number="62-001-234-567")
    assert eft.account_last4 == "4567"


def test_fee_and_total(db):
    cart, _ = _cart_with_plumbing(db)
    order = checkout_cart(db, cart.id, CARD)
    assert Decimal(order.subtotal) == Decimal("1000")
    assert Decimal(order.total_tips) == Decimal("100")
    assert Decimal(order.platform_fee) == Decimal("150")
    assert Decimal(order.total_amount) == Decimal("1250")
    assert order.status == models.OrderStatus.CONFIRMED
    assert order.payment_status == "paid"
    assert order.currency == "ZAR"
    assert order.card_brand == "visa"
    assert order.card_last4 == "4242"


def test_tips_do_not_attract_fees(db):
    cart, _ = _cart_with_plumbing(db, tip="0")
    order = checkout_cart(db, cart.id, CARD)
    assert Decimal(order.platform_fee) == Decimal("150")
    assert Decimal(order.total_amount) == Decimal("1150")


def test_items_copied_and_cart_cleared(db):
    cart, item = _cart_with_plumbing(db)
    item_id = item.id
    order = checkout_cart(db, cart.id, CARD)
    assert len(order.items) == 1
    copied = order.items[0]
    assert copied.source_cart_item_id == item_id
    assert copied.service_id == "plumbing"
    assert Decimal(copied.subtotal) == Decimal("1000")
    assert copied.status == "pending"
    refreshed = crud.cart.get_with_items(db, cart.id)
    assert refreshed.items == []
    assert refreshed.status == models.CartStatus.ACTIVE


def test_gate_code_moves_to_order_item(db):
    cart, item = _cart_with_plumbing(db, gate_code="#2468")
    item_id = item.id
    order = checkout_cart(db, cart.id, CARD)
    assert crud_gate_code.get_for_cart_item(db, item_id) is None
    assert crud_gate_code.reveal_for_order_item(db, order.items[0].id) == "#2468"
    assert db.query(models.GateCode).count() == 1


def test_user_id_recorded(db):
    cart, _ = _cart_with_plumbing(db, user_id=9)
    order = checkout_cart(db, cart.id, CARD)
    assert order.user_id == 9


def test_empty_cart(db):
    cart = crud.cart.get_or_create_cart(db).cart
    with pytest.raises(EmptyCart):
        checkout_cart(db, cart.id, CARD)


def test_missing_payment_method(db):
    cart, _ = _cart_with_plumbing(db)
    with pytest.raises(MissingPaymentMethod):
        checkout_cart(db, cart.id, None)
    with pytest.raises(MissingPaymentMethod):
        checkout_cart(db, cart.id, PaymentDescriptor(card_brand="visa", card_last4="4242"))
    assert len(crud.cart.get_with_items(db, cart.id).items) == 1


def test_incomplete_descriptor(db):
    cart, _ = _cart_with_plumbing(db)
    with pytest.raises(ValidationError) as exc:
        checkout_cart(db, cart.id, PaymentDescriptor(payment_method="card", card_brand="visa"))
    assert "card_last4" in exc.value.field_errors
    with pytest.raises(ValidationError):
        checkout_cart(db, cart.id, PaymentDescriptor(payment_method="eft", account_last4="1234"))
    with pytest.raises(ValidationError) as exc:
        checkout_cart(db, cart.id, PaymentDescriptor(payment_method="eft", bank_name="FNB"))
    assert "branch_code" in exc.value.field_errors


def test_eft_with_bank_and_branch_only(db):
    cart, _ = _cart_with_plumbing(db)
    order = checkout_cart(
        db,
        cart.id,
        PaymentDescriptor(payment_method="eft", bank_name="FNB", branch_code="250655"),
    )
    assert order.payment_method == "eft"
    assert order.bank_name == "FNB"
    assert order.branch_code == "250655"
    assert order.account_last4 is None


def test_failure_after_order_insert_rolls_back(db, monkeypatch):
    cart, item = _cart_with_plumbing(db, gate_code="7777")

    def boom(*_args, **_kwargs):
        assert db.query(models.Order).count() == 1
        raise RuntimeError("disk full")

    monkeypatch.setattr(crud_gate_code, "transfer_to_order_items", boom)
    with pytest.raises(PersistenceError):
        checkout_cart(db, cart.id, CARD)

    assert db.query(models.Order).count() == 0
    assert db.query(models.OrderItem).count() == 0
    items = crud.cart.get_with_items(db, cart.id).items
    assert [i.id for i in items] == [item.id]
    assert crud_gate_code.get_for_cart_item(db, item.id) is not None


def test_order_number_format():
    now = datetime(2025, 3, 4, 10, 30, 15, 123000, tzinfo=timezone.utc)
    millis = str(int(now.timestamp() * 1000))
    assert order_number(now) == f"BE-2025-{millis[-6:]}"


def test_order_number_collision_surfaces_as_persistence_error(db):
    now = datetime(2025, 3, 4, tzinfo=timezone.utc)
    first, _ = _cart_with_plumbing(db)
    checkout_cart(db, first.id, CARD, now=now)
    second, item = _cart_with_plumbing(db)
    with pytest.raises(PersistenceError):
        checkout_cart(db, second.id, CARD, now=now)
    assert [i.id for i in crud.cart.get_with_items(db, second.id).items] == [item.id]


def test_fee_rate_comes_from_settings(db, monkeypatch):
    monkeypatch.setattr(checkout.settings, "PLATFORM_FEE_RATE", Decimal("0.10"))
    cart, _ = _cart_with_plumbing(db)
    order = checkout_cart(db, cart.id, CARD)
    assert Decimal(order.platform_fee) == Decimal("100")
