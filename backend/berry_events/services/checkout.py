"""Cart to order conversion.

The order insert, gate code hand-over and cart clearing share one
transaction under a row lock on the cart. Any failure rolls all of it back
and the cart is left exactly as it was.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..core.config import settings
from ..crud import crud_gate_code
from ..crud.crud_cart import cart as cart_store
from ..models.order import OrderStatus
from ..schemas.order import PaymentDescriptor
from ..utils.errors import (
    BookingEngineError,
    EmptyCart,
    MissingPaymentMethod,
    PersistenceError,
    ValidationError,
)
from .pricing import round_units

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")

_ITEM_FIELDS = (
    "service_id",
    "service_name",
    "category",
    "provider_id",
    "scheduled_date",
    "scheduled_time",
    "duration",
    "base_price",
    "add_ons_price",
    "subtotal",
    "tip_amount",
    "service_details",
    "selected_add_ons",
    "comments",
)


def order_number(now: Optional[datetime] = None) -> str:
    """``BE-<year>-<last 6 digits of epoch ms>``; not unique within a millisecond bucket."""
    now = now or datetime.now(timezone.utc)
    millis = str(int(now.timestamp() * 1000))
    return f"BE-{now.year}-{millis[-6:]}"


def validate_payment(payment: Optional[PaymentDescriptor]) -> PaymentDescriptor:
    if payment is None or not payment.payment_method:
        raise MissingPaymentMethod(field_errors={"payment_method": "required"})
    errors = {}
    if payment.payment_method == "card":
        if not payment.card_brand:
            errors["card_brand"] = "required"
        if not payment.card_last4:
            errors["card_last4"] = "required"
    else:
        if not payment.bank_name:
            errors["bank_name"] = "required"
        # EFT needs the bank plus either the branch or the masked account.
        if not (payment.branch_code or payment.account_last4):
            errors["branch_code"] = "required"
    if errors:
        raise ValidationError("Incomplete payment details", errors)
    return payment


def compute_order_totals(items) -> dict:
    subtotal = sum((Decimal(str(i.subtotal or 0)) for i in items), _ZERO)
    total_tips = sum((Decimal(str(i.tip_amount or 0)) for i in items), _ZERO)
    # Commission is charged on services only; tips pass through untouched.
    platform_fee = round_units(subtotal * settings.PLATFORM_FEE_RATE)
    return {
        "subtotal": subtotal,
        "total_tips": total_tips,
        "platform_fee": platform_fee,
        "total_amount": subtotal + total_tips + platform_fee,
    }


def checkout_cart(
    db: Session,
    cart_id: int,
    payment: Optional[PaymentDescriptor],
    user_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> models.Order:
    try:
        cart = cart_store.lock(db, cart_id)
        items = list(
            db.query(models.CartItem)
            .filter(models.CartItem.cart_id == cart_id)
            .order_by(models.CartItem.id)
        )
        if not items:
            raise EmptyCart()
        payment = validate_payment(payment)
        totals = compute_order_totals(items)

        order = models.Order(
            order_number=order_number(now),
            user_id=user_id if user_id is not None else cart.user_id,
            cart_id=cart.id,
            currency=settings.DEFAULT_CURRENCY,
            payment_method=payment.payment_method,
            payment_status="paid",
            status=OrderStatus.CONFIRMED,
            card_brand=payment.card_brand,
            card_last4=payment.card_last4,
            cardholder_name=payment.cardholder_name,
            bank_name=payment.bank_name,
            branch_code=payment.branch_code,
            account_last4=payment.account_last4,
            account_holder=payment.account_holder,
            **totals,
        )
        db.add(order)
        db.flush()

        mapping = {}
        for item in items:
            order_item = models.OrderItem(
                order_id=order.id,
                source_cart_item_id=item.id,
                status="pending",
                **{field: getattr(item, field) for field in _ITEM_FIELDS},
            )
            db.add(order_item)
            db.flush()
            mapping[item.id] = order_item.id

        crud_gate_code.transfer_to_order_items(db, mapping)
        cart_store.clear_items(db, cart.id)
        db.commit()
    except (EmptyCart, MissingPaymentMethod, ValidationError):
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        logger.error("Checkout failed for cart %s: %s", cart_id, type(exc).__name__)
        if isinstance(exc, PersistenceError):
            raise
        if isinstance(exc, BookingEngineError):
            raise PersistenceError(exc.message) from exc
        raise PersistenceError("Failed to create order") from exc

    db.refresh(order)
    logger.info(
        "Order %s created from cart %s with %d items",
        order.order_number,
        cart_id,
        len(mapping),
    )
    return order
