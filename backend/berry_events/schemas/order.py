from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.order import OrderStatus

_LAST4_RE = re.compile(r"^\d{4}$")


def _last_four(raw: Any) -> Optional[str]:
    digits = re.sub(r"\D", "", str(raw or ""))
    return digits[-4:] if len(digits) >= 4 else None


class PaymentDescriptor(BaseModel):
    """Masked payment details.

    Full card or account numbers are reduced to their last four digits and
    CVVs are dropped before the model exists, so nothing downstream can
    persist or log them.
    """

    model_config = ConfigDict(extra="ignore")

    payment_method: Optional[Literal["card", "eft"]] = None
    card_brand: Optional[str] = Field(default=None, max_length=32)
    card_last4: Optional[str] = None
    cardholder_name: Optional[str] = None
    bank_name: Optional[str] = None
    branch_code: Optional[str] = Field(default=None, max_length=16)
    account_last4: Optional[str] = None
    account_holder: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def mask_sensitive_numbers(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        card_number = data.pop("card_number", None)
        account_number = data.pop("account_number", None)
        data.pop("cvv", None)
        data.pop("cvc", None)
        if card_number and not data.get("card_last4"):
            data["card_last4"] = _last_four(card_number)
        if account_number and not data.get("account_last4"):
            data["account_last4"] = _last_four(account_number)
        return data

    @field_validator("card_last4", "account_last4")
    def only_last_four(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not _LAST4_RE.match(v):
            raise ValueError("must be exactly the last 4 digits")
        return v


class CheckoutIn(PaymentDescriptor):
    pass


class OrderItemRead(BaseModel):
    id: int
    order_id: int
    source_cart_item_id: Optional[int] = None
    service_id: str
    service_name: str
    category: str
    provider_id: Optional[int] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None
    duration: Optional[Decimal] = None
    base_price: Decimal
    add_ons_price: Decimal
    subtotal: Decimal
    tip_amount: Decimal
    service_details: Optional[Dict[str, Any]] = None
    selected_add_ons: List[str] = Field(default_factory=list)
    comments: Optional[str] = None
    status: str

    model_config = {"from_attributes": True}


class OrderRead(BaseModel):
    id: int
    order_number: str
    user_id: Optional[int] = None
    cart_id: Optional[int] = None
    subtotal: Decimal
    total_tips: Decimal
    platform_fee: Decimal
    total_amount: Decimal
    currency: str
    payment_method: str
    payment_status: str
    status: OrderStatus
    card_brand: Optional[str] = None
    card_last4: Optional[str] = None
    cardholder_name: Optional[str] = None
    bank_name: Optional[str] = None
    branch_code: Optional[str] = None
    account_last4: Optional[str] = None
    account_holder: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class CheckoutResponse(BaseModel):
    message: str
    order: OrderRead


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
