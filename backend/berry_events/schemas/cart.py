from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.cart import CartStatus
from .pricing import BookingSelections


# Properties to receive on item creation (gate_code is split off before storage)
class CartItemCreate(BaseModel):
    service_id: str
    selections: BookingSelections = Field(default_factory=BookingSelections)
    provider_id: Optional[int] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = Field(default=None, max_length=16)
    duration: Optional[Decimal] = Field(default=None, ge=0)
    tip_amount: Decimal = Field(default=Decimal("0"), ge=0)
    comments: Optional[str] = None
    gate_code: Optional[str] = Field(default=None, max_length=64)


class CartItemUpdate(BaseModel):
    selections: Optional[BookingSelections] = None
    provider_id: Optional[int] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = Field(default=None, max_length=16)
    duration: Optional[Decimal] = Field(default=None, ge=0)
    tip_amount: Optional[Decimal] = Field(default=None, ge=0)
    comments: Optional[str] = None
    gate_code: Optional[str] = Field(default=None, max_length=64)


class CartItemRead(BaseModel):
    id: int
    cart_id: int
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
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CartRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    status: CartStatus
    expires_at: Optional[datetime] = None
    items: List[CartItemRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class AddCartItemResponse(BaseModel):
    item: CartItemRead
    cart: CartRead
