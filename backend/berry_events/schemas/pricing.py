from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ZERO = Decimal("0")


class BookingSelections(BaseModel):
    """Option keys a customer picked for one service.

    Keys are free strings; values the catalog does not know are ignored by
    the calculators instead of being rejected here.
    """

    model_config = ConfigDict(extra="ignore")

    property_type: Optional[str] = None
    cleaning_type: Optional[str] = None
    property_size: Optional[str] = None
    room_count: Optional[str] = None
    garden_size: Optional[str] = None
    pool_size: Optional[str] = None
    condition: Optional[str] = None
    issue: Optional[str] = None
    menu: Optional[str] = None
    urgency: Optional[str] = None
    add_ons: List[str] = Field(default_factory=list)
    materials: Optional[str] = None  # supply | bring
    recurrence: Optional[str] = None  # once | weekly | bi-weekly | monthly
    time_slot: Optional[str] = None

    @field_validator("add_ons", mode="before")
    def dedupe_add_ons(cls, v):
        if v is None:
            return []
        seen: list[str] = []
        for item in v:
            if item not in seen:
                seen.append(item)
        return seen


class PricingResult(BaseModel):
    base_price: Decimal = _ZERO
    add_ons_price: Decimal = _ZERO
    materials_discount: Decimal = _ZERO
    recurring_discount: Decimal = _ZERO
    time_discount: Decimal = _ZERO
    total_price: Decimal = _ZERO

    @classmethod
    def zero(cls) -> "PricingResult":
        return cls()

    @property
    def total_discounts(self) -> Decimal:
        return self.materials_discount + self.recurring_discount + self.time_discount


class PricingQuoteIn(BaseModel):
    service_id: str
    selections: BookingSelections = Field(default_factory=BookingSelections)


class BookingDraft(BaseModel):
    """In-progress selection set for one service; never persisted."""

    service_id: str
    service_name: Optional[str] = None
    selections: BookingSelections = Field(default_factory=BookingSelections)
    pricing: Optional[PricingResult] = None
    provider_id: Optional[int] = None
    preferred_date: Optional[date] = None
    time_preference: Optional[str] = None


class PaymentLineItem(BaseModel):
    service_id: str
    service_name: str
    base_price: Decimal
    add_ons: Decimal
    discounts: Decimal
    total: Decimal


class PaymentSnapshot(BaseModel):
    services: List[BookingDraft]
    line_items: List[PaymentLineItem]
    subtotal: Decimal
    total_add_ons: Decimal
    total_discounts: Decimal
    grand_total: Decimal
    commission: Decimal


class PaymentPreviewIn(BaseModel):
    pending_drafts: List[BookingDraft] = Field(default_factory=list)
    current_draft: Optional[BookingDraft] = None


class HoursEstimateIn(BaseModel):
    category: str
    cleaning_type: Optional[str] = None
    room_count: Optional[str] = None
    add_on_count: int = Field(default=0, ge=0)


class HoursEstimateOut(BaseModel):
    category: str
    hours: float


class AddOnRead(BaseModel):
    id: str
    name: str
    price: Decimal
    estimated_hours: Decimal

    model_config = {"from_attributes": True}


class AddOnSuggestIn(BaseModel):
    category: str
    text: str = ""
    min_chars: Optional[int] = Field(default=None, ge=0)


class AddOnSuggestOut(BaseModel):
    suggestions: List[AddOnRead]
    min_chars: int
    debounce_ms: int


class ServiceRead(BaseModel):
    id: str
    name: str
    category: str
    base_price: Decimal
    property_types: Dict[str, Decimal]
    add_ons: List[AddOnRead]

    model_config = {"from_attributes": True}
