"""Service catalog models.

Each bookable service is one variant of a closed union keyed on
``category``. Variants own their option tables and know how to turn a
selection into a base price; the pricing calculator never branches on
service ids.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr

if TYPE_CHECKING:
    from ..schemas.pricing import BookingSelections

_ONE = Decimal("1")
_ZERO = Decimal("0")


def _factor(table: Dict[str, Decimal], key: Optional[str]) -> Decimal:
    if not key:
        return _ONE
    return table.get(key, _ONE)


class AddOn(BaseModel):
    id: str
    name: str
    price: Decimal
    estimated_hours: Decimal = _ZERO
    keywords: List[str] = Field(default_factory=list)

    def matches(self, text: str) -> bool:
        """Case-insensitive substring match of any keyword in ``text``."""
        lowered = text.lower()
        return any(k.lower() in lowered for k in self.keywords if k)


class FlatUrgency(BaseModel):
    """Callout fee added on top of the resolved base."""

    mode: Literal["flat"]
    fees: Dict[str, Decimal] = Field(default_factory=dict)

    def apply(self, base: Decimal, tier: Optional[str]) -> Decimal:
        return base + self.fees.get(tier or "", _ZERO)


class MultiplierUrgency(BaseModel):
    """Factor applied to the resolved base."""

    mode: Literal["multiplier"]
    factors: Dict[str, Decimal] = Field(default_factory=dict)

    def apply(self, base: Decimal, tier: Optional[str]) -> Decimal:
        return base * _factor(self.factors, tier)


UrgencyPolicy = Annotated[Union[FlatUrgency, MultiplierUrgency], Field(discriminator="mode")]


class ServiceConfigBase(BaseModel):
    id: str
    name: str
    base_price: Decimal
    property_types: Dict[str, Decimal] = Field(default_factory=dict)
    add_ons: List[AddOn] = Field(default_factory=list)
    urgency: Optional[UrgencyPolicy] = None

    def fixed_price(self, selections: "BookingSelections") -> Optional[Decimal]:
        """Price from an explicit issue/menu/type table, if the service has one."""
        return None

    def size_multiplier(self, selections: "BookingSelections") -> Decimal:
        return _ONE

    def property_multiplier(self, property_type: Optional[str]) -> Decimal:
        return _factor(self.property_types, property_type)

    def selected_add_ons(self, add_on_ids) -> List[AddOn]:
        wanted = set(add_on_ids or ())
        return [a for a in self.add_ons if a.id in wanted]


class CleaningService(ServiceConfigBase):
    category: Literal["cleaning"]
    cleaning_types: Dict[str, Decimal] = Field(default_factory=dict)
    property_sizes: Dict[str, Decimal] = Field(default_factory=dict)

    def fixed_price(self, selections):
        return self.cleaning_types.get(selections.cleaning_type or "")

    def size_multiplier(self, selections):
        return _factor(self.property_sizes, selections.property_size)


class GardenService(ServiceConfigBase):
    category: Literal["garden"]
    garden_sizes: Dict[str, Decimal] = Field(default_factory=dict)
    conditions: Dict[str, Decimal] = Field(default_factory=dict)

    def size_multiplier(self, selections):
        return _factor(self.garden_sizes, selections.garden_size) * _factor(
            self.conditions, selections.condition
        )


class PoolService(ServiceConfigBase):
    category: Literal["pool"]
    pool_sizes: Dict[str, Decimal] = Field(default_factory=dict)
    conditions: Dict[str, Decimal] = Field(default_factory=dict)

    def size_multiplier(self, selections):
        return _factor(self.pool_sizes, selections.pool_size) * _factor(
            self.conditions, selections.condition
        )


class PlumbingService(ServiceConfigBase):
    category: Literal["plumbing"]
    issues: Dict[str, Decimal] = Field(default_factory=dict)

    def fixed_price(self, selections):
        return self.issues.get(selections.issue or "")


class ElectricalService(ServiceConfigBase):
    category: Literal["electrical"]
    issues: Dict[str, Decimal] = Field(default_factory=dict)

    def fixed_price(self, selections):
        return self.issues.get(selections.issue or "")


class ChefService(ServiceConfigBase):
    category: Literal["chef"]
    menus: Dict[str, Decimal] = Field(default_factory=dict)

    def fixed_price(self, selections):
        return self.menus.get(selections.menu or "")


class HandymanService(ServiceConfigBase):
    category: Literal["handyman"]


ServiceConfig = Annotated[
    Union[
        CleaningService,
        GardenService,
        PoolService,
        PlumbingService,
        ElectricalService,
        ChefService,
        HandymanService,
    ],
    Field(discriminator="category"),
]


class DiscountRates(BaseModel):
    materials_bring: Decimal = Decimal("0.15")
    recurrence: Dict[str, Decimal] = Field(default_factory=dict)
    time_slots: Dict[str, Decimal] = Field(default_factory=dict)


class DurationTables(BaseModel):
    cleaning_type_hours: Dict[str, Decimal] = Field(default_factory=dict)
    room_count_multipliers: Dict[str, Decimal] = Field(default_factory=dict)
    category_base_hours: Dict[str, Decimal] = Field(default_factory=dict)
    default_base_hours: Decimal = Decimal("5")
    hours_per_add_on: Decimal = Decimal("0.5")
    default_cleaning_type: str = "standard"
    default_room_count: str = "1-2"


class ServiceCatalog(BaseModel):
    services: List[ServiceConfig]
    discounts: DiscountRates = Field(default_factory=DiscountRates)
    durations: DurationTables = Field(default_factory=DurationTables)

    _by_id: Dict[str, Any] = PrivateAttr(default_factory=dict)
    _by_category: Dict[str, Any] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        for service in self.services:
            self._by_id[service.id] = service
            self._by_category.setdefault(service.category, service)

    def get(self, service_id: Optional[str]):
        return self._by_id.get(service_id or "")

    def for_category(self, category: Optional[str]):
        """Resolve a category key, also accepting a service id."""
        key = (category or "").strip().lower()
        return self._by_category.get(key) or self._by_id.get(key)
