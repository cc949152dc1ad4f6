from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional

from ..schemas.pricing import BookingSelections, PricingResult
from ..service_types import ServiceCatalog, get_catalog

logger = logging.getLogger(__name__)

_UNIT = Decimal("1")
_ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal = _ZERO) -> Decimal:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def round_units(value: Decimal) -> Decimal:
    """Round half-up to whole currency units."""
    return to_decimal(value).quantize(_UNIT, rounding=ROUND_HALF_UP)


def _raw_base(service, selections: BookingSelections) -> Decimal:
    fixed = service.fixed_price(selections)
    if fixed is not None:
        base = fixed
    else:
        base = service.base_price * service.property_multiplier(selections.property_type)
    base = base * service.size_multiplier(selections)
    if service.urgency is not None:
        base = service.urgency.apply(base, selections.urgency)
    return base


def compute_pricing(
    service_id: str,
    selections: Optional[BookingSelections] = None,
    catalog: Optional[ServiceCatalog] = None,
) -> PricingResult:
    """Price one service selection.

    Discounts are each a share of (raw base + add-ons), rounded on their own
    and never compounded. ``base_price`` and ``total_price`` are rounded
    independently, so they can disagree by a unit with the displayed
    discounts. Unknown services price at zero.
    """
    catalog = catalog or get_catalog()
    selections = selections or BookingSelections()
    service = catalog.get(service_id)
    if service is None:
        logger.debug("No catalog entry for service %s; pricing at zero", service_id)
        return PricingResult.zero()

    raw_base = _raw_base(service, selections)
    add_ons = sum(
        (a.price for a in service.selected_add_ons(selections.add_ons)),
        _ZERO,
    )
    gross = raw_base + add_ons

    rates = catalog.discounts
    materials = _ZERO
    if selections.materials == "bring":
        materials = round_units(gross * rates.materials_bring)
    recurring = round_units(gross * rates.recurrence.get(selections.recurrence or "", _ZERO))
    time_slot = round_units(gross * rates.time_slots.get(selections.time_slot or "", _ZERO))

    total = gross - materials - recurring - time_slot
    if total < _ZERO:
        total = _ZERO

    return PricingResult(
        base_price=round_units(raw_base),
        add_ons_price=round_units(add_ons),
        materials_discount=materials,
        recurring_discount=recurring,
        time_discount=time_slot,
        total_price=round_units(total),
    )
