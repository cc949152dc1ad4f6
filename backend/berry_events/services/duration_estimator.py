"""Rough job length used to pre-fill cart item durations."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..service_types import ServiceCatalog, get_catalog

_TENTH = Decimal("0.1")


def estimate_hours(
    category: Optional[str],
    cleaning_type: Optional[str] = None,
    room_count: Optional[str] = None,
    add_on_count: int = 0,
    catalog: Optional[ServiceCatalog] = None,
) -> float:
    tables = (catalog or get_catalog()).durations
    extra = tables.hours_per_add_on * max(int(add_on_count or 0), 0)
    key = (category or "").strip().lower()

    if key == "cleaning":
        hours = tables.cleaning_type_hours.get(cleaning_type or "")
        if hours is None:
            hours = tables.cleaning_type_hours.get(tables.default_cleaning_type, Decimal("3"))
        factor = tables.room_count_multipliers.get(room_count or "")
        if factor is None:
            factor = tables.room_count_multipliers.get(tables.default_room_count, Decimal("1"))
        total = hours * factor + extra
    else:
        total = tables.category_base_hours.get(key, tables.default_base_hours) + extra

    return float(total.quantize(_TENTH, rounding=ROUND_HALF_UP))
