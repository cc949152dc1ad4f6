from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional

from ..core.config import settings
from ..schemas.pricing import BookingDraft, PaymentLineItem, PaymentSnapshot
from ..service_types import ServiceCatalog, get_catalog
from .pricing import compute_pricing, round_units

_ZERO = Decimal("0")


def aggregate_payments(
    pending_drafts: Iterable[BookingDraft],
    current_draft: Optional[BookingDraft] = None,
    catalog: Optional[ServiceCatalog] = None,
) -> PaymentSnapshot:
    """Combine several in-progress bookings into one payment summary.

    ``subtotal`` sums base prices only; ``grand_total`` sums each line's
    discounted total, and the platform commission is taken from it.
    """
    catalog = catalog or get_catalog()
    drafts: List[BookingDraft] = list(pending_drafts or [])
    if current_draft is not None:
        drafts.append(current_draft)

    priced: List[BookingDraft] = []
    lines: List[PaymentLineItem] = []
    for draft in drafts:
        pricing = draft.pricing or compute_pricing(draft.service_id, draft.selections, catalog)
        service = catalog.get(draft.service_id)
        name = draft.service_name or (service.name if service else draft.service_id)
        priced.append(draft.model_copy(update={"pricing": pricing, "service_name": name}))
        lines.append(
            PaymentLineItem(
                service_id=draft.service_id,
                service_name=name,
                base_price=pricing.base_price,
                add_ons=pricing.add_ons_price,
                discounts=pricing.total_discounts,
                total=pricing.total_price,
            )
        )

    grand_total = sum((line.total for line in lines), _ZERO)
    return PaymentSnapshot(
        services=priced,
        line_items=lines,
        subtotal=sum((line.base_price for line in lines), _ZERO),
        total_add_ons=sum((line.add_ons for line in lines), _ZERO),
        total_discounts=sum((line.discounts for line in lines), _ZERO),
        grand_total=grand_total,
        commission=round_units(grand_total * settings.PLATFORM_FEE_RATE),
    )
