from decimal import Decimal

from berry_events.schemas import BookingDraft, BookingSelections, PricingResult
from berry_events.services.payment_aggregator import aggregate_payments


def _priced(service_id, base, discount=Decimal("0"), add_ons=Decimal("0")):
    return BookingDraft(
        service_id=service_id,
        pricing=PricingResult(
            base_price=base,
            add_ons_price=add_ons,
            materials_discount=discount,
            total_price=base + add_ons - discount,
        ),
    )


def test_two_services_with_one_discount():
    snapshot = aggregate_payments(
        [_priced("house-cleaning", Decimal("500"), Decimal("50"))],
        current_draft=_priced("plumbing", Decimal("300")),
    )
    assert snapshot.subtotal == Decimal("800")
    assert snapshot.total_discounts == Decimal("50")
    assert snapshot.grand_total == Decimal("750")
    # 112.5 rounds half-up
    assert snapshot.commission == Decimal("113")
    assert [line.service_id for line in snapshot.line_items] == ["house-cleaning", "plumbing"]


def test_subtotal_excludes_add_ons_but_grand_total_includes_them():
    snapshot = aggregate_payments([_priced("chef-catering", Decimal("1200"), add_ons=Decimal("250"))])
    assert snapshot.subtotal == Decimal("1200")
    assert snapshot.total_add_ons == Decimal("250")
    assert snapshot.grand_total == Decimal("1450")


def test_unpriced_drafts_are_priced_from_selections():
    draft = BookingDraft(
        service_id="house-cleaning",
        selections=BookingSelections(
            cleaning_type="deep-clean", property_size="medium", add_ons=["windows"], materials="bring"
        ),
    )
    snapshot = aggregate_payments([], current_draft=draft)
    line = snapshot.line_items[0]
    assert line.service_name == "House Cleaning"
    assert line.base_price == Decimal("585")
    assert line.discounts == Decimal("100")
    assert line.total == Decimal("565")
    assert snapshot.services[0].pricing is not None


def test_no_drafts_gives_empty_snapshot():
    snapshot = aggregate_payments([])
    assert snapshot.line_items == []
    assert snapshot.grand_total == Decimal("0")
    assert snapshot.commission == Decimal("0")
