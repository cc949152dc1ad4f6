from fastapi import APIRouter

from .. import schemas
from ..services.addon_suggestions import DEFAULT_POLICY, suggest_add_ons
from ..services.duration_estimator import estimate_hours
from ..services.payment_aggregator import aggregate_payments
from ..services.pricing import compute_pricing

router = APIRouter(tags=["pricing"])


@router.post("/pricing/quote", response_model=schemas.PricingResult)
def quote_price(quote_in: schemas.PricingQuoteIn):
    """Price a single service selection. Unknown services price at zero."""
    return compute_pricing(quote_in.service_id, quote_in.selections)


@router.post("/estimates/hours", response_model=schemas.HoursEstimateOut)
def estimate_job_hours(estimate_in: schemas.HoursEstimateIn):
    hours = estimate_hours(
        estimate_in.category,
        cleaning_type=estimate_in.cleaning_type,
        room_count=estimate_in.room_count,
        add_on_count=estimate_in.add_on_count,
    )
    return {"category": estimate_in.category, "hours": hours}


@router.post("/add-ons/suggest", response_model=schemas.AddOnSuggestOut)
def suggest(suggest_in: schemas.AddOnSuggestIn):
    min_chars = (
        suggest_in.min_chars if suggest_in.min_chars is not None else DEFAULT_POLICY.min_chars
    )
    matches = suggest_add_ons(suggest_in.category, suggest_in.text, min_chars=min_chars)
    return {
        "suggestions": [schemas.AddOnRead.model_validate(a.model_dump()) for a in matches],
        "min_chars": min_chars,
        "debounce_ms": DEFAULT_POLICY.debounce_ms,
    }


@router.post("/payments/preview", response_model=schemas.PaymentSnapshot)
def preview_payment(preview_in: schemas.PaymentPreviewIn):
    return aggregate_payments(preview_in.pending_drafts, preview_in.current_draft)
