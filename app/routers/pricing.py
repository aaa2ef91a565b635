"""Pricing preview endpoints (no database required)."""
from fastapi import APIRouter, status

from app.core.currency import (
    CURRENCY_SYMBOLS,
    MINOR_UNITS_PER_MAJOR,
    Currency,
    format_amount,
    to_minor_units,
)
from app.core.pricing import PricingInput, compute_total
from app.schemas.pricing import CurrencyInfo, PricingPreviewRequest, PricingPreviewResponse

router = APIRouter(prefix="/api/v1/pricing", tags=["pricing"])


@router.post("/preview", response_model=PricingPreviewResponse, status_code=status.HTTP_200_OK)
async def preview_pricing(payload: PricingPreviewRequest) -> PricingPreviewResponse:
    """Preview the payable amount for a batch before it is submitted."""
    result = compute_total(
        PricingInput(
            base_fee=payload.base_fee,
            student_count=payload.student_count,
            rules=tuple(rule.to_rule() for rule in payload.rules),
        )
    )
    currency = payload.currency

    return PricingPreviewResponse(
        currency=currency,
        student_count=result.student_count,
        base_fee=payload.base_fee,
        base_amount=result.base_amount,
        discount_percentage=result.discount_percentage,
        discount_amount=result.discount_amount,
        total_amount=result.total_amount,
        min_students_matched=result.min_students_matched,
        total_minor_units=to_minor_units(result.total_amount, currency),
        formatted_base_amount=format_amount(result.base_amount, currency),
        formatted_discount_amount=format_amount(result.discount_amount, currency),
        formatted_total_amount=format_amount(result.total_amount, currency),
    )


@router.get("/currencies", response_model=list[CurrencyInfo])
async def list_currencies() -> list[CurrencyInfo]:
    """List supported currencies."""
    return [
        CurrencyInfo(code=currency, symbol=CURRENCY_SYMBOLS[currency], minor_units_per_major=MINOR_UNITS_PER_MAJOR)
        for currency in Currency
    ]
