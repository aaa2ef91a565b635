"""Service for creating batch registrations and freezing their pricing."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.currency import Currency, format_amount, parse_currency
from app.core.pricing import DiscountRule, PricingInput, PricingResult, compute_total, event_fee
from app.core.reference_codes import generate_batch_reference
from app.models import Batch, BatchStatus, Event, School

logger = logging.getLogger(__name__)


class BatchNotEditableError(Exception):
    """Raised when a batch is changed outside the status that allows it."""

    def __init__(self, batch: Batch, action: str):
        self.batch_reference = batch.batch_reference
        self.status = batch.status
        super().__init__(f"Cannot {action} batch {batch.batch_reference} in status {batch.status.value}")


def event_discount_rules(event: Event) -> tuple[DiscountRule, ...]:
    return tuple(DiscountRule.from_mapping(rule) for rule in event.bulk_discount_rules or [])


def price_batch(event: Event, student_count: int, currency: Currency) -> tuple[Decimal, PricingResult]:
    """
    Price a batch against an event's fee and discount rules.

    Returns:
        Tuple of (per-student base fee, pricing result)
    """
    base_fee = event_fee(event, currency)
    result = compute_total(
        PricingInput(base_fee=base_fee, student_count=student_count, rules=event_discount_rules(event))
    )
    return base_fee, result


def _freeze_pricing(batch: Batch, base_fee: Decimal, result: PricingResult) -> None:
    batch.student_count = result.student_count
    batch.base_fee_per_student = base_fee
    batch.base_amount = result.base_amount
    batch.discount_percentage = result.discount_percentage
    batch.discount_amount = result.discount_amount
    batch.total_amount = result.total_amount


async def create_batch(
    session: AsyncSession,
    school: School,
    event: Event,
    student_count: int,
    currency: str | Currency | None = None,
) -> Batch:
    """
    Create a DRAFT batch with its pricing frozen at creation.

    Args:
        session: Database session
        school: School registering the students
        event: Event being registered for
        student_count: Number of students in the batch
        currency: Currency to charge in (defaults to the school's currency)

    Returns:
        The persisted Batch

    Raises:
        InvalidInputError: If the student count is invalid or the event has no fee in the currency
        UnsupportedCurrencyError: If the currency is not INR or USD
    """
    code = parse_currency(currency or school.currency)
    base_fee, result = price_batch(event, student_count, code)

    batch = Batch(
        batch_reference=generate_batch_reference(),
        school_id=school.id,
        event_id=event.id,
        currency=code.value,
        status=BatchStatus.DRAFT,
    )
    _freeze_pricing(batch, base_fee, result)

    session.add(batch)
    await session.commit()
    await session.refresh(batch)

    logger.info(
        "Batch created",
        extra={
            "batch_reference": batch.batch_reference,
            "school_code": school.code,
            "student_count": student_count,
            "total": format_amount(result.total_amount, code),
        },
    )
    return batch


async def get_batch_by_reference(session: AsyncSession, reference: str) -> Batch | None:
    stmt = select(Batch).where(Batch.batch_reference == reference)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def update_batch_student_count(session: AsyncSession, batch: Batch, student_count: int) -> Batch:
    """
    Change the student count of a DRAFT batch and recompute its frozen pricing.

    Raises:
        BatchNotEditableError: If the batch is no longer a draft
    """
    if batch.status != BatchStatus.DRAFT:
        raise BatchNotEditableError(batch, "update")

    event = await session.get(Event, batch.event_id)
    base_fee, result = price_batch(event, student_count, parse_currency(batch.currency))
    _freeze_pricing(batch, base_fee, result)

    await session.commit()
    await session.refresh(batch)

    logger.info(
        "Batch repriced",
        extra={"batch_reference": batch.batch_reference, "student_count": student_count},
    )
    return batch
