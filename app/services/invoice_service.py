"""Service for invoice numbering and issuance."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.reference_codes import generate_invoice_number
from app.models import Batch, BatchStatus, Invoice, School
from app.services.batch_service import BatchNotEditableError

logger = logging.getLogger(__name__)


async def next_invoice_sequence(session: AsyncSession, school_id: int) -> int:
    """
    Next invoice sequence for a school, starting at 1.

    The (school_id, sequence) unique constraint rejects a concurrent duplicate.
    """
    stmt = select(func.max(Invoice.sequence)).where(Invoice.school_id == school_id)
    result = await session.execute(stmt)
    return (result.scalar() or 0) + 1


async def get_invoice_for_batch(session: AsyncSession, batch_id: int) -> Invoice | None:
    stmt = select(Invoice).where(Invoice.batch_id == batch_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def issue_invoice(session: AsyncSession, batch: Batch) -> Invoice:
    """
    Issue the invoice for a batch, numbered INV-{school_code}-{sequence}.

    Issuing is idempotent: a batch that already has an invoice gets it back.
    A DRAFT batch moves to SUBMITTED so its invoiced total stays fixed.

    Args:
        session: Database session
        batch: Batch to invoice

    Returns:
        The batch's Invoice

    Raises:
        BatchNotEditableError: If the batch is cancelled
    """
    existing = await get_invoice_for_batch(session, batch.id)
    if existing:
        return existing

    if batch.status == BatchStatus.CANCELLED:
        raise BatchNotEditableError(batch, "invoice")

    school = await session.get(School, batch.school_id)
    sequence = await next_invoice_sequence(session, school.id)

    invoice = Invoice(
        invoice_number=generate_invoice_number(school.code, sequence, settings.invoice_sequence_width),
        sequence=sequence,
        school_id=school.id,
        batch_id=batch.id,
        amount=batch.total_amount,
        currency=batch.currency,
    )
    session.add(invoice)
    if batch.status == BatchStatus.DRAFT:
        batch.status = BatchStatus.SUBMITTED

    await session.commit()
    await session.refresh(invoice)

    logger.info(
        "Invoice issued",
        extra={"invoice_number": invoice.invoice_number, "batch_reference": batch.batch_reference},
    )
    return invoice
