from decimal import Decimal

import pytest

from app.core.exceptions import InvalidInputError
from app.models import Batch, BatchStatus, Event, School
from app.services.batch_service import BatchNotEditableError, create_batch, update_batch_student_count
from app.services.invoice_service import issue_invoice, next_invoice_sequence
from app.utils.school import generate_unique_school_code, school_code_exists

RULES = [
    {"min_students": 10, "discount_percentage": "10"},
    {"min_students": 25, "discount_percentage": "20"},
]


async def _seed(session, code="ABC123", currency="INR"):
    school = School(code=code, name="Springfield High", currency=currency)
    event = Event(
        title="Maths Olympiad",
        slug=f"maths-olympiad-{code.lower()}",
        base_fee_inr=Decimal("100.00"),
        base_fee_usd=Decimal("5.00"),
        bulk_discount_rules=RULES,
    )
    session.add_all([school, event])
    await session.commit()
    return school, event


def test_create_batch_freezes_pricing(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        batch = await create_batch(session, school, event, 20)

        assert batch.status == BatchStatus.DRAFT
        assert batch.batch_reference.startswith("BATCH-")
        assert batch.currency == "INR"
        assert batch.base_fee_per_student == Decimal("100.00")
        assert batch.base_amount == Decimal("2000.00")
        assert batch.discount_amount == Decimal("200.00")
        assert batch.total_amount == Decimal("1800.00")

        # Later rule changes do not touch an existing batch
        event.bulk_discount_rules = []
        await session.commit()
        stored = await session.get(Batch, batch.id)
        assert stored.total_amount == Decimal("1800.00")

    run_in_session(scenario)


def test_create_batch_in_usd(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        batch = await create_batch(session, school, event, 25, "USD")
        assert batch.currency == "USD"
        assert batch.base_amount == Decimal("125.00")
        assert batch.discount_amount == Decimal("25.00")
        assert batch.total_amount == Decimal("100.00")

    run_in_session(scenario)


def test_create_batch_without_fee_in_currency(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        event.base_fee_usd = None
        await session.commit()
        with pytest.raises(InvalidInputError):
            await create_batch(session, school, event, 5, "USD")

    run_in_session(scenario)


def test_update_student_count_recomputes_draft(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        batch = await create_batch(session, school, event, 5)
        assert batch.total_amount == Decimal("500.00")

        batch = await update_batch_student_count(session, batch, 30)
        assert batch.student_count == 30
        assert batch.discount_percentage == Decimal("20")
        assert batch.total_amount == Decimal("2400.00")

    run_in_session(scenario)


def test_update_student_count_rejected_after_submission(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        batch = await create_batch(session, school, event, 5)
        batch.status = BatchStatus.SUBMITTED
        await session.commit()

        with pytest.raises(BatchNotEditableError):
            await update_batch_student_count(session, batch, 30)

    run_in_session(scenario)


def test_invoice_sequence_per_school(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        other, _ = await _seed(session, code="XYZ789")

        assert await next_invoice_sequence(session, school.id) == 1

        first = await issue_invoice(session, await create_batch(session, school, event, 10))
        second = await issue_invoice(session, await create_batch(session, school, event, 12))
        elsewhere = await issue_invoice(session, await create_batch(session, other, event, 3))

        assert first.invoice_number == "INV-ABC123-0001"
        assert second.invoice_number == "INV-ABC123-0002"
        assert elsewhere.invoice_number == "INV-XYZ789-0001"
        assert first.amount == Decimal("900.00")

    run_in_session(scenario)


def test_issue_invoice_is_idempotent_and_submits_batch(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        batch = await create_batch(session, school, event, 10)

        invoice = await issue_invoice(session, batch)
        again = await issue_invoice(session, batch)

        assert again.id == invoice.id
        assert batch.status == BatchStatus.SUBMITTED
        assert await next_invoice_sequence(session, school.id) == 2

    run_in_session(scenario)


def test_cancelled_batch_cannot_be_invoiced(run_in_session):
    async def scenario(session):
        school, event = await _seed(session)
        batch = await create_batch(session, school, event, 10)
        batch.status = BatchStatus.CANCELLED
        await session.commit()

        with pytest.raises(BatchNotEditableError):
            await issue_invoice(session, batch)

    run_in_session(scenario)


def test_unique_school_code_skips_existing(run_in_session):
    async def scenario(session):
        await _seed(session)
        assert await school_code_exists(session, "ABC123")
        code = await generate_unique_school_code(session)
        assert code != "ABC123"
        assert not await school_code_exists(session, code)

    run_in_session(scenario)
