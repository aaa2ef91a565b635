from fastapi import APIRouter, HTTPException, status

from app.core.currency import format_amount, to_minor_units
from app.dependencies.database import DBSessionDep
from app.models import Batch, Event
from app.schemas.batch import BatchCreate, BatchResponse, BatchStudentCountUpdate
from app.schemas.invoice import InvoiceResponse
from app.services.batch_service import (
    BatchNotEditableError,
    create_batch,
    get_batch_by_reference,
    update_batch_student_count,
)
from app.services.invoice_service import issue_invoice
from app.utils.school import get_school_by_code

router = APIRouter(prefix="/api/v1/batches", tags=["batches"])


def _batch_response(batch: Batch) -> BatchResponse:
    response = BatchResponse.model_validate(batch)
    response.formatted_total_amount = format_amount(batch.total_amount, batch.currency)
    return response


async def _get_batch_or_404(session: DBSessionDep, reference: str) -> Batch:
    batch = await get_batch_by_reference(session, reference)
    if not batch:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch not found")
    return batch


@router.post("", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def create_batch_registration(batch_data: BatchCreate, session: DBSessionDep) -> BatchResponse:
    """Create a batch for a school and event, freezing its pricing."""
    school = await get_school_by_code(session, batch_data.school_code)
    if not school:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="School not found")

    event = await session.get(Event, batch_data.event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    batch = await create_batch(session, school, event, batch_data.student_count, batch_data.currency)
    return _batch_response(batch)


@router.get("/{reference}", response_model=BatchResponse)
async def get_batch(reference: str, session: DBSessionDep) -> BatchResponse:
    batch = await _get_batch_or_404(session, reference)
    return _batch_response(batch)


@router.put("/{reference}/students", response_model=BatchResponse)
async def update_student_count(
    reference: str, update: BatchStudentCountUpdate, session: DBSessionDep
) -> BatchResponse:
    """Change the student count of a draft batch and recompute its pricing."""
    batch = await _get_batch_or_404(session, reference)
    try:
        batch = await update_batch_student_count(session, batch, update.student_count)
    except BatchNotEditableError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _batch_response(batch)


@router.post("/{reference}/invoice", response_model=InvoiceResponse)
async def invoice_batch(reference: str, session: DBSessionDep) -> InvoiceResponse:
    """Issue (or return the existing) invoice for a batch."""
    batch = await _get_batch_or_404(session, reference)
    try:
        invoice = await issue_invoice(session, batch)
    except BatchNotEditableError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    response = InvoiceResponse.model_validate(invoice)
    response.amount_minor_units = to_minor_units(invoice.amount, invoice.currency)
    response.formatted_amount = format_amount(invoice.amount, invoice.currency)
    return response
