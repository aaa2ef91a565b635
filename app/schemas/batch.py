from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict

from app.core.currency import Currency
from app.models import BatchStatus
from app.schemas.pricing import MAX_STUDENTS_PER_BATCH


class BatchCreate(BaseModel):
    """Schema for creating a batch registration."""

    school_code: str = Field(..., min_length=6, max_length=6)
    event_id: int
    student_count: int = Field(..., gt=0, le=MAX_STUDENTS_PER_BATCH, strict=True)
    currency: Currency | None = Field(None, description="Defaults to the school's currency")


class BatchStudentCountUpdate(BaseModel):
    """Schema for changing the student count of a draft batch."""

    student_count: int = Field(..., gt=0, le=MAX_STUDENTS_PER_BATCH, strict=True)


class BatchResponse(BaseModel):
    """Schema for batch response with its frozen pricing."""

    id: int
    batch_reference: str
    school_id: int
    event_id: int
    student_count: int
    currency: Currency
    status: BatchStatus
    base_fee_per_student: Decimal
    base_amount: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    formatted_total_amount: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
