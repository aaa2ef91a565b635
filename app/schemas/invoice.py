"""Schemas for batch invoices."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from app.core.currency import Currency


class InvoiceResponse(BaseModel):
    """Schema for invoice response."""

    id: int
    invoice_number: str
    sequence: int
    school_id: int
    batch_id: int
    amount: Decimal
    currency: Currency
    amount_minor_units: int | None = None
    formatted_amount: str | None = None
    issued_at: datetime

    model_config = ConfigDict(from_attributes=True)
