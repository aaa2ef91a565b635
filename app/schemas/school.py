from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from app.config import settings
from app.core.currency import Currency


class SchoolCreate(BaseModel):
    """Schema for registering a school. The school code is generated."""

    name: str = Field(..., min_length=1, max_length=255)
    country: str | None = Field(None, max_length=100)
    currency: Currency = Field(default_factory=lambda: settings.default_currency)


class SchoolResponse(BaseModel):
    """Schema for school response."""

    id: int
    code: str
    name: str
    country: str | None
    currency: Currency
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
