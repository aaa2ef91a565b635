from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from app.schemas.pricing import FEE_MAX_DIGITS, DiscountRuleSchema, validate_discount_rules


class EventCreate(BaseModel):
    """Schema for creating an event with its fees and bulk discount rules."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    base_fee_inr: Decimal | None = Field(None, ge=0, max_digits=FEE_MAX_DIGITS, decimal_places=2)
    base_fee_usd: Decimal | None = Field(None, ge=0, max_digits=FEE_MAX_DIGITS, decimal_places=2)
    bulk_discount_rules: list[DiscountRuleSchema] = Field(default_factory=list)

    @field_validator("bulk_discount_rules")
    @classmethod
    def check_rules(cls, v: list[DiscountRuleSchema]) -> list[DiscountRuleSchema]:
        return validate_discount_rules(v)

    @model_validator(mode="after")
    def require_a_fee(self) -> "EventCreate":
        if self.base_fee_inr is None and self.base_fee_usd is None:
            raise ValueError("At least one of base_fee_inr or base_fee_usd is required")
        return self


class EventResponse(BaseModel):
    """Schema for event response."""

    id: int
    title: str
    slug: str
    description: str | None
    base_fee_inr: Decimal | None
    base_fee_usd: Decimal | None
    bulk_discount_rules: list[DiscountRuleSchema]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
