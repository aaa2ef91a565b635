"""Schemas for batch pricing previews and discount rules."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.core.currency import Currency
from app.core.pricing import DiscountRule

# Amounts are stored as Numeric(12, 2) and percentages as Numeric(5, 2)
FEE_MAX_DIGITS = 12
PERCENTAGE_MAX_DIGITS = 5
MAX_STUDENTS_PER_BATCH = 10000


class DiscountRuleSchema(BaseModel):
    """Schema for a bulk discount tier."""

    min_students: int = Field(..., ge=1, strict=True, description="Minimum students for the tier (inclusive)")
    discount_percentage: Decimal = Field(
        ...,
        ge=0,
        le=100,
        max_digits=PERCENTAGE_MAX_DIGITS,
        decimal_places=2,
        description="Discount percentage for the tier",
    )

    def to_rule(self) -> DiscountRule:
        return DiscountRule(min_students=self.min_students, discount_percentage=self.discount_percentage)


def validate_discount_rules(rules: list[DiscountRuleSchema]) -> list[DiscountRuleSchema]:
    """Reject duplicate min_students values and return rules sorted ascending."""
    thresholds = [rule.min_students for rule in rules]
    if len(set(thresholds)) != len(thresholds):
        raise ValueError("Discount rules must have unique minimum student values")
    return sorted(rules, key=lambda rule: rule.min_students)


class PricingPreviewRequest(BaseModel):
    """Schema for previewing the price of a batch before submission."""

    base_fee: Decimal = Field(
        ..., ge=0, max_digits=FEE_MAX_DIGITS, decimal_places=2, description="Per-student base fee"
    )
    student_count: int = Field(..., gt=0, le=MAX_STUDENTS_PER_BATCH, strict=True)
    currency: Currency = Field(default=Currency.INR)
    rules: list[DiscountRuleSchema] = Field(default_factory=list)

    @field_validator("rules")
    @classmethod
    def check_rules(cls, v: list[DiscountRuleSchema]) -> list[DiscountRuleSchema]:
        return validate_discount_rules(v)


class PricingPreviewResponse(BaseModel):
    """Schema for pricing preview response."""

    currency: Currency
    student_count: int
    base_fee: Decimal
    base_amount: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    min_students_matched: int | None = None
    total_minor_units: int
    formatted_base_amount: str
    formatted_discount_amount: str
    formatted_total_amount: str


class CurrencyInfo(BaseModel):
    code: Currency
    symbol: str
    minor_units_per_major: int
