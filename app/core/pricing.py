"""Bulk-discount pricing for batch registrations."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from app.core.currency import Currency, parse_currency, round_to_minor_unit, to_decimal
from app.core.exceptions import InvalidInputError

HUNDRED = Decimal(100)


def _require_int(value: Any, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidInputError(f"{name} must be at least {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class DiscountRule:
    """A bulk discount tier: discount_percentage applies from min_students upwards."""

    min_students: int
    discount_percentage: Decimal

    def __post_init__(self) -> None:
        _require_int(self.min_students, "min_students", 1)
        percentage = to_decimal(self.discount_percentage)
        if percentage < 0 or percentage > HUNDRED:
            raise InvalidInputError(
                f"discount_percentage must be between 0 and 100, got {self.discount_percentage}"
            )
        object.__setattr__(self, "discount_percentage", percentage)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "DiscountRule":
        """Build a rule from a stored record such as an event's bulk_discount_rules entry."""
        try:
            return cls(min_students=data["min_students"], discount_percentage=data["discount_percentage"])
        except KeyError as exc:
            raise InvalidInputError(f"Discount rule is missing {exc.args[0]!r}") from None


@dataclass(frozen=True)
class DiscountMatch:
    percentage: Decimal
    min_students_matched: int | None = None


NO_DISCOUNT = DiscountMatch(percentage=Decimal(0))


@dataclass(frozen=True)
class PricingInput:
    base_fee: Decimal
    student_count: int
    rules: tuple[DiscountRule, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        base_fee = to_decimal(self.base_fee)
        if base_fee < 0:
            raise InvalidInputError(f"base_fee cannot be negative, got {self.base_fee}")
        _require_int(self.student_count, "student_count", 1)
        rules = tuple(
            rule if isinstance(rule, DiscountRule) else DiscountRule.from_mapping(rule) for rule in self.rules
        )
        object.__setattr__(self, "base_fee", base_fee)
        object.__setattr__(self, "rules", rules)


@dataclass(frozen=True)
class PricingResult:
    base_amount: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    student_count: int
    min_students_matched: int | None = None


def compute_discount(student_count: int, rules: Iterable[DiscountRule]) -> DiscountMatch:
    """
    Resolve the discount tier for a student count.

    The qualifying rule with the largest min_students wins, which is the tightest
    tier the count reaches rather than the highest percentage. Thresholds are
    inclusive. When two rules share that min_students the first one wins.

    Args:
        student_count: Number of students in the batch
        rules: Discount rules for the event (may be empty)

    Returns:
        DiscountMatch with the percentage and the matched threshold, or
        percentage 0 and no threshold when nothing qualifies
    """
    qualifying = [rule for rule in rules if rule.min_students <= student_count]
    if not qualifying:
        return NO_DISCOUNT

    # max() keeps the first of several equal keys
    best = max(qualifying, key=lambda rule: rule.min_students)
    return DiscountMatch(percentage=best.discount_percentage, min_students_matched=best.min_students)


def compute_total(pricing_input: PricingInput) -> PricingResult:
    """
    Calculate the payable amount for a batch.

    base_amount = base_fee * student_count, discount_amount is base_amount * percentage / 100
    rounded half-up to the minor unit, and total_amount = base_amount - discount_amount.

    Raises:
        InvalidInputError: If base_amount cannot be held to the minor unit
    """
    base_amount = round_to_minor_unit(pricing_input.base_fee * pricing_input.student_count)
    discount = compute_discount(pricing_input.student_count, pricing_input.rules)
    discount_amount = round_to_minor_unit(base_amount * discount.percentage / HUNDRED)
    total_amount = base_amount - discount_amount

    return PricingResult(
        base_amount=base_amount,
        discount_percentage=discount.percentage,
        discount_amount=discount_amount,
        total_amount=total_amount,
        student_count=pricing_input.student_count,
        min_students_matched=discount.min_students_matched,
    )


def calculate_total_amount(
    base_fee: Any, student_count: int, rules: Iterable[DiscountRule | dict[str, Any]] = ()
) -> PricingResult:
    """Shortcut for compute_total(PricingInput(...)) taking raw rule mappings."""
    return compute_total(PricingInput(base_fee=base_fee, student_count=student_count, rules=tuple(rules)))


def event_fee(event: Any, currency: str | Currency) -> Decimal:
    """Per-student base fee of an event for the given currency."""
    code = parse_currency(currency)
    fee = event.base_fee_inr if code is Currency.INR else event.base_fee_usd
    if fee is None:
        raise InvalidInputError(f"Event has no {code.value} fee configured")
    return to_decimal(fee)
