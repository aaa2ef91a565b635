"""Currency conversion and display formatting for INR and USD."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from app.core.exceptions import InvalidInputError, UnsupportedCurrencyError


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"


CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.INR: "₹",
    Currency.USD: "$",
}

# Both currencies use 100 subunits (paise/cents)
MINOR_UNITS_PER_MAJOR = 100

CENT = Decimal("0.01")


def parse_currency(currency: str | Currency) -> Currency:
    """
    Resolve a currency code to a supported Currency.

    Matching is exact: "inr" or " INR" are rejected just like "EUR".

    Raises:
        UnsupportedCurrencyError: If the code is not INR or USD
    """
    if isinstance(currency, Currency):
        return currency
    try:
        return Currency(currency)
    except ValueError:
        raise UnsupportedCurrencyError(currency) from None


def is_supported_currency(currency: object) -> bool:
    return isinstance(currency, str) and currency in {code.value for code in Currency}


def currency_symbol(currency: str | Currency) -> str:
    return CURRENCY_SYMBOLS[parse_currency(currency)]


def to_decimal(amount: object) -> Decimal:
    """Convert int/float/str/Decimal to a finite Decimal without binary float artefacts."""
    if isinstance(amount, bool):
        raise InvalidInputError(f"Invalid amount: {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInputError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise InvalidInputError(f"Invalid amount: {amount!r}")
    return value


def round_to_minor_unit(amount: Decimal) -> Decimal:
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Result would exceed the decimal context precision
        raise InvalidInputError(f"Amount is too large: {amount}") from None


def to_minor_units(amount: object, currency: str | Currency) -> int:
    """
    Convert an amount in major units to the smallest currency unit (paise or cents).

    Args:
        amount: Amount in major units
        currency: INR or USD

    Returns:
        Integer amount in minor units, rounded half-up

    Examples:
        >>> to_minor_units("1234.50", "INR")
        123450
        >>> to_minor_units(0.125, "USD")
        13
    """
    parse_currency(currency)
    value = to_decimal(amount) * MINOR_UNITS_PER_MAJOR
    try:
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise InvalidInputError(f"Amount is too large: {amount}") from None


def from_minor_units(units: int, currency: str | Currency) -> Decimal:
    """Convert a minor-unit integer back to a major-unit Decimal with 2 decimal places."""
    parse_currency(currency)
    if isinstance(units, bool) or not isinstance(units, int):
        raise InvalidInputError(f"Minor units must be an integer, got {units!r}")
    return (Decimal(units) / MINOR_UNITS_PER_MAJOR).quantize(CENT)


def _group_us(digits: str) -> str:
    return f"{int(digits):,}"


def _group_indian(digits: str) -> str:
    # Last three digits form one group, everything before is grouped in pairs
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_amount(amount: object, currency: str | Currency) -> str:
    """
    Render an amount as a display string with the currency symbol and local grouping.

    Examples:
        >>> format_amount(1234.5, "INR")
        '₹1,234.50'
        >>> format_amount(1234567.5, "INR")
        '₹12,34,567.50'
        >>> format_amount(1234567.5, "USD")
        '$1,234,567.50'
    """
    code = parse_currency(currency)
    value = round_to_minor_unit(to_decimal(amount))
    sign = "-" if value < 0 else ""
    integer_part, fraction_part = f"{abs(value):.2f}".split(".")

    if code is Currency.INR:
        grouped = _group_indian(integer_part)
    else:
        grouped = _group_us(integer_part)

    return f"{sign}{CURRENCY_SYMBOLS[code]}{grouped}.{fraction_part}"
