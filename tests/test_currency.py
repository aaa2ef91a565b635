from decimal import Decimal

import pytest

from app.core.currency import (
    Currency,
    currency_symbol,
    format_amount,
    from_minor_units,
    is_supported_currency,
    parse_currency,
    to_minor_units,
)
from app.core.exceptions import InvalidInputError, UnsupportedCurrencyError


def test_format_inr():
    assert format_amount(1234.5, "INR") == "₹1,234.50"


def test_format_usd():
    assert format_amount(1234.5, "USD") == "$1,234.50"


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0.00"),
        (999, "₹999.00"),
        (100000, "₹1,00,000.00"),
        (Decimal("1234567.5"), "₹12,34,567.50"),
        (Decimal("123456789.129"), "₹12,34,56,789.13"),
        (Decimal("-1500"), "-₹1,500.00"),
    ],
)
def test_format_inr_indian_grouping(amount, expected):
    assert format_amount(amount, Currency.INR) == expected


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "$0.00"),
        (Decimal("1234567.5"), "$1,234,567.50"),
        ("0.005", "$0.01"),
        (Decimal("-42.1"), "-$42.10"),
    ],
)
def test_format_usd_grouping(amount, expected):
    assert format_amount(amount, Currency.USD) == expected


def test_format_rejects_other_currencies():
    with pytest.raises(UnsupportedCurrencyError):
        format_amount(10, "EUR")


def test_currency_codes_are_exact():
    assert parse_currency("USD") is Currency.USD
    with pytest.raises(UnsupportedCurrencyError):
        parse_currency("usd")
    assert is_supported_currency("INR")
    assert not is_supported_currency("inr")
    assert not is_supported_currency(None)


def test_currency_symbols():
    assert currency_symbol("INR") == "₹"
    assert currency_symbol(Currency.USD) == "$"


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("1800.00"), 180000),
        ("0.01", 1),
        (19.99, 1999),
        (0.125, 13),
        (0, 0),
    ],
)
def test_to_minor_units(amount, expected):
    assert to_minor_units(amount, "INR") == expected
    assert to_minor_units(amount, "USD") == expected


def test_from_minor_units():
    assert from_minor_units(123450, "INR") == Decimal("1234.50")
    assert from_minor_units(1, "USD") == Decimal("0.01")


def test_minor_unit_round_trip():
    for cents in (0, 1, 99, 100, 1999, 123456789):
        amount = Decimal(cents) / 100
        assert from_minor_units(to_minor_units(amount, "USD"), "USD") == amount


def test_minor_unit_conversion_rejects_bad_input():
    with pytest.raises(UnsupportedCurrencyError):
        to_minor_units(10, "GBP")
    with pytest.raises(InvalidInputError):
        from_minor_units(12.5, "INR")


def test_amount_beyond_decimal_precision_is_invalid_input():
    with pytest.raises(InvalidInputError):
        to_minor_units(Decimal("1e30"), "INR")
    with pytest.raises(InvalidInputError):
        format_amount(Decimal("1e27"), "USD")
