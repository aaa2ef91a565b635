"""Error taxonomy for pricing, reference codes and currency handling."""


class BillingError(Exception):
    """Base class for errors raised by the billing core."""


class InvalidInputError(BillingError, ValueError):
    """Malformed pricing input: negative fee, bad student count or bad discount rule."""


class UnsupportedCurrencyError(BillingError, ValueError):
    """Currency code outside the supported set (INR, USD)."""

    def __init__(self, currency: object):
        self.currency = currency
        super().__init__(f"Unsupported currency: {currency!r}. Must be one of: INR, USD")


class CodeGenerationExhaustedError(BillingError, RuntimeError):
    """Unique code generation ran out of attempts."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Unable to generate a unique code after {attempts} attempts")
