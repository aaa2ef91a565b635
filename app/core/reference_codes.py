"""Human-readable reference code generation (school codes, batch/payment references, invoice numbers)."""
import logging
import re
import secrets
import string
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from app.core.exceptions import CodeGenerationExhaustedError, InvalidInputError

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase
RANDOM_SUFFIX_LENGTH = 5
DEFAULT_MAX_ATTEMPTS = 10


class ReferencePrefix(str, Enum):
    SCHOOL = "SCH"
    BATCH = "BATCH"
    REGISTRATION = "REG"
    PAYMENT = "PAY"
    INVOICE = "INV"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_school_code() -> str:
    """
    Generate a candidate school code: 3 uppercase letters followed by 3 digits (e.g. ABC123).

    Uniqueness is not checked here; see generate_unique_school_code.
    """
    letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(3))
    numbers = "".join(secrets.choice(string.digits) for _ in range(3))
    return f"{letters}{numbers}"


def generate_timestamped_reference(prefix: str | ReferencePrefix) -> str:
    """
    Generate a reference in the format {PREFIX}-{base36 ms timestamp}-{5 base36 chars}.

    References sort by creation time at millisecond granularity; two references
    from the same millisecond have no defined order.

    Examples:
        >>> generate_timestamped_reference("batch")  # doctest: +SKIP
        'BATCH-MGT3K1ZQ-7QX2D'
    """
    if isinstance(prefix, ReferencePrefix):
        prefix = prefix.value
    if not prefix or not prefix.strip():
        raise InvalidInputError("Reference prefix cannot be empty")

    timestamp = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH))
    return f"{prefix.strip()}-{timestamp}-{suffix}".upper()


def generate_batch_reference() -> str:
    return generate_timestamped_reference(ReferencePrefix.BATCH)


def generate_registration_id() -> str:
    return generate_timestamped_reference(ReferencePrefix.REGISTRATION)


def generate_payment_reference() -> str:
    return generate_timestamped_reference(ReferencePrefix.PAYMENT)


def generate_invoice_number(school_code: str, sequence: int, width: int = 4) -> str:
    """
    Format an invoice number as INV-{school_code}-{sequence zero-padded}.

    The caller owns the per-school sequence. Sequences wider than the padding
    are kept in full, so 12345 gives INV-ABC123-12345.
    """
    if isinstance(sequence, bool) or not isinstance(sequence, int) or sequence < 1:
        raise InvalidInputError(f"Invoice sequence must be a positive integer, got {sequence!r}")
    if not school_code:
        raise InvalidInputError("School code is required for invoice numbers")
    return f"{ReferencePrefix.INVOICE.value}-{school_code}-{str(sequence).zfill(width)}"


async def generate_unique_school_code(
    is_taken: Callable[[str], Awaitable[bool]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """
    Generate a school code that the caller's store does not already hold.

    Args:
        is_taken: Async predicate returning True when a code already exists
        max_attempts: Number of candidates to try before giving up

    Returns:
        A school code not reported as taken

    Raises:
        CodeGenerationExhaustedError: If every candidate collided
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_school_code()
        if not await is_taken(code):
            return code
        logger.debug("School code collision", extra={"code": code, "attempt": attempt})

    logger.warning("School code generation exhausted", extra={"attempts": max_attempts})
    raise CodeGenerationExhaustedError(max_attempts)


def generate_slug(title: str) -> str:
    """
    Build a URL slug from a title.

    Examples:
        >>> generate_slug("  Maths Olympiad 2025! ")
        'maths-olympiad-2025'
    """
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def generate_verification_token() -> str:
    """Random 64-character hex token for email verification links."""
    return secrets.token_hex(32)
