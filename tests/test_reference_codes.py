import asyncio
import re
import time

import pytest

from app.core.exceptions import CodeGenerationExhaustedError, InvalidInputError
from app.core.reference_codes import (
    ReferencePrefix,
    generate_batch_reference,
    generate_invoice_number,
    generate_payment_reference,
    generate_registration_id,
    generate_school_code,
    generate_slug,
    generate_timestamped_reference,
    generate_unique_school_code,
    generate_verification_token,
)

REFERENCE_PATTERN = r"-[0-9A-Z]+-[0-9A-Z]{5}"


def test_school_code_format():
    for _ in range(200):
        assert re.fullmatch(r"[A-Z]{3}[0-9]{3}", generate_school_code())


def test_invoice_number_padding():
    assert generate_invoice_number("ABC123", 7) == "INV-ABC123-0007"
    assert generate_invoice_number("ABC123", 9999) == "INV-ABC123-9999"


def test_invoice_number_wider_than_padding():
    assert generate_invoice_number("ABC123", 12345) == "INV-ABC123-12345"


@pytest.mark.parametrize("sequence", [0, -1, 1.0, True, "7"])
def test_invoice_number_rejects_bad_sequence(sequence):
    with pytest.raises(InvalidInputError):
        generate_invoice_number("ABC123", sequence)


def test_timestamped_reference_format():
    assert re.fullmatch("BATCH" + REFERENCE_PATTERN, generate_batch_reference())
    assert re.fullmatch("REG" + REFERENCE_PATTERN, generate_registration_id())
    assert re.fullmatch("PAY" + REFERENCE_PATTERN, generate_payment_reference())
    assert re.fullmatch("CUSTOM" + REFERENCE_PATTERN, generate_timestamped_reference("custom"))
    assert generate_timestamped_reference(ReferencePrefix.INVOICE).startswith("INV-")


def test_timestamped_reference_sorts_by_creation_time():
    first = generate_timestamped_reference("PAY")
    time.sleep(0.005)
    second = generate_timestamped_reference("PAY")
    assert first.split("-")[1] < second.split("-")[1]


def test_timestamped_reference_requires_prefix():
    with pytest.raises(InvalidInputError):
        generate_timestamped_reference("  ")


def test_unique_school_code_retries_until_free():
    seen = []

    async def is_taken(code):
        seen.append(code)
        return len(seen) < 3

    code = asyncio.run(generate_unique_school_code(is_taken))
    assert code == seen[-1]
    assert len(seen) == 3


def test_unique_school_code_gives_up_after_max_attempts():
    calls = []

    async def always_taken(code):
        calls.append(code)
        return True

    with pytest.raises(CodeGenerationExhaustedError) as exc_info:
        asyncio.run(generate_unique_school_code(always_taken))
    assert len(calls) == 10
    assert exc_info.value.attempts == 10


def test_generate_slug():
    assert generate_slug("  Maths Olympiad 2025! ") == "maths-olympiad-2025"
    assert generate_slug("Science -- Fair__Junior") == "science-fair-junior"


def test_verification_token():
    token = generate_verification_token()
    assert re.fullmatch(r"[0-9a-f]{64}", token)
    assert token != generate_verification_token()
