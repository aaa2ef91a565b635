"""Utility functions for school operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.reference_codes import generate_unique_school_code as generate_code
from app.models import School


async def school_code_exists(session: AsyncSession, code: str) -> bool:
    stmt = select(School.id).where(School.code == code)
    result = await session.execute(stmt)
    return result.scalar_one_or_none() is not None


async def generate_unique_school_code(session: AsyncSession, max_attempts: int | None = None) -> str:
    """
    Generate a school code that is not yet used by any school.

    The unique constraint on School.code still decides concurrent races; this
    only avoids handing out codes that are already taken.

    Args:
        session: Database session
        max_attempts: Candidates to try (defaults to settings.school_code_max_attempts)

    Returns:
        An unused 6-character school code

    Raises:
        CodeGenerationExhaustedError: If every candidate was already taken
    """

    async def is_taken(code: str) -> bool:
        return await school_code_exists(session, code)

    return await generate_code(is_taken, max_attempts or settings.school_code_max_attempts)


async def get_school_by_code(session: AsyncSession, code: str) -> School | None:
    stmt = select(School).where(School.code == code)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
