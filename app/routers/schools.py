import logging

from fastapi import APIRouter, HTTPException, status

from app.dependencies.database import DBSessionDep
from app.models import School
from app.schemas.school import SchoolCreate, SchoolResponse
from app.utils.school import generate_unique_school_code, get_school_by_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/schools", tags=["schools"])


@router.post("", response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
async def register_school(school_data: SchoolCreate, session: DBSessionDep) -> SchoolResponse:
    """Register a school and assign it a generated school code."""
    code = await generate_unique_school_code(session)

    school = School(
        code=code,
        name=school_data.name,
        country=school_data.country,
        currency=school_data.currency.value,
    )
    session.add(school)
    await session.commit()
    await session.refresh(school)

    logger.info("New school registered", extra={"school_code": school.code, "school_name": school.name})
    return SchoolResponse.model_validate(school)


@router.get("/{school_code}", response_model=SchoolResponse)
async def get_school(school_code: str, session: DBSessionDep) -> SchoolResponse:
    school = await get_school_by_code(session, school_code)
    if not school:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="School not found")
    return SchoolResponse.model_validate(school)
