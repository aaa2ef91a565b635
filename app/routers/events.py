from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from app.core.reference_codes import generate_slug
from app.dependencies.database import DBSessionDep
from app.models import Event
from app.schemas.event import EventCreate, EventResponse

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(event_data: EventCreate, session: DBSessionDep) -> EventResponse:
    """Create an event with per-currency fees and bulk discount rules."""
    slug = generate_slug(event_data.title)
    if not slug:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event title must contain letters or digits")

    existing = await session.execute(select(Event.id).where(Event.slug == slug))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Event with slug '{slug}' already exists")

    event = Event(
        title=event_data.title,
        slug=slug,
        description=event_data.description,
        base_fee_inr=event_data.base_fee_inr,
        base_fee_usd=event_data.base_fee_usd,
        bulk_discount_rules=[rule.model_dump(mode="json") for rule in event_data.bulk_discount_rules],
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return EventResponse.model_validate(event)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, session: DBSessionDep) -> EventResponse:
    event = await session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return EventResponse.model_validate(event)
