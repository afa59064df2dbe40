"""
Event endpoints.

Listings are public and only show published events.  Creating,
editing and deleting events requires an admin session.  Fixed paths
(``/featured``, ``/dates`` ...) are declared before ``/{event_id}`` so
they are not captured as ids.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from culturepass_api.app.core.security import require_admin
from culturepass_api.app.schemas.common import OkResponse
from culturepass_api.app.schemas.event import EventCategory, EventCreate, EventRead, EventUpdate
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.services.event_service import EventService

router = APIRouter()


@router.get("", response_model=List[EventRead])
async def list_events(
    category: Optional[EventCategory] = Query(None),
    city: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
) -> List[EventRead]:
    """List published events ordered by date.

    - **category**: one of the event categories (exact match).
    - **city**: exact city name.
    - **featured**: only featured events when true.
    - **search**: case‑insensitive substring of the title.
    """
    return await EventService.list_events(category=category, city=city, featured=featured, search=search)


@router.get("/featured", response_model=List[EventRead])
async def list_featured_events() -> List[EventRead]:
    return await EventService.list_featured()


@router.get("/trending", response_model=List[EventRead])
async def list_trending_events() -> List[EventRead]:
    return await EventService.list_trending()


@router.get("/dates", response_model=List[str])
async def list_event_dates() -> List[str]:
    """Distinct dates with at least one published event, for the calendar."""
    return await EventService.list_dates()


@router.get("/by-date/{date}", response_model=List[EventRead])
async def list_events_by_date(date: str) -> List[EventRead]:
    return await EventService.list_by_date(date)


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: str) -> EventRead:
    return await EventService.get_event(event_id)


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    admin: AccountRead = Depends(require_admin),
) -> EventRead:
    return await EventService.create_event(event)


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: str,
    updates: EventUpdate,
    admin: AccountRead = Depends(require_admin),
) -> EventRead:
    """Partially update an event; omitted fields stay unchanged."""
    return await EventService.update_event(event_id, updates.model_dump(exclude_none=True))


@router.delete("/{event_id}", response_model=OkResponse)
async def delete_event(
    event_id: str,
    admin: AccountRead = Depends(require_admin),
) -> OkResponse:
    await EventService.delete_event(event_id)
    return OkResponse()
