"""
Venue endpoints.

Listing and lookups are public; only approved venues are listed.
Creating and editing venues requires an admin session.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from culturepass_api.app.core.security import require_admin
from culturepass_api.app.schemas.event import EventRead
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.schemas.venue import VenueCreate, VenueRead, VenueUpdate
from culturepass_api.app.services.venue_service import VenueService

router = APIRouter()


@router.get("", response_model=List[VenueRead])
async def list_venues() -> List[VenueRead]:
    return await VenueService.list_venues()


@router.get("/{venue_id}", response_model=VenueRead)
async def get_venue(venue_id: str) -> VenueRead:
    return await VenueService.get_venue(venue_id)


@router.get("/{venue_id}/events", response_model=List[EventRead])
async def list_venue_events(venue_id: str) -> List[EventRead]:
    """Published events held at the venue."""
    return await VenueService.list_events(venue_id)


@router.post("", response_model=VenueRead, status_code=status.HTTP_201_CREATED)
async def create_venue(venue: VenueCreate, admin: AccountRead = Depends(require_admin)) -> VenueRead:
    return await VenueService.create_venue(venue)


@router.put("/{venue_id}", response_model=VenueRead)
async def update_venue(
    venue_id: str,
    updates: VenueUpdate,
    admin: AccountRead = Depends(require_admin),
) -> VenueRead:
    return await VenueService.update_venue(venue_id, updates.model_dump(exclude_none=True))
