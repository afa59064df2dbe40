"""
Artist endpoints.

``/featured`` lists active featured artists and ``/{artist_id}/events``
the published events linked to an artist.
"""

from typing import List

from fastapi import APIRouter

from culturepass_api.app.schemas.directory import ArtistCreate, ArtistRead, ArtistUpdate
from culturepass_api.app.schemas.event import EventRead
from culturepass_api.app.services.directory_service import ArtistService
from culturepass_api.app.services.event_service import EventService

from .directory import add_directory_routes

router = APIRouter()


@router.get("/featured", response_model=List[ArtistRead])
async def list_featured_artists() -> List[ArtistRead]:
    return await ArtistService.list_featured()


@router.get("/{artist_id}/events", response_model=List[EventRead])
async def list_artist_events(artist_id: str) -> List[EventRead]:
    await ArtistService.get_by_id(artist_id)
    return await EventService.list_by_artist(artist_id)


add_directory_routes(router, ArtistService, ArtistCreate, ArtistUpdate, ArtistRead)
