"""
Business logic for venues and the map overview.

Venues are places events are held at.  They are managed by admins,
receive a ``CP-V-`` code and are listed publicly while ``approved``.
Events point at a venue through ``events.venue_id``.
"""

import logging
import sqlite3
import uuid
from typing import Any, Dict, List

from ..core.db import get_cursor, insert_row, row_to_dict, update_row
from ..core.errors import NotFoundError
from ..schemas.event import EventRead
from ..schemas.registry import EntityKind
from ..schemas.venue import MapData, VenueCreate, VenueRead
from .directory_service import BusinessService
from .event_service import EventService
from .registry_service import IdentifierRegistry

logger = logging.getLogger(__name__)

VENUE_JSON_FIELDS = ("amenities", "images", "social_links")


def _to_read(row: sqlite3.Row) -> VenueRead:
    return VenueRead(**row_to_dict(row, VENUE_JSON_FIELDS, ("approved",)))


class VenueService:
    """Service for managing venues."""

    @classmethod
    async def create_venue(cls, data: VenueCreate) -> VenueRead:
        venue_id = str(uuid.uuid4())
        values = {**data.model_dump(), "id": venue_id}

        def insert(cursor: sqlite3.Cursor, code: str) -> None:
            insert_row(cursor, "venues", {**values, "cpid": code})

        code = await IdentifierRegistry.create_registered(EntityKind.VENUE, venue_id, insert)
        logger.info("Venue '%s' created (%s, cpid %s)", data.name, venue_id, code)
        return await cls.get_venue(venue_id)

    @classmethod
    async def get_venue(cls, venue_id: str) -> VenueRead:
        with get_cursor() as cursor:
            row = cursor.execute("SELECT * FROM venues WHERE id = ?", (venue_id,)).fetchone()
        if not row:
            raise NotFoundError("Venue", venue_id)
        return _to_read(row)

    @classmethod
    async def list_venues(cls) -> List[VenueRead]:
        """Approved venues ordered by name."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT * FROM venues WHERE approved = 1 ORDER BY name COLLATE NOCASE"
            ).fetchall()
        return [_to_read(row) for row in rows]

    @classmethod
    async def update_venue(cls, venue_id: str, updates: Dict[str, Any]) -> VenueRead:
        with get_cursor() as cursor:
            if not update_row(cursor, "venues", venue_id, updates):
                raise NotFoundError("Venue", venue_id)
        logger.info("Venue %s updated: %s", venue_id, sorted(updates))
        return await cls.get_venue(venue_id)

    @classmethod
    async def list_events(cls, venue_id: str) -> List[EventRead]:
        """Published events held at the venue; 404 for an unknown venue."""
        await cls.get_venue(venue_id)
        return await EventService.list_by_venue(venue_id)


class MapService:
    """Everything the map screen plots, in one response."""

    @classmethod
    async def map_data(cls) -> MapData:
        """Published events and active businesses that have coordinates,
        plus all approved venues."""
        return MapData(
            events=await EventService.list_mapped(),
            venues=await VenueService.list_venues(),
            businesses=await BusinessService.list_mapped(),
        )
