"""
Business logic for events.

The ``EventService`` owns every statement against the ``events`` table
except the ``tickets_sold`` increment, which belongs to the counter
service so that it always happens together with an order insert.
Public listings only ever include published events.
"""

import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..core.db import get_cursor, insert_row, row_to_dict, update_row
from ..core.errors import CapacityBelowSoldError, NotFoundError, ValidationError
from ..schemas.event import EventCategory, EventCreate, EventRead
from ..schemas.registry import EntityKind
from .counter_service import OVERSELL_ALLOW
from .registry_service import IdentifierRegistry

logger = logging.getLogger(__name__)

EVENT_BOOL_FIELDS = ("featured", "trending", "published")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EventService:
    """Service for managing events."""

    @classmethod
    def _to_read(cls, row: sqlite3.Row) -> EventRead:
        return EventRead(**row_to_dict(row, bool_fields=EVENT_BOOL_FIELDS))

    @classmethod
    def _select(cls, where: List[str], params: List[Any], order_by: str = "date, time") -> List[EventRead]:
        query = "SELECT * FROM events"
        if where:
            query += " WHERE " + " AND ".join(where)
        query += f" ORDER BY {order_by}"
        with get_cursor() as cursor:
            rows = cursor.execute(query, tuple(params)).fetchall()
        return [cls._to_read(row) for row in rows]

    @classmethod
    async def create_event(cls, data: EventCreate) -> EventRead:
        """Create a new event and assign its ``CP-E-`` code."""
        if settings.oversell_policy != OVERSELL_ALLOW and data.tickets_sold > data.tickets_available:
            raise ValidationError("ticketsSold cannot exceed ticketsAvailable")
        event_id = str(uuid.uuid4())
        values = data.model_dump()
        values["id"] = event_id

        def insert(cursor: sqlite3.Cursor, code: str) -> None:
            insert_row(cursor, "events", {**values, "cpid": code})

        code = await IdentifierRegistry.create_registered(EntityKind.EVENT, event_id, insert)
        logger.info("Event '%s' created (%s, cpid %s)", data.title, event_id, code)
        return await cls.get_event(event_id)

    @classmethod
    async def get_event(cls, event_id: str) -> EventRead:
        """Retrieve a single event by id, published or not."""
        with get_cursor() as cursor:
            row = cursor.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
        if not row:
            raise NotFoundError("Event", event_id)
        return cls._to_read(row)

    @classmethod
    async def update_event(cls, event_id: str, updates: Dict[str, Any]) -> EventRead:
        """Update fields of an existing event.

        ``tickets_sold`` is not accepted here; it only changes through
        ``CounterService.record_order``.  Unless overselling is allowed,
        ``tickets_available`` cannot drop below ``tickets_sold``: the
        check is part of the ``UPDATE`` so it holds against concurrent
        orders, and a failed check raises ``CapacityBelowSoldError``.
        """
        updates = {k: v for k, v in updates.items() if k not in ("id", "cpid", "tickets_sold", "created_at")}
        guarded = "tickets_available" in updates and settings.oversell_policy != OVERSELL_ALLOW
        condition, condition_params = ("tickets_sold <= ?", (updates["tickets_available"],)) if guarded else ("", ())
        with get_cursor() as cursor:
            if not update_row(cursor, "events", event_id, updates, condition, condition_params):
                row = cursor.execute("SELECT tickets_sold FROM events WHERE id = ?", (event_id,)).fetchone()
                if not row:
                    raise NotFoundError("Event", event_id)
                logger.warning(
                    "Event %s: refused tickets_available=%s with %s sold",
                    event_id, updates["tickets_available"], row["tickets_sold"],
                )
                raise CapacityBelowSoldError(
                    f"{row['tickets_sold']} tickets are already sold for this event"
                )
        logger.info("Event %s updated: %s", event_id, sorted(updates))
        return await cls.get_event(event_id)

    @classmethod
    async def delete_event(cls, event_id: str) -> None:
        """Delete an event together with its orders.

        The event's CPID stays in the registry so the code is never
        issued again.
        """
        with get_cursor() as cursor:
            exists = cursor.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
            if not exists:
                raise NotFoundError("Event", event_id)
            cursor.execute("DELETE FROM orders WHERE event_id = ?", (event_id,))
            cursor.execute("DELETE FROM events WHERE id = ?", (event_id,))
        logger.info("Event %s deleted", event_id)

    @classmethod
    async def list_events(
        cls,
        category: Optional[EventCategory] = None,
        city: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[EventRead]:
        """Published events matching the filters, ordered by date.

        - ``category`` and ``city`` match exactly.
        - ``featured`` restricts to featured events when true.
        - ``search`` is a case‑insensitive substring of the title.
        """
        where = ["published = 1"]
        params: List[Any] = []
        if category:
            where.append("category = ?")
            params.append(EventCategory(category).value)
        if city:
            where.append("city = ?")
            params.append(city)
        if featured:
            where.append("featured = 1")
        if search:
            where.append("LOWER(title) LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(search.lower())}%")
        return cls._select(where, params)

    @classmethod
    async def list_featured(cls) -> List[EventRead]:
        return cls._select(["published = 1", "featured = 1"], [])

    @classmethod
    async def list_trending(cls) -> List[EventRead]:
        return cls._select(["published = 1", "trending = 1"], [])

    @classmethod
    async def list_by_date(cls, date: str) -> List[EventRead]:
        return cls._select(["published = 1", "date = ?"], [date])

    @classmethod
    async def list_by_artist(cls, artist_id: str) -> List[EventRead]:
        return cls._select(["published = 1", "artist_id = ?"], [artist_id])

    @classmethod
    async def list_by_venue(cls, venue_id: str) -> List[EventRead]:
        return cls._select(["published = 1", "venue_id = ?"], [venue_id])

    @classmethod
    async def list_mapped(cls) -> List[EventRead]:
        """Published events with coordinates."""
        return cls._select(["published = 1", "lat IS NOT NULL", "lng IS NOT NULL"], [])

    @classmethod
    async def list_dates(cls) -> List[str]:
        """Distinct dates that have at least one published event."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT DISTINCT date FROM events WHERE published = 1 ORDER BY date"
            ).fetchall()
        return [row["date"] for row in rows]

    @classmethod
    async def totals(cls) -> Dict[str, int]:
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT COUNT(*) AS events, COALESCE(SUM(tickets_sold), 0) AS tickets_sold FROM events"
            ).fetchone()
        return {"events": row["events"], "tickets_sold": row["tickets_sold"]}
