"""
Business logic for the moderated directory.

Organisations, businesses and artists share one lifecycle:

* entries created by an admin (or seeded) start ``active``;
* entries submitted by a regular user start ``pending`` and record the
  submitter as ``owner_id``;
* only an admin moves an entry to ``active`` or ``rejected``;
* public listings show ``active`` entries only.

``DirectoryService`` implements the lifecycle once; the subclasses only
name their table, CPID kind and read schema.
"""

import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Optional, Type, Union

from ..core.db import get_cursor, insert_row, row_to_dict, update_row
from ..core.errors import InvalidEntityKindError, InvalidStatusError, NotFoundError
from ..schemas.common import ApiModel
from ..schemas.directory import (
    ArtistRead,
    BusinessRead,
    DirectoryRead,
    EntityStatus,
    OrganisationRead,
)
from ..schemas.registry import EntityKind
from .registry_service import IdentifierRegistry

logger = logging.getLogger(__name__)


class DirectoryService:
    """Shared CRUD and status lifecycle for moderated entity kinds."""

    table: str = ""
    kind: EntityKind
    label: str = ""
    read_schema: Type[DirectoryRead] = DirectoryRead
    json_fields: tuple = ("social_links",)
    bool_fields: tuple = ()

    @classmethod
    def _to_read(cls, row: sqlite3.Row) -> DirectoryRead:
        return cls.read_schema(**row_to_dict(row, cls.json_fields, cls.bool_fields))

    @classmethod
    def _select(cls, where: str = "", params: tuple = (), order_by: str = "name COLLATE NOCASE") -> List[DirectoryRead]:
        query = f"SELECT * FROM {cls.table}"
        if where:
            query += f" WHERE {where}"
        query += f" ORDER BY {order_by}"
        with get_cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
        return [cls._to_read(row) for row in rows]

    @classmethod
    async def create(cls, payload: ApiModel, submitted_by: Optional[str] = None) -> DirectoryRead:
        """Create an entry and assign its CPID.

        With ``submitted_by`` the entry is a user submission: status is
        forced to ``pending`` and the submitter becomes the owner.
        """
        entity_id = str(uuid.uuid4())
        status = EntityStatus.PENDING if submitted_by else EntityStatus.ACTIVE
        values: Dict[str, Any] = payload.model_dump()
        values.update(id=entity_id, status=status, owner_id=submitted_by)

        def insert(cursor: sqlite3.Cursor, code: str) -> None:
            insert_row(cursor, cls.table, {**values, "cpid": code})

        code = await IdentifierRegistry.create_registered(cls.kind, entity_id, insert)
        logger.info(
            "%s %s created as %s (cpid %s, submitted by %s)",
            cls.label, entity_id, status.value, code, submitted_by or "admin",
        )
        return await cls.get_by_id(entity_id)

    @classmethod
    async def get_by_id(cls, entity_id: str) -> DirectoryRead:
        """Return an entry regardless of its status."""
        with get_cursor() as cursor:
            row = cursor.execute(f"SELECT * FROM {cls.table} WHERE id = ?", (entity_id,)).fetchone()
        if not row:
            raise NotFoundError(cls.label, entity_id)
        return cls._to_read(row)

    @classmethod
    async def list_public(cls) -> List[DirectoryRead]:
        """Active entries only, ordered by name."""
        return cls._select("status = ?", (EntityStatus.ACTIVE.value,))

    @classmethod
    async def list_pending(cls) -> List[DirectoryRead]:
        """Entries awaiting moderation, most recent first."""
        return cls._select(
            "status = ?", (EntityStatus.PENDING.value,), order_by="created_at DESC, rowid DESC"
        )

    @classmethod
    async def list_all(cls) -> List[DirectoryRead]:
        return cls._select(order_by="created_at DESC, rowid DESC")

    @classmethod
    async def list_by_owner(cls, owner_id: str) -> List[DirectoryRead]:
        return cls._select("owner_id = ?", (owner_id,), order_by="created_at DESC, rowid DESC")

    @classmethod
    async def count(cls, status: Optional[EntityStatus] = None) -> int:
        query = f"SELECT COUNT(*) FROM {cls.table}"
        params: tuple = ()
        if status is not None:
            query += " WHERE status = ?"
            params = (status.value,)
        with get_cursor() as cursor:
            return cursor.execute(query, params).fetchone()[0]

    @classmethod
    async def set_status(cls, entity_id: str, status: Union[str, EntityStatus]) -> DirectoryRead:
        """Move an entry to ``pending``, ``active`` or ``rejected``.

        Any other value raises ``InvalidStatusError``.  Setting the
        status an entry already has succeeds and returns the same entry,
        so a double click on "approve" is harmless.
        """
        try:
            new_status = EntityStatus(status)
        except ValueError as exc:
            raise InvalidStatusError(f"Invalid status '{status}'") from exc
        with get_cursor() as cursor:
            updated = update_row(cursor, cls.table, entity_id, {"status": new_status})
        if not updated:
            raise NotFoundError(cls.label, entity_id)
        logger.info("%s %s set to %s", cls.label, entity_id, new_status.value)
        return await cls.get_by_id(entity_id)

    @classmethod
    async def update(cls, entity_id: str, changes: Dict[str, Any]) -> DirectoryRead:
        """Apply an admin edit of descriptive fields."""
        with get_cursor() as cursor:
            updated = update_row(cursor, cls.table, entity_id, changes)
        if not updated:
            raise NotFoundError(cls.label, entity_id)
        return await cls.get_by_id(entity_id)

    @classmethod
    async def delete(cls, entity_id: str) -> None:
        with get_cursor() as cursor:
            cursor.execute(f"DELETE FROM {cls.table} WHERE id = ?", (entity_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(cls.label, entity_id)
        logger.info("%s %s deleted", cls.label, entity_id)


class OrganisationService(DirectoryService):
    table = "organisations"
    kind = EntityKind.ORGANISATION
    label = "Organisation"
    read_schema = OrganisationRead
    json_fields = ("social_links", "categories")


class BusinessService(DirectoryService):
    table = "businesses"
    kind = EntityKind.BUSINESS
    label = "Business"
    read_schema = BusinessRead
    json_fields = ("social_links", "service_locations")
    bool_fields = ("is_sponsor",)

    @classmethod
    async def list_mapped(cls) -> List[DirectoryRead]:
        """Active businesses with coordinates."""
        return cls._select(
            "status = ? AND lat IS NOT NULL AND lng IS NOT NULL", (EntityStatus.ACTIVE.value,)
        )


class ArtistService(DirectoryService):
    table = "artists"
    kind = EntityKind.ARTIST
    label = "Artist"
    read_schema = ArtistRead
    bool_fields = ("featured",)

    @classmethod
    async def list_featured(cls) -> List[DirectoryRead]:
        return cls._select("status = ? AND featured = 1", (EntityStatus.ACTIVE.value,))


DIRECTORY_SERVICES: Dict[str, Type[DirectoryService]] = {
    "organisation": OrganisationService,
    "business": BusinessService,
    "artist": ArtistService,
}


def get_directory_service(entity_type: str) -> Type[DirectoryService]:
    """Map a URL ``type`` segment to its service; unknown types are a 400."""
    try:
        return DIRECTORY_SERVICES[entity_type]
    except KeyError:
        raise InvalidEntityKindError(f"Invalid type '{entity_type}'") from None
