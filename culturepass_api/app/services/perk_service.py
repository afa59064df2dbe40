"""
Business logic for perks.

Perks are discount offers published on behalf of a business.  They have
a status like directory entries but no CPID and no counters; only
``active`` perks are listed publicly.
"""

import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from ..core.db import get_cursor, insert_row, row_to_dict, update_row
from ..core.errors import NotFoundError, ValidationError
from ..schemas.directory import EntityStatus
from ..schemas.perk import PerkCreate, PerkRead

logger = logging.getLogger(__name__)


def _check_business(cursor: sqlite3.Cursor, business_id: Optional[str]) -> None:
    if not business_id:
        return
    business = cursor.execute("SELECT id FROM businesses WHERE id = ?", (business_id,)).fetchone()
    if not business:
        raise ValidationError(f"Unknown business {business_id}")


class PerkService:
    """Service for managing perks."""

    @classmethod
    async def create_perk(cls, data: PerkCreate) -> PerkRead:
        perk_id = str(uuid.uuid4())
        try:
            with get_cursor() as cursor:
                _check_business(cursor, data.business_id)
                insert_row(cursor, "perks", {**data.model_dump(), "id": perk_id})
        except sqlite3.IntegrityError as exc:
            # the business was deleted between the check and the insert
            raise ValidationError(f"Unknown business {data.business_id}") from exc
        logger.info("Perk '%s' created for %s", data.title, data.business_name)
        return await cls.get_perk(perk_id)

    @classmethod
    async def get_perk(cls, perk_id: str) -> PerkRead:
        with get_cursor() as cursor:
            row = cursor.execute("SELECT * FROM perks WHERE id = ?", (perk_id,)).fetchone()
        if not row:
            raise NotFoundError("Perk", perk_id)
        return PerkRead(**row_to_dict(row))

    @classmethod
    async def list_perks(cls) -> List[PerkRead]:
        """Active perks, soonest expiry first."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT * FROM perks WHERE status = ? ORDER BY valid_until, title",
                (EntityStatus.ACTIVE.value,),
            ).fetchall()
        return [PerkRead(**row_to_dict(row)) for row in rows]

    @classmethod
    async def update_perk(cls, perk_id: str, updates: Dict[str, Any]) -> PerkRead:
        """Apply an admin edit; a ``business_id`` must name an existing business."""
        try:
            with get_cursor() as cursor:
                _check_business(cursor, updates.get("business_id"))
                if not update_row(cursor, "perks", perk_id, updates):
                    raise NotFoundError("Perk", perk_id)
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"Unknown business {updates.get('business_id')}") from exc
        return await cls.get_perk(perk_id)

    @classmethod
    async def delete_perk(cls, perk_id: str) -> None:
        with get_cursor() as cursor:
            cursor.execute("DELETE FROM perks WHERE id = ?", (perk_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("Perk", perk_id)
        logger.info("Perk %s deleted", perk_id)
