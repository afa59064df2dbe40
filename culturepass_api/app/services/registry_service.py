"""
CPID registry: public identifier codes for created entities.

A code is ``<kind prefix><6 symbols>`` with the symbols drawn from a
32‑character alphabet that leaves out the look‑alike glyphs 0/O and
1/I, so codes survive being read aloud or copied from a QR label.  The
``cpids`` table maps each code to ``(entity_type, entity_id)``.  Rows
are only ever inserted: a code is never updated, deleted or handed to
a second entity, even after the original entity is removed.
"""

import logging
import secrets
import sqlite3
from typing import Callable, Optional

from ..core.config import settings
from ..core.db import get_cursor, row_to_dict
from ..core.errors import ConflictError, DuplicateCodeError, NotFoundError
from ..schemas.registry import EntityKind, RegistryEntry

logger = logging.getLogger(__name__)

ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

# insert(cursor, cpid) writes the entity row inside the registry transaction.
EntityInsert = Callable[[sqlite3.Cursor, str], None]


class IdentifierRegistry:
    """Assigns and resolves CPIDs."""

    @classmethod
    def generate_code(cls, kind: EntityKind) -> str:
        suffix = "".join(secrets.choice(ALPHABET) for _ in range(CODE_LENGTH))
        return f"{kind.prefix}{suffix}"

    @classmethod
    def _register(cls, cursor: sqlite3.Cursor, code: str, kind: EntityKind, entity_id: str) -> None:
        existing = cursor.execute(
            "SELECT cpid FROM cpids WHERE entity_type = ? AND entity_id = ?",
            (kind.value, entity_id),
        ).fetchone()
        if existing:
            raise ConflictError(f"{kind.value} {entity_id} already has code {existing['cpid']}")
        try:
            cursor.execute(
                "INSERT INTO cpids (cpid, entity_type, entity_id) VALUES (?, ?, ?)",
                (code, kind.value, entity_id),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicateCodeError(f"Code {code} is already assigned") from exc

    @classmethod
    async def assign(
        cls,
        kind: EntityKind,
        entity_id: str,
        cursor: Optional[sqlite3.Cursor] = None,
    ) -> str:
        """Generate a code for an entity and record it.

        When ``cursor`` is given the registry row joins the caller's
        transaction; otherwise it is committed on its own.  Raises
        ``DuplicateCodeError`` if the generated code is already taken;
        retrying is up to the caller (see :meth:`create_registered`).
        """
        code = cls.generate_code(kind)
        if cursor is not None:
            cls._register(cursor, code, kind, entity_id)
        else:
            with get_cursor() as own_cursor:
                cls._register(own_cursor, code, kind, entity_id)
        return code

    @classmethod
    async def create_registered(cls, kind: EntityKind, entity_id: str, insert: EntityInsert) -> str:
        """Create an entity row and its registry row in one transaction.

        A code collision rolls back the whole transaction (so no entity
        row without a code is left behind) and is retried with a new
        code up to ``settings.cpid_max_attempts`` times.
        """
        attempts = max(1, settings.cpid_max_attempts)
        attempt = 1
        while True:
            try:
                with get_cursor() as cursor:
                    code = await cls.assign(kind, entity_id, cursor=cursor)
                    insert(cursor, code)
                return code
            except DuplicateCodeError:
                logger.warning(
                    "CPID collision for %s %s (attempt %s of %s)", kind.value, entity_id, attempt, attempts
                )
                if attempt >= attempts:
                    raise
                attempt += 1

    @classmethod
    async def lookup(cls, code: str) -> RegistryEntry:
        """Resolve a code to its entity kind and id.  Pure read."""
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT cpid, entity_type, entity_id, created_at FROM cpids WHERE cpid = ?",
                (code.strip().upper(),),
            ).fetchone()
        if not row:
            raise NotFoundError("CPID", code)
        return RegistryEntry(**row_to_dict(row))
