"""
Business logic for accounts.

The ``UserService`` stores accounts in the ``users`` table.  Every
method that returns an account returns ``AccountRead``, which has no
password field; the stored hash only leaves this module through
``get_credentials`` for the login check.  Saved events live in the
``saved_events`` table, one row per (user, event).
"""

import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Optional, Tuple

from ..core.db import get_cursor, insert_row, row_to_dict, update_row
from ..core.errors import ConflictError, NotFoundError, UsernameTakenError
from ..schemas.registry import EntityKind
from ..schemas.user import AccountRead, Role
from .registry_service import IdentifierRegistry

logger = logging.getLogger(__name__)

ACCOUNT_JSON_FIELDS = ("social_links",)

PROFILE_DEFAULTS = {
    "email": "",
    "city": "Sydney",
    "state": "NSW",
    "country": "Australia",
    "phone": "",
    "website": "",
    "avatar_url": "",
}


def _saved_event_ids(cursor: sqlite3.Cursor, user_id: str) -> List[str]:
    rows = cursor.execute(
        "SELECT event_id FROM saved_events WHERE user_id = ? ORDER BY created_at, rowid",
        (user_id,),
    ).fetchall()
    return [row["event_id"] for row in rows]


def _to_account(cursor: sqlite3.Cursor, row: sqlite3.Row) -> AccountRead:
    data = row_to_dict(row, ACCOUNT_JSON_FIELDS)
    data.pop("password", None)
    data["saved_events"] = _saved_event_ids(cursor, data["id"])
    return AccountRead(**data)


class UserService:
    """Service for working with accounts."""

    @classmethod
    async def create_user(
        cls,
        username: str,
        password_hash: Optional[str],
        profile: Optional[Dict[str, Any]] = None,
        social_provider: str = "internal",
        social_id: Optional[str] = None,
    ) -> AccountRead:
        """Create an account and assign its ``CP-U-`` code.

        ``password_hash`` is ``None`` for accounts that only sign in
        through an identity provider.  Empty profile values fall back to
        the defaults (Sydney, NSW, Australia); the display name falls
        back to the username.
        """
        user_id = str(uuid.uuid4())
        profile = {k: v for k, v in (profile or {}).items() if v not in (None, "")}
        values: Dict[str, Any] = {**PROFILE_DEFAULTS, **profile}
        values.update(
            id=user_id,
            username=username,
            password=password_hash,
            name=profile.get("name") or username,
            social_provider=social_provider,
            social_id=social_id,
            role=Role.USER,
        )

        def insert(cursor: sqlite3.Cursor, code: str) -> None:
            insert_row(cursor, "users", {**values, "cpid": code})

        try:
            await IdentifierRegistry.create_registered(EntityKind.USER, user_id, insert)
        except sqlite3.IntegrityError as exc:
            # Lost a race against a concurrent registration.
            if "users.username" in str(exc):
                raise UsernameTakenError() from exc
            raise ConflictError("Account already exists") from exc
        logger.info("Registered user %s (%s, provider %s)", username, user_id, social_provider)
        return await cls.get_user_by_id(user_id)

    @classmethod
    async def get_user_by_id(cls, user_id: str) -> AccountRead:
        with get_cursor() as cursor:
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                raise NotFoundError("User", user_id)
            return _to_account(cursor, row)

    @classmethod
    async def get_user_by_username(cls, username: str) -> Optional[AccountRead]:
        with get_cursor() as cursor:
            row = cursor.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
            return _to_account(cursor, row) if row else None

    @classmethod
    async def get_user_by_email(cls, email: str) -> Optional[AccountRead]:
        """Oldest account registered with ``email`` (case-insensitive)."""
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT * FROM users WHERE email <> '' AND LOWER(email) = LOWER(?) "
                "ORDER BY created_at, rowid LIMIT 1",
                (email.strip(),),
            ).fetchone()
            return _to_account(cursor, row) if row else None

    @classmethod
    async def get_user_by_social(cls, provider: str, social_id: str) -> Optional[AccountRead]:
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT * FROM users WHERE social_provider = ? AND social_id = ?",
                (provider, social_id),
            ).fetchone()
            return _to_account(cursor, row) if row else None

    @classmethod
    async def get_credentials(cls, username: str) -> Tuple[Optional[AccountRead], Optional[str]]:
        """Return the account and its stored password hash for a login check."""
        with get_cursor() as cursor:
            row = cursor.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
            if not row:
                return None, None
            return _to_account(cursor, row), row["password"]

    @classmethod
    async def update_profile(cls, user_id: str, updates: Dict[str, Any]) -> AccountRead:
        """Update profile fields.  Keys with a ``None`` value are left unchanged."""
        updates = {k: v for k, v in updates.items() if v is not None}
        with get_cursor() as cursor:
            if updates:
                updates["updated_at"] = _now_sql(cursor)
            if not update_row(cursor, "users", user_id, updates):
                raise NotFoundError("User", user_id)
        return await cls.get_user_by_id(user_id)

    @classmethod
    async def fill_empty_profile(cls, user_id: str, values: Dict[str, Optional[str]]) -> AccountRead:
        """Set each of ``values`` only where the account's column is empty.

        Used for data an identity provider supplies on every sign-in,
        which must not overwrite what the member entered themselves.
        """
        with get_cursor() as cursor:
            for column, value in values.items():
                if value:
                    cursor.execute(
                        f"UPDATE users SET {column} = ? WHERE id = ? AND COALESCE({column}, '') = ''",
                        (value, user_id),
                    )
        return await cls.get_user_by_id(user_id)

    @classmethod
    async def toggle_saved_event(cls, user_id: str, event_id: str) -> AccountRead:
        """Add ``event_id`` to the saved list, or remove it if already saved.

        Unsaving is a single ``DELETE``; when it removes nothing the
        event is saved with a single ``INSERT``.  Both run in one write
        transaction, so concurrent toggles on different events never
        overwrite each other.
        """
        with get_cursor() as cursor:
            event = cursor.execute("SELECT id FROM events WHERE id = ?", (event_id,)).fetchone()
            if not event:
                raise NotFoundError("Event", event_id)
            cursor.execute(
                "DELETE FROM saved_events WHERE user_id = ? AND event_id = ?", (user_id, event_id)
            )
            if cursor.rowcount == 0:
                try:
                    cursor.execute(
                        "INSERT OR IGNORE INTO saved_events (user_id, event_id) VALUES (?, ?)",
                        (user_id, event_id),
                    )
                except sqlite3.IntegrityError as exc:
                    # The event was deleted after the existence check.
                    raise NotFoundError("Event", event_id) from exc
        return await cls.get_user_by_id(user_id)

    @classmethod
    async def set_role(cls, user_id: str, role: Role) -> AccountRead:
        with get_cursor() as cursor:
            if not update_row(cursor, "users", user_id, {"role": role}):
                raise NotFoundError("User", user_id)
        logger.info("User %s is now %s", user_id, role.value)
        return await cls.get_user_by_id(user_id)

    @classmethod
    async def list_users(cls) -> List[AccountRead]:
        with get_cursor() as cursor:
            rows = cursor.execute("SELECT * FROM users ORDER BY created_at DESC, rowid DESC").fetchall()
            return [_to_account(cursor, row) for row in rows]

    @classmethod
    async def count(cls) -> int:
        with get_cursor() as cursor:
            return cursor.execute("SELECT COUNT(*) FROM users").fetchone()[0]


def _now_sql(cursor: sqlite3.Cursor) -> str:
    return cursor.execute("SELECT strftime('%Y-%m-%dT%H:%M:%f', 'now')").fetchone()[0]
