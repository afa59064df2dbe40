"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a transactional cursor (``get_cursor``) and
applying migrations on application start (``init_db``).  SQLite is
used as the relational store; every service call opens its own
connection, so the database is the only state shared between
requests.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional

from .config import settings

logger = logging.getLogger(__name__)

# Seconds a writer waits for a competing transaction to release the
# database lock before failing with "database is locked".
BUSY_TIMEOUT = 30.0

# Timestamps are stored as ISO strings with millisecond precision so
# "most recent first" listings order rows created within one second.
NOW_SQL = "(strftime('%Y-%m-%dT%H:%M:%f', 'now'))"


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path (or the special
    ``:memory:`` name), use it directly.  Otherwise resolve it relative
    to the ``culturepass_api`` package directory.
    """
    db_url = settings.database_url
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # culturepass_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is switched on for the lifetime of
    the connection; SQLite leaves it off by default.
    """
    conn = sqlite3.connect(get_database_path(), timeout=BUSY_TIMEOUT)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside a transaction.

    The transaction is committed when the block exits normally and
    rolled back when it raises; the connection is closed either way.
    """
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def row_to_dict(
    row: Optional[sqlite3.Row],
    json_fields: Iterable[str] = (),
    bool_fields: Iterable[str] = (),
) -> Optional[Dict[str, Any]]:
    """Convert a row to a plain dict, decoding JSON text and 0/1 flags."""
    if row is None:
        return None
    data = dict(row)
    for field in json_fields:
        if field in data and isinstance(data[field], str):
            try:
                data[field] = json.loads(data[field])
            except json.JSONDecodeError:
                logger.warning("Column %s holds invalid JSON; returning raw text", field)
    for field in bool_fields:
        if field in data and data[field] is not None:
            data[field] = bool(data[field])
    return data


def to_db_value(value: Any) -> Any:
    """Adapt a Python value for a SQLite column."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return value


def insert_row(cursor: sqlite3.Cursor, table: str, values: Dict[str, Any]) -> None:
    """Insert ``values`` into ``table``.

    Column names come from schema field names, never from request
    keys, so interpolating them into the statement is safe.
    """
    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    cursor.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(to_db_value(v) for v in values.values()),
    )


def update_row(
    cursor: sqlite3.Cursor,
    table: str,
    row_id: str,
    values: Dict[str, Any],
    condition: str = "",
    condition_params: tuple = (),
) -> int:
    """Set ``values`` on the row with ``row_id``; returns the affected row count.

    ``condition`` is an extra SQL predicate ANDed to the ``id`` match, so
    a guarded update happens in the same statement as its check.
    """
    where = "id = ?"
    if condition:
        where += f" AND ({condition})"
    if not values:
        return cursor.execute(
            f"SELECT COUNT(*) FROM {table} WHERE {where}", (row_id, *condition_params)
        ).fetchone()[0]
    assignments = ", ".join(f"{column} = ?" for column in values)
    params = [to_db_value(v) for v in values.values()]
    params.append(row_id)
    params.extend(condition_params)
    cursor.execute(f"UPDATE {table} SET {assignments} WHERE {where}", tuple(params))
    return cursor.rowcount


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        f"""
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            password TEXT,
            name TEXT NOT NULL DEFAULT 'Guest User',
            email TEXT DEFAULT '',
            city TEXT DEFAULT 'Sydney',
            state TEXT DEFAULT 'NSW',
            country TEXT DEFAULT 'Australia',
            phone TEXT DEFAULT '',
            website TEXT DEFAULT '',
            social_links TEXT NOT NULL DEFAULT '{{}}',
            saved_events TEXT NOT NULL DEFAULT '[]',
            role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
            cpid TEXT UNIQUE,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            updated_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
        );

        CREATE TABLE IF NOT EXISTS sessions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            created_at INTEGER NOT NULL,
            expires_at INTEGER NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS cpids (
            cpid TEXT PRIMARY KEY,
            entity_type TEXT NOT NULL,
            entity_id TEXT NOT NULL,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            UNIQUE(entity_type, entity_id)
        );

        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            category TEXT NOT NULL,
            date TEXT NOT NULL,
            time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            venue TEXT NOT NULL,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            country TEXT DEFAULT 'Australia',
            image_url TEXT DEFAULT '',
            price REAL NOT NULL DEFAULT 0,
            currency TEXT DEFAULT 'AUD',
            org_id TEXT,
            org_name TEXT DEFAULT '',
            artist_id TEXT,
            featured INTEGER NOT NULL DEFAULT 0,
            trending INTEGER NOT NULL DEFAULT 0,
            published INTEGER NOT NULL DEFAULT 1,
            tickets_available INTEGER NOT NULL DEFAULT 100,
            tickets_sold INTEGER NOT NULL DEFAULT 0,
            lat REAL,
            lng REAL,
            cpid TEXT UNIQUE,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
        );

        CREATE TABLE IF NOT EXISTS organisations (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            member_count INTEGER NOT NULL DEFAULT 0,
            image_url TEXT DEFAULT '',
            established TEXT DEFAULT '',
            categories TEXT NOT NULL DEFAULT '[]',
            slug TEXT,
            website TEXT DEFAULT '',
            social_links TEXT NOT NULL DEFAULT '{{}}',
            status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('pending', 'active', 'rejected')),
            owner_id TEXT,
            cpid TEXT UNIQUE,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
        );

        CREATE TABLE IF NOT EXISTS businesses (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL,
            category TEXT NOT NULL,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            country TEXT DEFAULT 'Australia',
            phone TEXT DEFAULT '',
            website TEXT DEFAULT '',
            image_url TEXT DEFAULT '',
            rating REAL NOT NULL DEFAULT 0,
            is_sponsor INTEGER NOT NULL DEFAULT 0,
            lat REAL,
            lng REAL,
            service_locations TEXT NOT NULL DEFAULT '[]',
            social_links TEXT NOT NULL DEFAULT '{{}}',
            status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('pending', 'active', 'rejected')),
            owner_id TEXT,
            cpid TEXT UNIQUE,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
        );

        CREATE TABLE IF NOT EXISTS artists (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            genre TEXT NOT NULL,
            bio TEXT NOT NULL,
            image_url TEXT DEFAULT '',
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            featured INTEGER NOT NULL DEFAULT 0,
            performances INTEGER NOT NULL DEFAULT 0,
            slug TEXT,
            website TEXT DEFAULT '',
            social_links TEXT NOT NULL DEFAULT '{{}}',
            status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('pending', 'active', 'rejected')),
            owner_id TEXT,
            cpid TEXT UNIQUE,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
        );

        CREATE TABLE IF NOT EXISTS perks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            business_id TEXT,
            business_name TEXT NOT NULL,
            discount TEXT NOT NULL,
            code TEXT NOT NULL,
            valid_until TEXT NOT NULL,
            category TEXT DEFAULT '',
            image_url TEXT DEFAULT '',
            status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('pending', 'active', 'rejected')),
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            FOREIGN KEY(business_id) REFERENCES businesses(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            event_id TEXT NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity > 0),
            amount REAL NOT NULL,
            currency TEXT DEFAULT 'AUD',
            status TEXT NOT NULL DEFAULT 'confirmed',
            customer_name TEXT DEFAULT '',
            customer_email TEXT DEFAULT '',
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            FOREIGN KEY(user_id) REFERENCES users(id),
            FOREIGN KEY(event_id) REFERENCES events(id)
        );

        CREATE TABLE IF NOT EXISTS memberships (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            org_id TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'member',
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            UNIQUE(user_id, org_id),
            FOREIGN KEY(user_id) REFERENCES users(id),
            FOREIGN KEY(org_id) REFERENCES organisations(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: federated sign-in
    (
        2,
        """
        -- Accounts created through an identity provider have no password;
        -- they are found again by (social_provider, social_id).
        ALTER TABLE users ADD COLUMN social_provider TEXT DEFAULT 'internal';
        ALTER TABLE users ADD COLUMN social_id TEXT;
        CREATE UNIQUE INDEX IF NOT EXISTS idx_users_social
            ON users(social_provider, social_id) WHERE social_id IS NOT NULL;
        """,
    ),
    # Migration 3: indices for the public listings and per-user lookups
    (
        3,
        """
        CREATE INDEX IF NOT EXISTS idx_events_published_date ON events(published, date);
        CREATE INDEX IF NOT EXISTS idx_organisations_status ON organisations(status, name);
        CREATE INDEX IF NOT EXISTS idx_businesses_status ON businesses(status, name);
        CREATE INDEX IF NOT EXISTS idx_artists_status ON artists(status, name);
        CREATE INDEX IF NOT EXISTS idx_orders_user_id ON orders(user_id);
        CREATE INDEX IF NOT EXISTS idx_memberships_org_id ON memberships(org_id);
        CREATE INDEX IF NOT EXISTS idx_sessions_user_id ON sessions(user_id);
        """,
    ),
    # Migration 4: saved events as rows, venues, password reset, referrals
    (
        4,
        f"""
        -- One row per (user, event) so saving and unsaving are single
        -- INSERT/DELETE statements.  users.saved_events is no longer read.
        CREATE TABLE IF NOT EXISTS saved_events (
            user_id TEXT NOT NULL,
            event_id TEXT NOT NULL,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            PRIMARY KEY(user_id, event_id),
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE,
            FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE
        );
        INSERT OR IGNORE INTO saved_events (user_id, event_id)
            SELECT users.id, saved.value FROM users, json_each(users.saved_events) AS saved
            WHERE saved.value IN (SELECT id FROM events);

        CREATE TABLE IF NOT EXISTS venues (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            address TEXT NOT NULL,
            country TEXT NOT NULL DEFAULT 'Australia',
            state TEXT NOT NULL,
            city TEXT NOT NULL,
            lat REAL NOT NULL,
            lng REAL NOT NULL,
            capacity INTEGER,
            venue_type TEXT NOT NULL DEFAULT 'hall',
            amenities TEXT NOT NULL DEFAULT '[]',
            images TEXT NOT NULL DEFAULT '[]',
            contact TEXT DEFAULT '',
            phone TEXT DEFAULT '',
            website TEXT DEFAULT '',
            description TEXT DEFAULT '',
            approved INTEGER NOT NULL DEFAULT 1,
            social_links TEXT NOT NULL DEFAULT '{{}}',
            cpid TEXT UNIQUE,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL}
        );
        ALTER TABLE events ADD COLUMN venue_id TEXT;
        CREATE INDEX IF NOT EXISTS idx_events_venue_id ON events(venue_id);

        CREATE TABLE IF NOT EXISTS password_reset_tokens (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            token TEXT NOT NULL UNIQUE,
            expires_at INTEGER NOT NULL,
            used INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        ALTER TABLE users ADD COLUMN avatar_url TEXT DEFAULT '';
        ALTER TABLE users ADD COLUMN referral_code TEXT;
        ALTER TABLE users ADD COLUMN referred_by TEXT;
        CREATE UNIQUE INDEX IF NOT EXISTS idx_users_referral_code
            ON users(referral_code) WHERE referral_code IS NOT NULL;

        CREATE TABLE IF NOT EXISTS referrals (
            id TEXT PRIMARY KEY,
            referrer_id TEXT NOT NULL,
            referred_user_id TEXT NOT NULL UNIQUE,
            referral_code TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'completed',
            created_at TIMESTAMP NOT NULL DEFAULT {NOW_SQL},
            FOREIGN KEY(referrer_id) REFERENCES users(id) ON DELETE CASCADE,
            FOREIGN KEY(referred_user_id) REFERENCES users(id) ON DELETE CASCADE
        );
        CREATE INDEX IF NOT EXISTS idx_referrals_referrer_id ON referrals(referrer_id);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any newer entries of
    ``MIGRATIONS``.  To change the schema, append a migration with the
    next version number; never edit an applied one.
    """
    with get_cursor() as cursor:
        cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying database migration %s", version)
                # executescript() commits any open transaction before running.
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                current_version = version
