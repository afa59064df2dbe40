"""
Orders, memberships and the counters they drive.

``events.tickets_sold`` and ``organisations.member_count`` are
denormalised totals.  They are only ever changed here, by a single
``UPDATE ... SET counter = counter + n`` issued in the same transaction
as the order or membership insert, so concurrent requests cannot lose
an increment and a failed insert never leaves a counter bumped.
Counters are never decremented.
"""

import logging
import sqlite3
import uuid
from typing import List

from ..core.config import settings
from ..core.db import get_cursor, insert_row, row_to_dict
from ..core.errors import AlreadyMemberError, NotFoundError, SoldOutError
from ..schemas.commerce import MembershipRead, OrderRead

logger = logging.getLogger(__name__)

OVERSELL_REJECT = "reject"
OVERSELL_ALLOW = "allow"


class CounterService:
    """Records orders and memberships and keeps their counters in step."""

    @classmethod
    async def record_order(
        cls,
        user_id: str,
        event_id: str,
        quantity: int,
        amount: float,
        currency: str = "AUD",
        customer_name: str = "",
        customer_email: str = "",
    ) -> OrderRead:
        """Record a confirmed order and add ``quantity`` to ``tickets_sold``.

        With the ``reject`` oversell policy the increment only applies
        while ``tickets_sold + quantity <= tickets_available``; otherwise
        nothing is written and ``SoldOutError`` is raised.
        """
        order_id = str(uuid.uuid4())
        with get_cursor() as cursor:
            if settings.oversell_policy == OVERSELL_ALLOW:
                cursor.execute(
                    "UPDATE events SET tickets_sold = tickets_sold + ? WHERE id = ?",
                    (quantity, event_id),
                )
            else:
                cursor.execute(
                    """
                    UPDATE events SET tickets_sold = tickets_sold + ?
                    WHERE id = ? AND tickets_sold + ? <= tickets_available
                    """,
                    (quantity, event_id, quantity),
                )
            if cursor.rowcount == 0:
                event = cursor.execute(
                    "SELECT tickets_available, tickets_sold FROM events WHERE id = ?", (event_id,)
                ).fetchone()
                if not event:
                    raise NotFoundError("Event", event_id)
                remaining = event["tickets_available"] - event["tickets_sold"]
                logger.warning(
                    "Order of %s for event %s rejected: %s tickets left", quantity, event_id, remaining
                )
                raise SoldOutError(f"Only {max(remaining, 0)} tickets left")
            insert_row(
                cursor,
                "orders",
                {
                    "id": order_id,
                    "user_id": user_id,
                    "event_id": event_id,
                    "quantity": quantity,
                    "amount": amount,
                    "currency": currency,
                    "status": "confirmed",
                    "customer_name": customer_name,
                    "customer_email": customer_email,
                },
            )
            row = cursor.execute("SELECT * FROM orders WHERE id = ?", (order_id,)).fetchone()
        logger.info("Order %s: %s tickets for event %s by user %s", order_id, quantity, event_id, user_id)
        return OrderRead(**row_to_dict(row))

    @classmethod
    async def record_membership(cls, user_id: str, org_id: str) -> MembershipRead:
        """Join ``user_id`` to an organisation and add one to ``member_count``.

        Joining twice raises ``AlreadyMemberError``.  The UNIQUE
        constraint on ``(user_id, org_id)`` catches a duplicate that
        slips past the pre-check under concurrency.
        """
        membership_id = str(uuid.uuid4())
        with get_cursor() as cursor:
            org = cursor.execute("SELECT id FROM organisations WHERE id = ?", (org_id,)).fetchone()
            if not org:
                raise NotFoundError("Organisation", org_id)
            existing = cursor.execute(
                "SELECT id FROM memberships WHERE user_id = ? AND org_id = ?", (user_id, org_id)
            ).fetchone()
            if existing:
                raise AlreadyMemberError()
            try:
                insert_row(
                    cursor,
                    "memberships",
                    {"id": membership_id, "user_id": user_id, "org_id": org_id, "role": "member"},
                )
            except sqlite3.IntegrityError as exc:
                raise AlreadyMemberError() from exc
            cursor.execute(
                "UPDATE organisations SET member_count = member_count + 1 WHERE id = ?", (org_id,)
            )
            row = cursor.execute("SELECT * FROM memberships WHERE id = ?", (membership_id,)).fetchone()
        logger.info("User %s joined organisation %s", user_id, org_id)
        return MembershipRead(**row_to_dict(row))

    @classmethod
    async def list_orders_for_user(cls, user_id: str) -> List[OrderRead]:
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT * FROM orders WHERE user_id = ? ORDER BY created_at DESC, rowid DESC", (user_id,)
            ).fetchall()
        return [OrderRead(**row_to_dict(row)) for row in rows]

    @classmethod
    async def list_all_orders(cls) -> List[OrderRead]:
        with get_cursor() as cursor:
            rows = cursor.execute("SELECT * FROM orders ORDER BY created_at DESC, rowid DESC").fetchall()
        return [OrderRead(**row_to_dict(row)) for row in rows]

    @classmethod
    async def count_orders(cls) -> int:
        with get_cursor() as cursor:
            return cursor.execute("SELECT COUNT(*) FROM orders").fetchone()[0]

    @classmethod
    async def list_memberships_for_user(cls, user_id: str) -> List[MembershipRead]:
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT * FROM memberships WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
        return [MembershipRead(**row_to_dict(row)) for row in rows]

    @classmethod
    async def list_org_members(cls, org_id: str) -> List[MembershipRead]:
        """Memberships of one organisation, oldest first."""
        with get_cursor() as cursor:
            org = cursor.execute("SELECT id FROM organisations WHERE id = ?", (org_id,)).fetchone()
            if not org:
                raise NotFoundError("Organisation", org_id)
            rows = cursor.execute(
                "SELECT * FROM memberships WHERE org_id = ? ORDER BY created_at, rowid", (org_id,)
            ).fetchall()
        return [MembershipRead(**row_to_dict(row)) for row in rows]

    @classmethod
    async def count_memberships(cls) -> int:
        with get_cursor() as cursor:
            return cursor.execute("SELECT COUNT(*) FROM memberships").fetchone()[0]
