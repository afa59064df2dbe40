"""
Business logic for member referrals.

Every password account gets a referral code ``CP-<6 symbols>`` when it
registers; older or federated accounts get one on request.  A new
member who registers with someone's code is linked to that referrer
through ``users.referred_by`` and a row in ``referrals``.  A member can
be referred at most once.
"""

import logging
import secrets
import sqlite3
import uuid
from typing import Optional

from ..core.config import settings
from ..core.db import get_cursor
from ..core.errors import ConflictError, NotFoundError
from ..schemas.referral import ReferralSummary, ReferralValidation, ReferredMember
from ..schemas.user import AccountRead
from .registry_service import ALPHABET, CODE_LENGTH
from .user_service import UserService

logger = logging.getLogger(__name__)

REFERRAL_PREFIX = "CP-"


class ReferralService:
    """Referral codes and the referrals they produce."""

    @classmethod
    def generate_code(cls) -> str:
        return REFERRAL_PREFIX + "".join(secrets.choice(ALPHABET) for _ in range(CODE_LENGTH))

    @classmethod
    async def ensure_code(cls, user_id: str) -> str:
        """Return the member's referral code, assigning one if it has none.

        The code is only written while ``referral_code IS NULL``, so two
        concurrent requests cannot hand out different codes.  A clash
        with another member's code is retried with a fresh one.
        """
        for attempt in range(1, max(1, settings.cpid_max_attempts) + 1):
            code = cls.generate_code()
            try:
                with get_cursor() as cursor:
                    cursor.execute(
                        "UPDATE users SET referral_code = ? WHERE id = ? AND referral_code IS NULL",
                        (code, user_id),
                    )
                    row = cursor.execute(
                        "SELECT referral_code FROM users WHERE id = ?", (user_id,)
                    ).fetchone()
            except sqlite3.IntegrityError:
                logger.warning("Referral code collision for user %s (attempt %s)", user_id, attempt)
                continue
            if not row:
                raise NotFoundError("User", user_id)
            return row["referral_code"]
        raise ConflictError("Could not assign a unique referral code")

    @classmethod
    async def find_referrer(cls, code: str) -> Optional[AccountRead]:
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT id FROM users WHERE referral_code = ?", (code.strip().upper(),)
            ).fetchone()
        if not row:
            logger.info("Unknown referral code %s", code)
            return None
        return await UserService.get_user_by_id(row["id"])

    @classmethod
    async def record(cls, referrer_id: str, referred_user_id: str, code: str) -> None:
        """Link a new member to its referrer."""
        with get_cursor() as cursor:
            cursor.execute(
                "UPDATE users SET referred_by = ? WHERE id = ? AND referred_by IS NULL",
                (referrer_id, referred_user_id),
            )
            cursor.execute(
                "INSERT OR IGNORE INTO referrals (id, referrer_id, referred_user_id, referral_code, status) "
                "VALUES (?, ?, ?, ?, 'completed')",
                (str(uuid.uuid4()), referrer_id, referred_user_id, code.strip().upper()),
            )
            recorded = cursor.rowcount == 1
        if recorded:
            logger.info("User %s was referred by %s", referred_user_id, referrer_id)
        else:
            logger.warning("User %s already has a referrer; %s ignored", referred_user_id, referrer_id)

    @classmethod
    async def validate(cls, code: str) -> ReferralValidation:
        referrer = await cls.find_referrer(code)
        if referrer is None:
            return ReferralValidation(valid=False)
        return ReferralValidation(valid=True, referrer_name=referrer.name)

    @classmethod
    async def summary(cls, referrer_id: str) -> ReferralSummary:
        """Members referred by ``referrer_id``, most recent first."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                """
                SELECT r.id, r.status, r.created_at,
                       COALESCE(u.name, 'User') AS referred_name,
                       COALESCE(u.username, '') AS referred_username
                FROM referrals r LEFT JOIN users u ON u.id = r.referred_user_id
                WHERE r.referrer_id = ?
                ORDER BY r.created_at DESC, r.rowid DESC
                """,
                (referrer_id,),
            ).fetchall()
        referrals = [ReferredMember(**dict(row)) for row in rows]
        return ReferralSummary(count=len(referrals), referrals=referrals)
