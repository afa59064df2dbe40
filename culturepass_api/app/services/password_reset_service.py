"""
Password reset by e-mailed link.

``request_reset`` stores a random single-use token that expires
``settings.password_reset_ttl_minutes`` after it was issued and hands
the reset link to a ``ResetNotifier``.  The response never reveals
whether the address belongs to an account.  ``reset_password`` marks
the token used and sets the new password in one transaction, then ends
every open session of the account.
"""

import logging
import secrets
import time
import uuid
from typing import Optional, Protocol

from ..core.config import settings
from ..core.db import get_cursor
from ..core.errors import InvalidResetTokenError
from ..core.security import hash_password
from .user_service import UserService

logger = logging.getLogger(__name__)


class ResetNotifier(Protocol):
    def send(self, email: str, reset_url: str) -> None: ...


class LogResetNotifier:
    """Writes reset links to the application log instead of mailing them."""

    def send(self, email: str, reset_url: str) -> None:
        logger.info("Password reset link for %s: %s", email, reset_url)


def get_reset_notifier() -> ResetNotifier:
    """FastAPI dependency returning the configured notifier."""
    return LogResetNotifier()


class PasswordResetService:
    """Issues and redeems password reset tokens."""

    @classmethod
    async def request_reset(cls, email: str, notifier: ResetNotifier) -> Optional[str]:
        """Issue a token for the account registered with ``email``.

        Returns the token, or ``None`` when no account has that e-mail.
        """
        account = await UserService.get_user_by_email(email)
        if account is None:
            logger.info("Password reset requested for unknown e-mail")
            return None
        token = secrets.token_hex(32)
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO password_reset_tokens (id, user_id, token, expires_at) VALUES (?, ?, ?, ?)",
                (str(uuid.uuid4()), account.id, token, int(time.time()) + settings.password_reset_ttl_seconds),
            )
        notifier.send(account.email, f"{settings.public_base_url}/reset-password?token={token}")
        logger.info("Password reset token issued for user %s", account.id)
        return token

    @classmethod
    async def reset_password(cls, token: str, password: str) -> None:
        """Redeem ``token`` and set ``password`` on its account.

        The token is claimed by a conditional update (unused and not
        expired), so it works at most once even under concurrent use.
        Raises ``InvalidResetTokenError`` for unknown, used or expired
        tokens.
        """
        with get_cursor() as cursor:
            cursor.execute(
                "UPDATE password_reset_tokens SET used = 1 WHERE token = ? AND used = 0 AND expires_at > ?",
                (token, int(time.time())),
            )
            if cursor.rowcount == 0:
                raise InvalidResetTokenError()
            user_id = cursor.execute(
                "SELECT user_id FROM password_reset_tokens WHERE token = ?", (token,)
            ).fetchone()["user_id"]
            cursor.execute("UPDATE users SET password = ? WHERE id = ?", (hash_password(password), user_id))
            cursor.execute("DELETE FROM sessions WHERE user_id = ?", (user_id,))
        logger.info("Password reset completed for user %s", user_id)
