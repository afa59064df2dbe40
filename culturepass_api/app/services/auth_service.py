"""
Authentication: credentials, federated sign‑in and server‑side sessions.

A client is either anonymous or authenticated.  ``register``,
``login`` and ``login_federated`` each end by opening a session and
return ``(account, session_id)``; the route puts the id into an
HTTP‑only cookie.  ``logout`` deletes the session row.  Sessions
expire a fixed number of days after creation and are never extended.
"""

import logging
import secrets
import time
from typing import Any, Dict, Optional, Tuple

from ..core.config import settings
from ..core.db import get_cursor
from ..core.errors import InvalidCredentialsError, NotFoundError, UsernameTakenError, ValidationError
from ..core.security import hash_password, verify_password
from ..schemas.user import AccountRead
from .federated import TokenVerifier
from .referral_service import ReferralService
from .user_service import UserService

logger = logging.getLogger(__name__)


class SessionService:
    """Persistence of sessions in the ``sessions`` table."""

    @classmethod
    async def create(cls, user_id: str) -> str:
        session_id = secrets.token_urlsafe(32)
        created_at = int(time.time())
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO sessions (id, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
                (session_id, user_id, created_at, created_at + settings.session_max_age_seconds),
            )
        return session_id

    @classmethod
    async def resolve(cls, session_id: str) -> Optional[AccountRead]:
        """Return the session's account, or ``None`` if unknown or expired.

        An expired session row is deleted on sight.
        """
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT user_id, expires_at FROM sessions WHERE id = ?", (session_id,)
            ).fetchone()
            if not row:
                return None
            if row["expires_at"] <= int(time.time()):
                cursor.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
                return None
        try:
            return await UserService.get_user_by_id(row["user_id"])
        except NotFoundError:
            return None

    @classmethod
    async def destroy(cls, session_id: str) -> None:
        with get_cursor() as cursor:
            cursor.execute("DELETE FROM sessions WHERE id = ?", (session_id,))

    @classmethod
    async def purge_expired(cls) -> int:
        with get_cursor() as cursor:
            cursor.execute("DELETE FROM sessions WHERE expires_at <= ?", (int(time.time()),))
            return cursor.rowcount


class AuthService:
    """Registration, login and logout."""

    @classmethod
    async def register(
        cls,
        username: str,
        password: str,
        profile: Optional[Dict[str, Any]] = None,
        referral_code: Optional[str] = None,
    ) -> Tuple[AccountRead, str]:
        """Create a password account and open a session for it.

        Raises ``UsernameTakenError`` when the username exists.  The new
        account gets its own referral code; a valid ``referral_code``
        records the member who referred it, an unknown one is ignored.
        """
        if ":" in username:
            raise ValidationError("Username may not contain ':'")
        if await UserService.get_user_by_username(username):
            raise UsernameTakenError()
        referrer = await ReferralService.find_referrer(referral_code) if referral_code else None
        account = await UserService.create_user(username, hash_password(password), profile)
        await ReferralService.ensure_code(account.id)
        if referrer is not None:
            await ReferralService.record(referrer.id, account.id, referral_code)
        account = await UserService.get_user_by_id(account.id)
        session_id = await SessionService.create(account.id)
        return account, session_id

    @classmethod
    async def login(cls, username: str, password: str) -> Tuple[AccountRead, str]:
        """Check a username/password pair and open a session.

        Unknown usernames, accounts without a password (federated only)
        and wrong passwords all raise the same ``InvalidCredentialsError``.
        """
        account, password_hash = await UserService.get_credentials(username)
        if account is None or not verify_password(password, password_hash):
            logger.warning("Failed login for username %s", username)
            raise InvalidCredentialsError()
        session_id = await SessionService.create(account.id)
        logger.info("User %s logged in", account.id)
        return account, session_id

    @classmethod
    async def login_federated(cls, provider_token: str, verifier: TokenVerifier) -> Tuple[AccountRead, str]:
        """Sign in with an identity provider token.

        The account is keyed by the provider's stable subject id and
        created on first sign‑in.  The provider's e‑mail and picture fill
        in an empty account e‑mail or avatar but never overwrite one.
        """
        identity = verifier.verify(provider_token)
        account = await UserService.get_user_by_social(identity.provider, identity.subject)
        if account is None:
            account = await UserService.create_user(
                username=f"{identity.provider}:{identity.subject}",
                password_hash=None,
                profile={
                    "name": identity.name or identity.email,
                    "email": identity.email,
                    "avatar_url": identity.picture,
                },
                social_provider=identity.provider,
                social_id=identity.subject,
            )
        elif (identity.email and not account.email) or (identity.picture and not account.avatar_url):
            account = await UserService.fill_empty_profile(
                account.id, {"email": identity.email, "avatar_url": identity.picture}
            )
        session_id = await SessionService.create(account.id)
        logger.info("User %s logged in via %s", account.id, identity.provider)
        return account, session_id

    @classmethod
    async def logout(cls, session_id: Optional[str]) -> None:
        if session_id:
            await SessionService.destroy(session_id)
