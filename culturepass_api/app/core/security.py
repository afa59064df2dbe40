"""
Security helpers: password hashing, the session cookie and request gating.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a per‑password random
salt.  Authentication state lives server‑side in the ``sessions``
table; the browser only holds an opaque, HTTP‑only cookie carrying the
session id.  Route handlers never read module‑level auth state: they
declare one of the dependencies below and receive an explicit
:class:`SessionContext` or account object for the current request.

* ``get_session``: resolves the cookie into a ``SessionContext``
  (anonymous when the cookie is missing, unknown or expired).
* ``require_session``: the authenticated account, or 401.
* ``require_admin``: the authenticated admin account, or 401/403.
"""

import hashlib
import hmac
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Response
from fastapi.security import APIKeyCookie

from .config import settings
from .errors import ForbiddenError, UnauthenticatedError
from ..schemas.user import AccountRead, Role

PASSWORD_ITERATIONS = 100_000


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The result
    holds the salt and the derived key in hex, separated by ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PASSWORD_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a plain password against a stored ``salt$hash`` string.

    Accounts created through federated sign‑in have no stored hash and
    never match.  Malformed hashes are treated as a mismatch.
    """
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PASSWORD_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)


# ---------------------------------------------------------------------------
# Session cookie
# ---------------------------------------------------------------------------

session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@dataclass
class SessionContext:
    """Authentication state of a single request."""

    session_id: Optional[str] = None
    account: Optional[AccountRead] = None

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None


async def get_session(session_id: Optional[str] = Depends(session_cookie)) -> SessionContext:
    """Resolve the session cookie into a :class:`SessionContext`."""
    if not session_id:
        return SessionContext()
    from culturepass_api.app.services.auth_service import SessionService

    account = await SessionService.resolve(session_id)
    if account is None:
        return SessionContext()
    return SessionContext(session_id=session_id, account=account)


async def require_session(context: SessionContext = Depends(get_session)) -> AccountRead:
    """Gate for every mutating or personal route: 401 when anonymous."""
    if context.account is None:
        raise UnauthenticatedError()
    return context.account


async def require_admin(account: AccountRead = Depends(require_session)) -> AccountRead:
    """Gate for moderation and catalogue management: 401, then 403 for non‑admins."""
    if account.role != Role.ADMIN:
        raise ForbiddenError()
    return account
