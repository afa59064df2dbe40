"""
Identity provider verification for federated sign‑in.

The API never trusts profile data sent by the client.  The client sends
the provider's ID token; a verifier checks it with the provider and
returns the provider's stable subject id plus whatever profile data
the token carries.  ``GoogleTokenVerifier`` calls Google's tokeninfo
endpoint over ``requests``.  Routes obtain the verifier through the
``get_token_verifier`` dependency so tests can swap in a stub.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from ..core.config import settings
from ..core.errors import FederatedTokenError

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


@dataclass
class FederatedIdentity:
    provider: str
    subject: str
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None


class TokenVerifier(Protocol):
    def verify(self, token: str) -> FederatedIdentity: ...


class GoogleTokenVerifier:
    """Verify Google ID tokens via the tokeninfo endpoint."""

    provider = "google"

    def __init__(
        self,
        client_id: str = "",
        tokeninfo_url: str = "",
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ) -> None:
        self.client_id = client_id
        self.tokeninfo_url = tokeninfo_url or settings.google_tokeninfo_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def verify(self, token: str) -> FederatedIdentity:
        try:
            response = self.session.get(
                self.tokeninfo_url, params={"id_token": token}, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("Google token verification request failed: %s", exc)
            raise FederatedTokenError("Identity provider unavailable") from exc
        if response.status_code != 200:
            logger.warning("Google rejected an ID token (HTTP %s)", response.status_code)
            raise FederatedTokenError()
        claims = response.json()
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise FederatedTokenError("Token was not issued by Google")
        if self.client_id and claims.get("aud") != self.client_id:
            raise FederatedTokenError("Token was issued for another application")
        subject = claims.get("sub")
        if not subject:
            raise FederatedTokenError("Token has no subject")
        return FederatedIdentity(
            provider=self.provider,
            subject=subject,
            name=claims.get("name"),
            email=claims.get("email"),
            picture=claims.get("picture"),
        )


def get_token_verifier() -> TokenVerifier:
    """FastAPI dependency returning the configured verifier."""
    return GoogleTokenVerifier(client_id=settings.google_client_id)
