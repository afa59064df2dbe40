"""CulturePass API client.

A thin wrapper around the CulturePass HTTP API built on ``requests``.
The session cookie set by ``register``/``login`` lives in the
``requests.Session`` cookie jar, so one client instance represents one
signed‑in user.

Every method returns a tuple ``(data, error)``:

* on success ``data`` holds the decoded JSON body and ``error`` is
  ``None``;
* on failure ``data`` is ``None`` and ``error`` is an :class:`ApiError`
  whose ``kind`` comes from the ``kind`` field of the error body (or,
  for responses without one, from the HTTP status).  Callers branch on
  ``error.kind`` and never on message text.

Example::

    api = CulturePassAPI(base_url="http://localhost:8000")
    account, error = api.login("priya", "secret")
    if error and error.kind is ErrorKind.AUTHENTICATION:
        ...
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests

from culturepass_api.app.core.errors import ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


@dataclass
class ApiError:
    """A failed API call.

    Attributes:
        kind: Failure category shared with the server.
        status_code: HTTP status, or ``None`` when no response arrived.
        code: Stable machine code from the error body, e.g. ``SOLD_OUT``.
        message: Human readable message for display.
    """

    kind: ErrorKind
    status_code: Optional[int]
    code: str
    message: str


class CulturePassAPI:
    """Client for the CulturePass API."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server root, e.g. ``https://culturepass.example``.
                Paths are sent below ``<base_url>/api``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
    ) -> Tuple[Optional[Any], Optional[ApiError]]:
        url = f"{self.base_url}/api{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, ApiError(ErrorKind.INTERNAL, None, "NETWORK_ERROR", str(exc))
        if response.status_code >= 400:
            error = self._decode_error(response)
            logger.error("API request failed (%s %s): %s", error.status_code, error.code, error.message)
            return None, error
        if response.content:
            return response.json(), None
        return None, None

    @staticmethod
    def _decode_error(response: Any) -> ApiError:
        """Build an :class:`ApiError` from an error response."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}
        try:
            kind = ErrorKind(body.get("kind"))
        except ValueError:
            kind = ErrorKind.from_status(response.status_code)
        return ApiError(
            kind=kind,
            status_code=response.status_code,
            code=body.get("code") or f"HTTP_{response.status_code}",
            message=body.get("error") or response.text or f"HTTP {response.status_code}",
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def register(self, username: str, password: str, **profile: Any) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Create an account; the client is signed in afterwards.

        Extra keyword arguments (``name``, ``email``, ``city`` ...) are
        sent as profile fields.
        """
        payload = {"username": username, "password": password, **profile}
        return self._request("POST", "/auth/register", json_body=payload)

    def login(self, username: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/auth/login", json_body={"username": username, "password": password})

    def logout(self) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/auth/logout")

    def me(self) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", "/auth/me")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def list_events(
        self,
        *,
        category: Optional[str] = None,
        city: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        """Retrieve published events, optionally filtered.

        Returns an empty list together with the error on failure.
        """
        params = {"category": category, "city": city, "featured": featured, "search": search}
        params = {k: v for k, v in params.items() if v is not None}
        data, error = self._request("GET", "/events", params=params)
        if error:
            return [], error
        return data or [], None

    def get_event(self, event_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", f"/events/{event_id}")

    # ------------------------------------------------------------------
    # Orders, memberships and saved events
    # ------------------------------------------------------------------
    def create_order(
        self,
        event_id: str,
        quantity: int = 1,
        amount: float = 0,
        **extra: Any,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Buy ``quantity`` tickets.  A sold out event yields ``ErrorKind.CONFLICT``."""
        payload = {"eventId": event_id, "quantity": quantity, "amount": amount, **extra}
        return self._request("POST", "/orders", json_body=payload)

    def join_organisation(self, org_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/memberships", json_body={"orgId": org_id})

    def toggle_saved_event(self, event_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", "/users/save-event", json_body={"eventId": event_id})

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def lookup_cpid(self, cpid: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", f"/cpid/{cpid}")
