"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts with a local SQLite file and development-friendly cookie
settings.  In a production deployment override these via environment
variables (at minimum ``DATABASE_URL`` and ``SESSION_COOKIE_SECURE``).
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "CulturePass API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database.  Relative paths are resolved against
    # the ``culturepass_api`` package directory by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "culturepass.db")

    # Server-side sessions.  The cookie only carries the opaque session
    # id; expiry is absolute from creation and is never extended.
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "culturepass.sid")
    session_max_age_days: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))
    session_cookie_secure: bool = _env_flag("SESSION_COOKIE_SECURE")

    # What to do when an order would push tickets_sold past
    # tickets_available: "reject" refuses the order, "allow" oversells.
    oversell_policy: str = os.getenv("OVERSELL_POLICY", "reject")

    # Number of fresh CPIDs tried before an entity creation gives up on
    # a code collision.
    cpid_max_attempts: int = int(os.getenv("CPID_MAX_ATTEMPTS", "5"))

    # Google sign-in.  When ``google_client_id`` is empty the token
    # audience is not checked.
    google_client_id: str = os.getenv("GOOGLE_CLIENT_ID", "")
    google_tokeninfo_url: str = os.getenv(
        "GOOGLE_TOKENINFO_URL", "https://oauth2.googleapis.com/tokeninfo"
    )

    # Password reset links are single use and expire this many minutes
    # after they are requested.  ``public_base_url`` is the origin the
    # link in the e-mail points at.
    password_reset_ttl_minutes: int = int(os.getenv("PASSWORD_RESET_TTL_MINUTES", "15"))
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    @property
    def password_reset_ttl_seconds(self) -> int:
        return self.password_reset_ttl_minutes * 60

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must therefore be set before importing this module.
settings = Settings()
