"""
Application package initializer.

The API is organised per domain: accounts and sessions, events, the
moderated directory (organisations, businesses, artists), perks,
orders and memberships, and the CPID registry.  Each domain has a
pydantic schema module, a service class holding the SQL, and an
``APIRouter`` in ``api/endpoints``.
"""

from .main import app  # noqa: F401
