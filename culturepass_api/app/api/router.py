"""
Top‑level router of the CulturePass API.

Aggregates the domain routers under one ``router`` which ``main.py``
mounts at ``/api``.  Routers whose paths span several top‑level
segments (``/submit/...`` and ``/my-submissions``, ``/orders`` and
``/memberships``) are included without a prefix.
"""

from fastapi import APIRouter

from .endpoints import (
    admin,
    artists,
    auth,
    businesses,
    commerce,
    events,
    health,
    maps,
    organisations,
    perks,
    referrals,
    registry,
    submissions,
    users,
    venues,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(organisations.router, prefix="/organisations", tags=["organisations"])
router.include_router(businesses.router, prefix="/businesses", tags=["businesses"])
router.include_router(artists.router, prefix="/artists", tags=["artists"])
router.include_router(venues.router, prefix="/venues", tags=["venues"])
router.include_router(maps.router, prefix="/map", tags=["map"])
router.include_router(submissions.router, tags=["submissions"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(perks.router, prefix="/perks", tags=["perks"])
router.include_router(commerce.router, tags=["commerce"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(referrals.router, prefix="/referrals", tags=["referrals"])
router.include_router(registry.router, prefix="/cpid", tags=["cpid"])
router.include_router(health.router, tags=["health"])
