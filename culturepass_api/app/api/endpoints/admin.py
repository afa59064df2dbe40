"""
Admin endpoints: moderation queue, approval, role management and
dashboard counts, plus the full order and entry lists.  Every route
requires an admin session.
"""

from typing import List

from fastapi import APIRouter, Depends

from culturepass_api.app.core.security import require_admin
from culturepass_api.app.schemas.admin import AdminStats
from culturepass_api.app.schemas.commerce import OrderRead
from culturepass_api.app.schemas.directory import EntityStatus, SubmissionsRead
from culturepass_api.app.schemas.user import AccountRead, Role
from culturepass_api.app.services.counter_service import CounterService
from culturepass_api.app.services.directory_service import (
    ArtistService,
    BusinessService,
    OrganisationService,
    get_directory_service,
)
from culturepass_api.app.services.event_service import EventService
from culturepass_api.app.services.user_service import UserService

router = APIRouter()


@router.get("/pending", response_model=SubmissionsRead)
async def list_pending(admin: AccountRead = Depends(require_admin)) -> SubmissionsRead:
    return SubmissionsRead(
        organisations=await OrganisationService.list_pending(),
        businesses=await BusinessService.list_pending(),
        artists=await ArtistService.list_pending(),
    )


# The response is the entry in the shape of its own kind, so no single
# response_model applies.
@router.post("/approve/{entity_type}/{entity_id}", response_model=None)
async def approve(entity_type: str, entity_id: str, admin: AccountRead = Depends(require_admin)):
    """Make an entry public.  ``entity_type`` is organisation, business or artist."""
    service = get_directory_service(entity_type)
    return await service.set_status(entity_id, EntityStatus.ACTIVE)


@router.post("/reject/{entity_type}/{entity_id}", response_model=None)
async def reject(entity_type: str, entity_id: str, admin: AccountRead = Depends(require_admin)):
    service = get_directory_service(entity_type)
    return await service.set_status(entity_id, EntityStatus.REJECTED)


@router.post("/make-admin/{user_id}", response_model=AccountRead)
async def make_admin(user_id: str, admin: AccountRead = Depends(require_admin)) -> AccountRead:
    return await UserService.set_role(user_id, Role.ADMIN)


@router.get("/stats", response_model=AdminStats)
async def stats(admin: AccountRead = Depends(require_admin)) -> AdminStats:
    event_totals = await EventService.totals()
    pending = {
        "pending_organisations": await OrganisationService.count(EntityStatus.PENDING),
        "pending_businesses": await BusinessService.count(EntityStatus.PENDING),
        "pending_artists": await ArtistService.count(EntityStatus.PENDING),
    }
    return AdminStats(
        users=await UserService.count(),
        events=event_totals["events"],
        organisations=await OrganisationService.count(),
        businesses=await BusinessService.count(),
        artists=await ArtistService.count(),
        orders=await CounterService.count_orders(),
        memberships=await CounterService.count_memberships(),
        tickets_sold=event_totals["tickets_sold"],
        total_pending=sum(pending.values()),
        **pending,
    )


@router.get("/orders", response_model=List[OrderRead])
async def list_orders(admin: AccountRead = Depends(require_admin)) -> List[OrderRead]:
    """Every order, most recent first."""
    return await CounterService.list_all_orders()


@router.get("/entries/{entity_type}", response_model=None)
async def list_entries(entity_type: str, admin: AccountRead = Depends(require_admin)):
    """All entries of one kind whatever their status, most recent first."""
    service = get_directory_service(entity_type)
    return await service.list_all()
