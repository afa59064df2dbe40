"""
Organisation endpoints.

Besides the shared directory routes, ``/{org_id}/members`` lists the
memberships of an organisation.  Joining goes through
``POST /memberships``.
"""

from typing import List

from fastapi import APIRouter

from culturepass_api.app.schemas.commerce import MembershipRead
from culturepass_api.app.schemas.directory import OrganisationCreate, OrganisationRead, OrganisationUpdate
from culturepass_api.app.services.counter_service import CounterService
from culturepass_api.app.services.directory_service import OrganisationService

from .directory import add_directory_routes

router = APIRouter()


@router.get("/{org_id}/members", response_model=List[MembershipRead])
async def list_members(org_id: str) -> List[MembershipRead]:
    return await CounterService.list_org_members(org_id)


add_directory_routes(router, OrganisationService, OrganisationCreate, OrganisationUpdate, OrganisationRead)
