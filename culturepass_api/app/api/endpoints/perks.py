"""Perk endpoints: public listing, admin management."""

from typing import List

from fastapi import APIRouter, Depends, status

from culturepass_api.app.core.security import require_admin
from culturepass_api.app.schemas.common import OkResponse
from culturepass_api.app.schemas.perk import PerkCreate, PerkRead, PerkUpdate
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.services.perk_service import PerkService

router = APIRouter()


@router.get("", response_model=List[PerkRead])
async def list_perks() -> List[PerkRead]:
    return await PerkService.list_perks()


@router.get("/{perk_id}", response_model=PerkRead)
async def get_perk(perk_id: str) -> PerkRead:
    return await PerkService.get_perk(perk_id)


@router.post("", response_model=PerkRead, status_code=status.HTTP_201_CREATED)
async def create_perk(perk: PerkCreate, admin: AccountRead = Depends(require_admin)) -> PerkRead:
    return await PerkService.create_perk(perk)


@router.put("/{perk_id}", response_model=PerkRead)
async def update_perk(
    perk_id: str,
    updates: PerkUpdate,
    admin: AccountRead = Depends(require_admin),
) -> PerkRead:
    return await PerkService.update_perk(perk_id, updates.model_dump(exclude_none=True))


@router.delete("/{perk_id}", response_model=OkResponse)
async def delete_perk(perk_id: str, admin: AccountRead = Depends(require_admin)) -> OkResponse:
    await PerkService.delete_perk(perk_id)
    return OkResponse()
