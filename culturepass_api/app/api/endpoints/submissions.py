"""
User submissions to the directory.

Any signed‑in user may submit an organisation, business or artist.
Submissions start ``pending`` with the submitter as owner and only
appear in public listings once an admin approves them.
"""

from fastapi import APIRouter, Depends, status

from culturepass_api.app.core.security import require_session
from culturepass_api.app.schemas.directory import (
    ArtistCreate,
    ArtistRead,
    BusinessCreate,
    BusinessRead,
    OrganisationCreate,
    OrganisationRead,
    SubmissionsRead,
)
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.services.directory_service import ArtistService, BusinessService, OrganisationService

router = APIRouter()


@router.post("/submit/organisation", response_model=OrganisationRead, status_code=status.HTTP_201_CREATED)
async def submit_organisation(
    payload: OrganisationCreate,
    account: AccountRead = Depends(require_session),
) -> OrganisationRead:
    return await OrganisationService.create(payload, submitted_by=account.id)


@router.post("/submit/business", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
async def submit_business(
    payload: BusinessCreate,
    account: AccountRead = Depends(require_session),
) -> BusinessRead:
    return await BusinessService.create(payload, submitted_by=account.id)


@router.post("/submit/artist", response_model=ArtistRead, status_code=status.HTTP_201_CREATED)
async def submit_artist(
    payload: ArtistCreate,
    account: AccountRead = Depends(require_session),
) -> ArtistRead:
    return await ArtistService.create(payload, submitted_by=account.id)


@router.get("/my-submissions", response_model=SubmissionsRead)
async def my_submissions(account: AccountRead = Depends(require_session)) -> SubmissionsRead:
    """Everything the current user submitted, whatever its status."""
    return SubmissionsRead(
        organisations=await OrganisationService.list_by_owner(account.id),
        businesses=await BusinessService.list_by_owner(account.id),
        artists=await ArtistService.list_by_owner(account.id),
    )
