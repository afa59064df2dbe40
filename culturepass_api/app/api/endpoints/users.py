"""Endpoints for the signed‑in user's own profile and saved events."""

from fastapi import APIRouter, Depends

from culturepass_api.app.core.security import require_session
from culturepass_api.app.schemas.user import AccountRead, ProfileUpdate, SaveEventRequest
from culturepass_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/save-event", response_model=AccountRead)
async def toggle_saved_event(
    data: SaveEventRequest,
    account: AccountRead = Depends(require_session),
) -> AccountRead:
    """Save an event, or unsave it when already saved.  404 for unknown events."""
    return await UserService.toggle_saved_event(account.id, data.event_id)


@router.put("/profile", response_model=AccountRead)
async def update_profile(
    updates: ProfileUpdate,
    account: AccountRead = Depends(require_session),
) -> AccountRead:
    return await UserService.update_profile(account.id, updates.model_dump(exclude_none=True))
