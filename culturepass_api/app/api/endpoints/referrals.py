"""
Referral endpoints.

Members see who registered with their code and can fetch their code;
checking a code is public so the sign-up form can show the referrer.
"""

from fastapi import APIRouter, Depends

from culturepass_api.app.core.security import require_session
from culturepass_api.app.schemas.referral import ReferralCodeRead, ReferralSummary, ReferralValidation
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.services.referral_service import ReferralService

router = APIRouter()


@router.get("/my", response_model=ReferralSummary)
async def my_referrals(account: AccountRead = Depends(require_session)) -> ReferralSummary:
    return await ReferralService.summary(account.id)


@router.post("/generate-code", response_model=ReferralCodeRead)
async def generate_code(account: AccountRead = Depends(require_session)) -> ReferralCodeRead:
    """Return the member's referral code, assigning one on first use."""
    return ReferralCodeRead(referral_code=await ReferralService.ensure_code(account.id))


@router.get("/validate/{code}", response_model=ReferralValidation)
async def validate_code(code: str) -> ReferralValidation:
    return await ReferralService.validate(code)
