"""Pydantic models for member referrals."""

from typing import List, Optional

from .common import ApiModel


class ReferralCodeRead(ApiModel):
    referral_code: str


class ReferralValidation(ApiModel):
    valid: bool
    referrer_name: Optional[str] = None


class ReferredMember(ApiModel):
    id: str
    referred_name: str
    referred_username: str
    status: str
    created_at: Optional[str] = None


class ReferralSummary(ApiModel):
    count: int
    referrals: List[ReferredMember]
