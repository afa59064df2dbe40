"""
Pydantic models for accounts and authentication payloads.

``AccountRead`` is the only account representation the API returns;
it has no password field, so secrets cannot leak through a response.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .common import ApiModel, SocialLinks

# Federated accounts are named ``<provider>:<subject>``; password
# accounts may not use a colon so they can never take such a name.
USERNAME_PATTERN = r"^[^:]+$"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class ProfileFields(ApiModel):
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=320)
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None


class RegisterRequest(ProfileFields):
    """Schema for password registration.

    Only ``username`` and ``password`` are required; the display name
    falls back to the username and the location to Sydney, NSW.  A
    ``referral_code`` of an existing member links the new account to
    its referrer.
    """

    username: str = Field(..., min_length=1, max_length=100, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=1)
    referral_code: Optional[str] = Field(None, max_length=20)


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(ApiModel):
    id_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(ApiModel):
    email: str = Field(..., min_length=1, max_length=320)


class ResetPasswordRequest(ApiModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)


class MessageResponse(ApiModel):
    message: str


class ProfileUpdate(ProfileFields):
    social_links: Optional[SocialLinks] = None


class SaveEventRequest(ApiModel):
    event_id: str = Field(..., min_length=1)


class AccountRead(ApiModel):
    """Account as returned by the API (never includes the password hash)."""

    id: str
    username: str
    name: str
    email: Optional[str] = ""
    city: Optional[str] = ""
    state: Optional[str] = ""
    country: Optional[str] = ""
    phone: Optional[str] = ""
    website: Optional[str] = ""
    avatar_url: Optional[str] = ""
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    saved_events: List[str] = Field(default_factory=list)
    role: Role = Role.USER
    social_provider: Optional[str] = None
    referral_code: Optional[str] = None
    referred_by: Optional[str] = None
    cpid: Optional[str] = None
    created_at: Optional[str] = None
