"""
Pydantic models for orders and memberships.

Both records are created by the counter service, which bumps the
related event or organisation counter in the same transaction.  The
acting user always comes from the session, never from the body.
"""

from typing import Optional

from pydantic import Field

from .common import ApiModel


class OrderCreate(ApiModel):
    event_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)
    amount: float = Field(..., ge=0)
    currency: str = "AUD"
    customer_name: str = ""
    customer_email: str = ""


class OrderRead(OrderCreate):
    id: str
    user_id: str
    status: str
    created_at: Optional[str] = None


class MembershipCreate(ApiModel):
    org_id: str = Field(..., min_length=1)


class MembershipRead(MembershipCreate):
    id: str
    user_id: str
    role: str = "member"
    created_at: Optional[str] = None
