"""
Orders and memberships.

Both routes act for the signed‑in user; the user id is taken from the
session, never from the request body.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from culturepass_api.app.core.security import require_session
from culturepass_api.app.schemas.commerce import MembershipCreate, MembershipRead, OrderCreate, OrderRead
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.services.counter_service import CounterService

router = APIRouter()


@router.post("/orders", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
async def create_order(order: OrderCreate, account: AccountRead = Depends(require_session)) -> OrderRead:
    """Buy tickets for an event.

    Responds 404 for an unknown event and 409 when the event does not
    have ``quantity`` tickets left.
    """
    return await CounterService.record_order(
        user_id=account.id,
        event_id=order.event_id,
        quantity=order.quantity,
        amount=order.amount,
        currency=order.currency,
        customer_name=order.customer_name or account.name,
        customer_email=order.customer_email or account.email or "",
    )


@router.get("/orders", response_model=List[OrderRead])
async def list_my_orders(account: AccountRead = Depends(require_session)) -> List[OrderRead]:
    return await CounterService.list_orders_for_user(account.id)


@router.post("/memberships", response_model=MembershipRead, status_code=status.HTTP_201_CREATED)
async def join_organisation(
    membership: MembershipCreate,
    account: AccountRead = Depends(require_session),
) -> MembershipRead:
    """Join an organisation; 409 when already a member."""
    return await CounterService.record_membership(account.id, membership.org_id)


@router.get("/memberships", response_model=List[MembershipRead])
async def list_my_memberships(account: AccountRead = Depends(require_session)) -> List[MembershipRead]:
    return await CounterService.list_memberships_for_user(account.id)
