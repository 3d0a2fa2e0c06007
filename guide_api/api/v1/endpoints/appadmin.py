"""
App-admin endpoints — account listing, lookup and deletion (Admin only).

The role check runs before any lookup, so non-admins learn nothing
about which accounts exist.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from guide_api.api.v1.deps import get_db, require_admin
from guide_api.core.exceptions import NotFound
from guide_api.schemas.account import AccountSummary
from guide_api.schemas.common import MessageResponse
from guide_api.schemas.token import TokenPayload
from guide_api.services import accounts

router = APIRouter(prefix="/appadmin", tags=["appadmin"])


@router.get("/users", response_model=list[AccountSummary])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: TokenPayload = Depends(require_admin),
) -> list[AccountSummary]:
    return await accounts.list_accounts(db)


@router.get("/users/{user_id}")
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: TokenPayload = Depends(require_admin),
) -> dict:
    """Role-shaped profile of any account."""
    account = await accounts.get_account(db, user_id)
    if account is None:
        raise NotFound("User not found")
    return await accounts.load_profile(db, account)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: TokenPayload = Depends(require_admin),
) -> MessageResponse:
    """Delete an account with full cascade. Admins cannot delete themselves here."""
    await accounts.admin_delete_account(db, user_id, admin.account_id)  # type: ignore[arg-type]
    return MessageResponse(success=True, message="User and all related data deleted successfully")
