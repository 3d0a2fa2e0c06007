"""
Secret endpoints — confirm a token's roles pass a route guard.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from guide_api.api.v1.deps import require_admin, require_roles
from guide_api.models.account import AccountType
from guide_api.schemas.token import TokenPayload

router = APIRouter(prefix="/secret", tags=["secret"])


@router.get("/admin-data")
async def admin_data(_admin: TokenPayload = Depends(require_admin)) -> str:
    return "only admins see this"


@router.get("/business-or-submanager")
async def business_or_submanager(
    _claims: TokenPayload = Depends(
        require_roles(AccountType.BUSINESS.value, AccountType.SUB_MANAGER.value)
    ),
) -> str:
    return "business and sub-managers see this"
