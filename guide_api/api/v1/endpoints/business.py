"""
Business endpoints.

- Filing, listing own businesses, edits and deletion: any authenticated
  account, scoped to businesses it owns.
- Pending list, approve, deny: Admin only.
- Dedicated account creation: owner only, business must be approved.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from guide_api.api.v1.deps import get_current_account, get_db, require_admin
from guide_api.models.account import Account
from guide_api.models.business import Business
from guide_api.schemas.business import (BusinessCreate, BusinessDecision,
                                        BusinessRead, BusinessUpdate,
                                        DedicatedAccountCreate,
                                        PendingBusinessRead, SubManagerAssign)
from guide_api.schemas.common import MessageResponse
from guide_api.schemas.token import TokenPayload
from guide_api.services import businesses

router = APIRouter(prefix="/business", tags=["business"])


# ── Admin ───────────────────────────────────────────────────────────
@router.get("/pending", response_model=list[PendingBusinessRead])
async def list_pending(
    db: AsyncSession = Depends(get_db),
    _admin: TokenPayload = Depends(require_admin),
) -> list[PendingBusinessRead]:
    return await businesses.list_pending(db)


@router.patch("/{business_id}/approve", response_model=BusinessDecision)
async def approve_business(
    business_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: TokenPayload = Depends(require_admin),
) -> BusinessDecision:
    business = await businesses.approve(db, business_id)
    return BusinessDecision(
        message="Business approved successfully",
        business=BusinessRead.model_validate(business),
    )


@router.patch("/{business_id}/deny", response_model=BusinessDecision)
async def deny_business(
    business_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: TokenPayload = Depends(require_admin),
) -> BusinessDecision:
    business = await businesses.deny(db, business_id)
    return BusinessDecision(
        message="Business denied",
        business=BusinessRead.model_validate(business),
    )


# ── Owner ───────────────────────────────────────────────────────────
@router.post("", response_model=BusinessRead, status_code=201)
async def create_business(
    body: BusinessCreate,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> Business:
    """File a business application; it starts Pending."""
    return await businesses.create_business(db, current, body)


@router.get("/my-businesses", response_model=list[BusinessRead])
async def my_businesses(
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> list[Business]:
    return await businesses.list_mine(db, current.id)


@router.put("/{business_id}", response_model=BusinessRead)
async def update_business(
    business_id: int,
    body: BusinessUpdate,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> Business:
    return await businesses.update_business(db, business_id, current.id, body)


@router.delete("/{business_id}", response_model=MessageResponse)
async def delete_business(
    business_id: int,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await businesses.delete_business(db, business_id, current.id)
    return MessageResponse(success=True, message="Business deleted successfully")


@router.post("/{business_id}/create-account", response_model=BusinessRead, status_code=201)
async def create_business_account(
    business_id: int,
    body: DedicatedAccountCreate,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> Business:
    """Provision the dedicated login that operates an approved business."""
    return await businesses.create_dedicated_account(
        db, business_id, current, body.username, body.password
    )


@router.put("/{business_id}/sub-manager", response_model=BusinessRead)
async def assign_sub_manager(
    business_id: int,
    body: SubManagerAssign,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> Business:
    return await businesses.assign_sub_manager(db, business_id, current.id, body.username)


@router.delete("/{business_id}/sub-manager", response_model=BusinessRead)
async def remove_sub_manager(
    business_id: int,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> Business:
    return await businesses.remove_sub_manager(db, business_id, current.id)
