"""
Business lifecycle — filing, owner edits, admin approval, dedicated
business logins and sub-manager assignment.

Ownership is checked here, not in the route guards: a caller who is not
the recorded owner gets ``NotFound`` so other owners' businesses stay
invisible.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete as sa_delete
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from guide_api.core.exceptions import (Conflict, Forbidden, InvalidState,
                                       NotFound, Unauthorized,
                                       ValidationFailed)
from guide_api.core.security import get_password_hash, verify_password
from guide_api.db.session import commit_or_raise
from guide_api.models.account import Account, AccountRole, AccountType
from guide_api.models.business import Business, BusinessStatus
from guide_api.schemas.account import BusinessDetails
from guide_api.schemas.business import (BusinessCreate, BusinessUpdate,
                                        OwnerSummary, PendingBusinessRead)
from guide_api.services import accounts

logger = logging.getLogger(__name__)


async def get_business(db: AsyncSession, business_id: int) -> Business:
    result = await db.execute(select(Business).where(Business.id == business_id))
    business = result.scalar_one_or_none()
    if business is None:
        raise NotFound("Business not found")
    return business


async def _get_owned(db: AsyncSession, business_id: int, owner_id: int) -> Business:
    result = await db.execute(
        select(Business).where(Business.id == business_id, Business.owner_id == owner_id)
    )
    business = result.scalar_one_or_none()
    if business is None:
        raise NotFound("Business not found or you don't have permission to modify it")
    return business


# ── Filing & owner CRUD ─────────────────────────────────────────────
async def create_business(db: AsyncSession, owner: Account, body: BusinessCreate) -> Business:
    """File a new business for *owner*; it always starts Pending."""
    business = Business(
        name=body.name,
        phone_number=body.phone_number,
        license_number=body.license_number,
        address=body.address,
        profile_image=body.profile_image,
        owner_id=owner.id,
        status=BusinessStatus.PENDING.value,
    )
    db.add(business)
    await db.flush()

    # A Business account that has no business yet operates this one
    if owner.kind is AccountType.BUSINESS and owner.business_id is None:
        owner.business_id = business.id
        logger.info("Linked business %d to Business account %d", business.id, owner.id)

    await commit_or_raise(db, conflict_detail="Business could not be created")
    await db.refresh(business)
    logger.info("Created business %s (id %d) for account %d", business.name, business.id, owner.id)
    return business


async def list_mine(db: AsyncSession, owner_id: int) -> list[Business]:
    result = await db.execute(
        select(Business).where(Business.owner_id == owner_id).order_by(Business.id)
    )
    return list(result.scalars().all())


async def list_pending(db: AsyncSession) -> list[PendingBusinessRead]:
    """Pending businesses with their owners' contact details."""
    result = await db.execute(
        select(Business, Account)
        .join(Account, Business.owner_id == Account.id)
        .where(Business.status == BusinessStatus.PENDING.value)
        .order_by(Business.created_at, Business.id)
    )
    pending = []
    for business, owner in result.all():
        item = PendingBusinessRead.model_validate(business)
        item.owner = OwnerSummary.model_validate(owner)
        pending.append(item)
    logger.info("Found %d pending businesses", len(pending))
    return pending


async def update_business(
    db: AsyncSession, business_id: int, owner_id: int, body: BusinessUpdate
) -> Business:
    """Partial update of the owner-editable fields. Status is never touched."""
    business = await _get_owned(db, business_id, owner_id)
    changes = body.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        raise ValidationFailed("Business name must not be empty")
    for field, value in changes.items():
        setattr(business, field, value)

    await commit_or_raise(db, conflict_detail="Business could not be updated")
    await db.refresh(business)
    logger.info("Updated business %d", business_id)
    return business


async def delete_business(db: AsyncSession, business_id: int, owner_id: int) -> Business:
    """Remove the business row; the owner's account is untouched."""
    business = await _get_owned(db, business_id, owner_id)
    name = business.name
    await db.execute(
        update(Account).where(Account.business_id == business_id).values(business_id=None)
    )
    await db.execute(sa_delete(Business).where(Business.id == business_id))
    await commit_or_raise(db, conflict_detail="Business could not be deleted")
    logger.info("Deleted business %d (%s)", business_id, name)
    return business


# ── Admin decisions ─────────────────────────────────────────────────
async def _decide(db: AsyncSession, business_id: int, status: BusinessStatus) -> Business:
    business = await get_business(db, business_id)
    if business.status != BusinessStatus.PENDING.value:
        logger.warning(
            "Business %d re-decided: %s -> %s", business_id, business.status, status.value
        )
    business.status = status.value
    await commit_or_raise(db, conflict_detail="Business could not be updated")
    await db.refresh(business)
    logger.info("Business %d %s", business_id, status.value.lower())
    return business


async def approve(db: AsyncSession, business_id: int) -> Business:
    return await _decide(db, business_id, BusinessStatus.APPROVED)


async def deny(db: AsyncSession, business_id: int) -> Business:
    return await _decide(db, business_id, BusinessStatus.DENIED)


# ── Dedicated business login ────────────────────────────────────────
async def create_dedicated_account(
    db: AsyncSession,
    business_id: int,
    requested_by: Account,
    username: str,
    password: str,
) -> Business:
    """Provision the one Business-role login that operates an approved business."""
    business = await get_business(db, business_id)
    if business.owner_id != requested_by.id:
        raise Forbidden("Only the owner can create an account for this business")
    if business.status != BusinessStatus.APPROVED.value:
        raise InvalidState("Business must be approved before creating an account")
    if business.has_account:
        raise Conflict("Business already has an account")
    if await accounts.find_by_username(db, username) is not None:
        raise Conflict("Username already taken")

    hashed = get_password_hash(password)
    login = Account(
        username=username,
        normalized_username=accounts.normalize(username),
        email=None,
        normalized_email=None,
        hashed_password=hashed,
        full_name=business.name,
        phone_number=business.phone_number or requested_by.phone_number,
        location=requested_by.location,
        address=business.address or requested_by.address,
    )
    accounts.apply_details(login, BusinessDetails(business_id=business.id))
    db.add(login)
    await db.flush()
    db.add(AccountRole(account_id=login.id, role=AccountType.BUSINESS.value))

    business.has_account = True
    business.business_username = username
    business.business_password_hash = hashed
    business.account_id = login.id

    await commit_or_raise(db, conflict_detail="Business already has an account")
    await db.refresh(business)
    logger.info("Created business account %s for business %d", username, business.id)
    return business


async def business_login(db: AsyncSession, username: str, password: str) -> Account:
    """Authenticate a Business-role login whose business is approved."""
    account = await accounts.find_by_username(db, username)
    if (
        account is None
        or account.kind is not AccountType.BUSINESS
        or not verify_password(password, account.hashed_password)
    ):
        raise Unauthorized("Invalid business credentials")

    business = None
    if account.business_id is not None:
        result = await db.execute(select(Business).where(Business.id == account.business_id))
        business = result.scalar_one_or_none()
    if business is None or business.status != BusinessStatus.APPROVED.value:
        logger.warning("Business login refused for %s: business not approved", username)
        raise Unauthorized("Business is not approved")
    return account


# ── Sub-manager ─────────────────────────────────────────────────────
async def assign_sub_manager(
    db: AsyncSession, business_id: int, owner_id: int, username: str
) -> Business:
    business = await _get_owned(db, business_id, owner_id)
    manager = await accounts.find_by_username(db, username)
    if manager is None:
        raise NotFound("User not found")
    if manager.kind is not AccountType.SUB_MANAGER:
        raise ValidationFailed("User is not a SubManager")

    result = await db.execute(
        select(Business.id).where(Business.sub_manager_id == manager.id, Business.id != business.id)
    )
    if result.scalar_one_or_none() is not None:
        raise Conflict("SubManager already manages another business")

    business.sub_manager_id = manager.id
    await commit_or_raise(db, conflict_detail="SubManager already manages another business")
    await db.refresh(business)
    logger.info("Assigned SubManager %d to business %d", manager.id, business.id)
    return business


async def remove_sub_manager(db: AsyncSession, business_id: int, owner_id: int) -> Business:
    business = await _get_owned(db, business_id, owner_id)
    business.sub_manager_id = None
    await commit_or_raise(db, conflict_detail="Business could not be updated")
    await db.refresh(business)
    logger.info("Cleared SubManager of business %d", business.id)
    return business
