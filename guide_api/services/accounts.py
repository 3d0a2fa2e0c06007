"""
Account registry — registration, authentication, profile updates and
cascading account deletion.

Every mutating function here performs its whole unit of work on the
given session and commits once, so multi-row flows (account + role +
business, or a cascaded delete) land atomically.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy import delete as sa_delete
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from guide_api.core.exceptions import (Conflict, Forbidden, NotFound, Unauthorized,
                                      ValidationFailed)
from guide_api.core.security import create_access_token, get_password_hash, verify_password
from guide_api.db.session import commit_or_raise
from guide_api.models.account import Account, AccountRole, AccountType
from guide_api.models.business import Business, BusinessStatus
from guide_api.schemas.account import (AccountDetails, AccountSummary,
                                       AdminDetails, AuthResponse,
                                       BusinessDetails, CityAdminDetails,
                                       ProfileUpdate, RegisterRequest,
                                       RegularUserDetails)
from guide_api.services.profiles import build_profile_view, primary_role

logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = "Incorrect username or password"

# Variant columns an owner may edit, per account type
_EDITABLE_VARIANT_FIELDS: dict[AccountType, set[str]] = {
    AccountType.ADMIN: {"department_name"},
    AccountType.CITY_ADMIN: {"city_name", "city_position"},
}
_VARIANT_FIELDS = {"department_name", "city_name", "city_position"}


def normalize(value: str) -> str:
    return value.strip().lower()


# ── Lookups ─────────────────────────────────────────────────────────
async def get_account(db: AsyncSession, account_id: int) -> Account | None:
    result = await db.execute(select(Account).where(Account.id == account_id))
    return result.scalar_one_or_none()


async def find_by_username(db: AsyncSession, username: str) -> Account | None:
    result = await db.execute(
        select(Account).where(Account.normalized_username == normalize(username))
    )
    return result.scalar_one_or_none()


async def find_by_email(db: AsyncSession, email: str) -> Account | None:
    result = await db.execute(
        select(Account).where(Account.normalized_email == normalize(email))
    )
    return result.scalar_one_or_none()


async def get_roles(db: AsyncSession, account_id: int) -> list[str]:
    result = await db.execute(
        select(AccountRole.role).where(AccountRole.account_id == account_id).order_by(AccountRole.role)
    )
    return list(result.scalars().all())


# ── Variant payload ─────────────────────────────────────────────────
def apply_details(account: Account, details: AccountDetails) -> None:
    """Write *details* onto the account row and clear other variants' columns."""
    account.account_type = details.account_type
    account.department_name = None
    account.city_name = None
    account.city_position = None
    account.business_id = None
    account.member_since = None
    account.is_active = None

    if isinstance(details, AdminDetails):
        account.department_name = details.department_name
    elif isinstance(details, CityAdminDetails):
        account.city_name = details.city_name
        account.city_position = details.city_position
    elif isinstance(details, BusinessDetails):
        account.business_id = details.business_id
    elif isinstance(details, RegularUserDetails):
        account.member_since = details.member_since
        account.is_active = details.is_active


# ── Session tokens ──────────────────────────────────────────────────
def issue_token(account: Account, roles: list[str]) -> str:
    return create_access_token(
        account.id,
        name=account.username,
        email=account.email,
        roles=roles,
    )


async def load_profile(db: AsyncSession, account: Account) -> dict:
    """Role-shaped profile for *account*, loading the business it needs."""
    roles = await get_roles(db, account.id)
    role = primary_role(roles)
    business = None
    if role == AccountType.BUSINESS.value and account.business_id is not None:
        result = await db.execute(select(Business).where(Business.id == account.business_id))
        business = result.scalar_one_or_none()
    elif role == AccountType.SUB_MANAGER.value:
        result = await db.execute(select(Business).where(Business.sub_manager_id == account.id))
        business = result.scalar_one_or_none()
    return build_profile_view(account, roles, business)


async def session_for(db: AsyncSession, account: Account) -> AuthResponse:
    """Mint a token for *account* and pair it with its profile."""
    roles = await get_roles(db, account.id)
    return AuthResponse(token=issue_token(account, roles), user=await load_profile(db, account))


# ── Registration / authentication ───────────────────────────────────
async def register(db: AsyncSession, body: RegisterRequest) -> Account:
    """Create an account of the requested type plus its role.

    A Business registration that names a business also files a Pending
    Business owned by (and linked to) the new account.
    """
    if await find_by_username(db, body.username) is not None:
        raise Conflict("Username already registered")
    if await find_by_email(db, body.email) is not None:
        raise Conflict("Email already registered")

    details = body.details()
    account = Account(
        username=body.username,
        normalized_username=normalize(body.username),
        email=body.email,
        normalized_email=normalize(body.email),
        hashed_password=get_password_hash(body.password),
        full_name=body.full_name,
        phone_number=body.phone_number,
        location=body.location,
        address=body.address,
        profile_image=body.profile_image,
    )
    apply_details(account, details)
    db.add(account)
    await db.flush()

    db.add(AccountRole(account_id=account.id, role=details.account_type))

    if isinstance(details, BusinessDetails) and body.business_name and body.business_name.strip():
        business = Business(
            name=body.business_name.strip(),
            phone_number=body.business_phone or body.phone_number,
            license_number=body.business_license,
            address=body.business_address or body.address,
            owner_id=account.id,
            status=BusinessStatus.PENDING.value,
        )
        db.add(business)
        await db.flush()
        account.business_id = business.id
        logger.info("Filed business %s for new account %s", business.name, account.username)

    await commit_or_raise(db, conflict_detail="Username or email already registered")
    await db.refresh(account)
    logger.info("Registered %s account %s (id %d)", account.account_type, account.username, account.id)
    return account


async def authenticate(db: AsyncSession, identifier: str, password: str) -> Account:
    """Verify credentials by username, falling back to email."""
    identifier = identifier.strip()
    account = await find_by_username(db, identifier) if identifier else None
    if account is None and identifier:
        account = await find_by_email(db, identifier)

    if account is None or not verify_password(password, account.hashed_password):
        raise Unauthorized(_BAD_CREDENTIALS)
    return account


async def ensure_admin(db: AsyncSession, email: str, password: str) -> Account | None:
    """Seed the configured administrator. Returns it only if newly created."""
    if await find_by_email(db, email) is not None:
        return None

    admin = Account(
        username=email,
        normalized_username=normalize(email),
        email=email,
        normalized_email=normalize(email),
        hashed_password=get_password_hash(password),
        full_name="System Administrator",
    )
    apply_details(admin, AdminDetails())
    db.add(admin)
    await db.flush()
    db.add(AccountRole(account_id=admin.id, role=AccountType.ADMIN.value))
    await commit_or_raise(db, conflict_detail="Administrator already exists")
    logger.info("Default admin created: %s (password: <redacted>)", email)
    return admin


# ── Profile ─────────────────────────────────────────────────────────
async def update_profile(db: AsyncSession, account: Account, body: ProfileUpdate) -> Account:
    """Apply only the fields present in the request body."""
    changes = body.model_dump(exclude_unset=True)

    if "username" in changes:
        username = changes.pop("username")
        if username is None:
            raise ValidationFailed("Username must not be empty")
        if normalize(username) != account.normalized_username:
            if await find_by_username(db, username) is not None:
                raise Conflict("Username already registered")
        account.username = username
        account.normalized_username = normalize(username)
        # A dedicated business login is mirrored on its business
        await db.execute(
            update(Business).where(Business.account_id == account.id).values(business_username=username)
        )

    if "email" in changes:
        email = changes.pop("email")
        if email is None:
            raise ValidationFailed("Email must not be empty")
        if normalize(email) != account.normalized_email:
            if await find_by_email(db, email) is not None:
                raise Conflict("Email already registered")
        account.email = email
        account.normalized_email = normalize(email)

    editable = _EDITABLE_VARIANT_FIELDS.get(account.kind, set())
    for field, value in changes.items():
        if field in _VARIANT_FIELDS and field not in editable:
            logger.debug("Ignoring %s for %s account %d", field, account.account_type, account.id)
            continue
        setattr(account, field, value)

    await commit_or_raise(db, conflict_detail="Username or email already registered")
    await db.refresh(account)
    logger.info("Updated profile of account %d", account.id)
    return account


async def change_password(
    db: AsyncSession, account: Account, current_password: str, new_password: str
) -> None:
    if not verify_password(current_password, account.hashed_password):
        raise Unauthorized("Current password is incorrect")
    account.hashed_password = get_password_hash(new_password)
    await db.execute(
        update(Business)
        .where(Business.account_id == account.id)
        .values(business_password_hash=account.hashed_password)
    )
    await commit_or_raise(db, conflict_detail="Password change conflicted")
    logger.info("Password changed for account %d", account.id)


# ── Admin listing ───────────────────────────────────────────────────
async def list_accounts(db: AsyncSession) -> list[AccountSummary]:
    accounts = list((await db.execute(select(Account).order_by(Account.id))).scalars().all())

    # One query for every account's roles
    roles_by_account: dict[int, list[str]] = defaultdict(list)
    role_rows = await db.execute(select(AccountRole).order_by(AccountRole.role))
    for row in role_rows.scalars().all():
        roles_by_account[row.account_id].append(row.role)

    return [
        AccountSummary.model_validate(acc).model_copy(update={"roles": roles_by_account[acc.id]})
        for acc in accounts
    ]


# ── Deletion ────────────────────────────────────────────────────────
async def _delete_cascade(db: AsyncSession, account: Account) -> None:
    """Remove *account* and everything that hangs off it, without committing."""
    owned = list(
        (await db.execute(select(Business).where(Business.owner_id == account.id))).scalars().all()
    )
    owned_ids = [b.id for b in owned]
    dedicated_ids = [b.account_id for b in owned if b.account_id is not None and b.account_id != account.id]

    if owned_ids:
        await db.execute(
            update(Account).where(Account.business_id.in_(owned_ids)).values(business_id=None)
        )
        await db.execute(
            update(Business)
            .where(Business.id.in_(owned_ids))
            .values(account_id=None, sub_manager_id=None)
        )
        for dedicated_id in dedicated_ids:
            dedicated = await get_account(db, dedicated_id)
            if dedicated is not None:
                logger.info("Deleting dedicated account %d of business owned by %d", dedicated_id, account.id)
                await _delete_cascade(db, dedicated)
        await db.execute(sa_delete(Business).where(Business.id.in_(owned_ids)))
        logger.info("Deleted %d businesses owned by account %d", len(owned_ids), account.id)

    # A dedicated business login going away unlinks its business
    await db.execute(
        update(Business)
        .where(Business.account_id == account.id)
        .values(has_account=False, business_username=None, business_password_hash=None, account_id=None)
    )
    # A SubManager going away frees the business it managed
    await db.execute(
        update(Business).where(Business.sub_manager_id == account.id).values(sub_manager_id=None)
    )

    await db.execute(sa_delete(AccountRole).where(AccountRole.account_id == account.id))
    await db.execute(sa_delete(Account).where(Account.id == account.id))


async def delete_account(db: AsyncSession, account: Account) -> None:
    """Self-service deletion with full cascade."""
    account_id = account.id
    await _delete_cascade(db, account)
    await commit_or_raise(db, conflict_detail="Account could not be deleted")
    logger.info("Account %d and all related data deleted", account_id)


async def admin_delete_account(db: AsyncSession, target_id: int, requested_by: int) -> Account:
    """Admin-initiated deletion. Refuses to delete the requesting admin."""
    if target_id == requested_by:
        logger.warning("Admin %d attempted to delete their own account", requested_by)
        raise Forbidden("Cannot delete your own account")
    target = await get_account(db, target_id)
    if target is None:
        raise NotFound("User not found")
    await _delete_cascade(db, target)
    await commit_or_raise(db, conflict_detail="Account could not be deleted")
    logger.info("Admin %d deleted account %d and all related data", requested_by, target_id)
    return target
