"""
Role-shaped profile view.

The profile returned by ``/auth/me`` and the admin user lookup is the
account's common fields plus exactly one role-specific section, so the
client learns its role context without a second request.  Everything
here is pure: callers load the account, its roles and the relevant
business, and this module only arranges them.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from guide_api.models.account import Account, AccountType
from guide_api.models.business import Business
from guide_api.schemas.common import encode_image

# First matching role wins
ROLE_PRECEDENCE = (
    AccountType.ADMIN.value,
    AccountType.CITY_ADMIN.value,
    AccountType.BUSINESS.value,
    AccountType.SUB_MANAGER.value,
)


def primary_role(roles: Iterable[str]) -> str | None:
    """Return the role that selects the profile's extra section, if any."""
    held = set(roles)
    for role in ROLE_PRECEDENCE:
        if role in held:
            return role
    return None


def business_summary(business: Business | None, *, include_image: bool = True) -> dict[str, Any] | None:
    if business is None:
        return None
    summary: dict[str, Any] = {
        "id": business.id,
        "name": business.name,
        "phoneNumber": business.phone_number,
        "licenseNumber": business.license_number,
        "address": business.address,
    }
    if include_image:
        summary["profileImage"] = encode_image(business.profile_image)
    return summary


def build_profile_view(
    account: Account,
    roles: Iterable[str],
    business: Business | None = None,
) -> dict[str, Any]:
    """Assemble the profile for *account* given its role membership.

    *business* is the business relevant to the primary role: the linked
    business for Business accounts, the managed one for SubManagers.
    It is ignored for every other role.
    """
    role_list = sorted(set(roles))
    view: dict[str, Any] = {
        "id": account.id,
        "username": account.username,
        "email": account.email,
        "fullName": account.full_name,
        "phoneNumber": account.phone_number,
        "location": account.location,
        "address": account.address,
        "accountType": account.account_type,
    }
    if account.profile_image:
        view["profileImage"] = encode_image(account.profile_image)
    view["roles"] = role_list

    role = primary_role(role_list)
    if role == AccountType.ADMIN.value:
        view["admin"] = {"departmentName": account.department_name}
    elif role == AccountType.CITY_ADMIN.value:
        view["cityAdmin"] = {"cityName": account.city_name}
    elif role == AccountType.BUSINESS.value:
        view["business"] = business_summary(business)
    elif role == AccountType.SUB_MANAGER.value:
        view["managedBusiness"] = business_summary(business, include_image=False)
    return view
