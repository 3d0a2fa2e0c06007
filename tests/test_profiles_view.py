"""Unit tests for the role-shaped profile view."""

import pytest

from guide_api.models.account import Account
from guide_api.models.business import Business
from guide_api.services.profiles import build_profile_view, primary_role

SECTIONS = {"admin", "cityAdmin", "business", "managedBusiness"}


def _account(**overrides) -> Account:
    fields = dict(
        id=7,
        username="casey",
        email="casey@example.com",
        full_name="Casey Doe",
        phone_number="555-0101",
        location="Springfield",
        address="1 Main St",
        account_type="RegularUser",
        department_name="Parks",
        city_name="Shelbyville",
    )
    fields.update(overrides)
    return Account(**fields)


def _business() -> Business:
    return Business(
        id=3,
        name="Casey's Cones",
        phone_number="555-0199",
        license_number="LIC-3",
        address="9 Pier Rd",
        profile_image=b"\x00\x01",
        owner_id=1,
    )


@pytest.mark.parametrize(
    "roles, expected",
    [
        ([], None),
        (["RegularUser"], None),
        (["SubManager", "Business"], "Business"),
        (["Business", "CityAdmin"], "CityAdmin"),
        (["CityAdmin", "Admin", "SubManager"], "Admin"),
        (["SubManager"], "SubManager"),
    ],
)
def test_primary_role_precedence(roles, expected):
    assert primary_role(roles) == expected


def test_common_fields_and_no_image():
    view = build_profile_view(_account(), ["RegularUser"])
    assert view["id"] == 7
    assert view["fullName"] == "Casey Doe"
    assert view["roles"] == ["RegularUser"]
    assert "profileImage" not in view
    assert not SECTIONS & view.keys()


def test_exactly_one_section_for_multiple_roles():
    view = build_profile_view(_account(), ["CityAdmin", "Admin", "Business"], _business())
    assert SECTIONS & view.keys() == {"admin"}
    assert view["admin"] == {"departmentName": "Parks"}


def test_city_admin_section():
    view = build_profile_view(_account(), ["CityAdmin"])
    assert view["cityAdmin"] == {"cityName": "Shelbyville"}


def test_business_section_includes_image():
    view = build_profile_view(_account(), ["Business"], _business())
    assert view["business"] == {
        "id": 3,
        "name": "Casey's Cones",
        "phoneNumber": "555-0199",
        "licenseNumber": "LIC-3",
        "address": "9 Pier Rd",
        "profileImage": "AAE=",
    }


def test_managed_business_omits_image():
    view = build_profile_view(_account(), ["SubManager"], _business())
    assert view["managedBusiness"]["name"] == "Casey's Cones"
    assert "profileImage" not in view["managedBusiness"]


def test_business_role_without_business_is_null():
    view = build_profile_view(_account(), ["Business"])
    assert view["business"] is None


def test_business_ignored_for_other_roles():
    view = build_profile_view(_account(), ["RegularUser"], _business())
    assert not SECTIONS & view.keys()


def test_profile_image_encoded_when_present():
    view = build_profile_view(_account(profile_image=b"hi"), [])
    assert view["profileImage"] == "aGk="
