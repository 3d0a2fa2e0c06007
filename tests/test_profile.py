"""Tests for the self-service profile endpoints."""

import base64

import pytest
from httpx import AsyncClient

from conftest import API, PASSWORD, bearer


@pytest.mark.asyncio
async def test_me_for_admin_carries_department(async_client: AsyncClient, register):
    data = await register("ada", account_type="Admin", departmentName="Parks")
    resp = await async_client.get(f"{API}/auth/me", headers=bearer(data["token"]))
    assert resp.status_code == 200
    me = resp.json()
    assert me["accountType"] == "Admin"
    assert me["admin"] == {"departmentName": "Parks"}
    assert "business" not in me and "cityAdmin" not in me


@pytest.mark.asyncio
async def test_me_for_city_admin_carries_city(async_client: AsyncClient, register):
    data = await register("cid", account_type="CityAdmin", cityName="Gotham", cityPosition="Mayor")
    me = (await async_client.get(f"{API}/auth/me", headers=bearer(data["token"]))).json()
    assert me["cityAdmin"] == {"cityName": "Gotham"}


@pytest.mark.asyncio
async def test_me_for_business_without_business_is_null(register):
    data = await register("biz", account_type="Business")
    assert data["user"]["roles"] == ["Business"]
    assert data["user"]["business"] is None


@pytest.mark.asyncio
async def test_me_for_sub_manager_without_business_is_null(register):
    data = await register("sam", account_type="SubManager")
    assert data["user"]["managedBusiness"] is None


@pytest.mark.asyncio
async def test_regular_user_has_no_role_section(register):
    user = (await register("reggie"))["user"]
    for key in ("admin", "cityAdmin", "business", "managedBusiness"):
        assert key not in user


@pytest.mark.asyncio
async def test_profile_image_round_trips_as_base64(async_client: AsyncClient, register):
    raw = b"\x89PNG fake image bytes"
    data = await register("pix", profileImage=base64.b64encode(raw).decode())
    assert base64.b64decode(data["user"]["profileImage"]) == raw


@pytest.mark.asyncio
async def test_invalid_profile_image_rejected(async_client: AsyncClient):
    resp = await async_client.post(
        f"{API}/auth/register",
        json={
            "username": "badpix",
            "email": "badpix@example.com",
            "password": PASSWORD,
            "profileImage": "***not base64***",
        },
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_partial_update_leaves_omitted_fields(async_client: AsyncClient, register):
    data = await register("pat")
    headers = bearer(data["token"])
    before = (await async_client.get(f"{API}/auth/me", headers=headers)).json()

    resp = await async_client.patch(f"{API}/auth/me", json={"location": "Shelbyville"}, headers=headers)
    assert resp.status_code == 200
    after = resp.json()
    assert after["location"] == "Shelbyville"
    for field in ("username", "email", "fullName", "phoneNumber", "address", "accountType"):
        assert after[field] == before[field]


@pytest.mark.asyncio
async def test_update_with_empty_string_overwrites(async_client: AsyncClient, register):
    data = await register("quinn")
    headers = bearer(data["token"])
    resp = await async_client.patch(f"{API}/auth/me", json={"address": ""}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["address"] == ""
    assert resp.json()["phoneNumber"] == "555-0100"


@pytest.mark.asyncio
async def test_update_username_conflict(async_client: AsyncClient, register):
    await register("rita")
    data = await register("ruth")
    resp = await async_client.patch(
        f"{API}/auth/me", json={"username": "Rita"}, headers=bearer(data["token"])
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_update_username_allows_case_change_of_own_name(async_client: AsyncClient, register):
    data = await register("sven")
    resp = await async_client.patch(
        f"{API}/auth/me", json={"username": "Sven"}, headers=bearer(data["token"])
    )
    assert resp.status_code == 200
    assert resp.json()["username"] == "Sven"


@pytest.mark.asyncio
async def test_update_rejects_null_username(async_client: AsyncClient, register):
    data = await register("tess")
    resp = await async_client.patch(
        f"{API}/auth/me", json={"username": None}, headers=bearer(data["token"])
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_variant_field_of_other_type_is_ignored(async_client: AsyncClient, register):
    data = await register("uma")
    headers = bearer(data["token"])
    resp = await async_client.patch(
        f"{API}/auth/me", json={"departmentName": "Finance"}, headers=headers
    )
    assert resp.status_code == 200
    assert "admin" not in resp.json()


@pytest.mark.asyncio
async def test_admin_can_update_department(async_client: AsyncClient, register):
    data = await register("vic", account_type="Admin", departmentName="Parks")
    resp = await async_client.patch(
        f"{API}/auth/me", json={"departmentName": "Roads"}, headers=bearer(data["token"])
    )
    assert resp.json()["admin"] == {"departmentName": "Roads"}


@pytest.mark.asyncio
async def test_change_password(async_client: AsyncClient, register):
    data = await register("walt")
    headers = bearer(data["token"])

    bad = await async_client.post(
        f"{API}/auth/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "brand-new-pw"},
        headers=headers,
    )
    assert bad.status_code == 401

    ok = await async_client.post(
        f"{API}/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "brand-new-pw"},
        headers=headers,
    )
    assert ok.status_code == 200
    assert ok.json()["success"] is True

    old = await async_client.post(f"{API}/auth/token", json={"identifier": "walt", "password": PASSWORD})
    new = await async_client.post(f"{API}/auth/token", json={"identifier": "walt", "password": "brand-new-pw"})
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_change_password_rejects_short_password(async_client: AsyncClient, register):
    data = await register("xena")
    resp = await async_client.post(
        f"{API}/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "abc"},
        headers=bearer(data["token"]),
    )
    assert resp.status_code == 400
