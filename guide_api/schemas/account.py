"""Pydantic schemas for account registration, login and profile CRUD."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from guide_api.core.config import settings
from guide_api.models.account import AccountType
from guide_api.schemas.common import CamelModel, decode_image


def _required(v: str, what: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{what} must not be empty")
    return v


def _check_email(v: str) -> str:
    v = _required(v, "Email")
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


def _check_password(v: str) -> str:
    if len(v) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )
    return v


# ── Variant payloads (one per account type) ─────────────────────────
class AdminDetails(BaseModel):
    account_type: Literal["Admin"] = "Admin"
    department_name: str | None = None


class CityAdminDetails(BaseModel):
    account_type: Literal["CityAdmin"] = "CityAdmin"
    city_name: str | None = None
    city_position: str | None = None


class BusinessDetails(BaseModel):
    account_type: Literal["Business"] = "Business"
    business_id: int | None = None


class SubManagerDetails(BaseModel):
    account_type: Literal["SubManager"] = "SubManager"


class RegularUserDetails(BaseModel):
    account_type: Literal["RegularUser"] = "RegularUser"
    member_since: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_active: bool = True


AccountDetails = Annotated[
    Union[AdminDetails, CityAdminDetails, BusinessDetails, SubManagerDetails, RegularUserDetails],
    Field(discriminator="account_type"),
]


# ── Registration / login ────────────────────────────────────────────
class RegisterRequest(CamelModel):
    username: str
    email: str
    password: str
    full_name: str | None = None
    phone_number: str | None = None
    location: str | None = None
    address: str | None = None
    profile_image: bytes | None = None
    account_type: str | None = None

    # Account-type specific
    department_name: str | None = None
    city_name: str | None = None
    city_position: str | None = None
    business_name: str | None = None
    business_license: str | None = None
    business_phone: str | None = None
    business_address: str | None = None

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return _required(v, "Username")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("profile_image", mode="before")
    @classmethod
    def _image(cls, v: object) -> object:
        return decode_image(v)

    @property
    def kind(self) -> AccountType:
        return AccountType.parse(self.account_type)

    def details(self) -> AccountDetails:
        """Build the variant payload selected by ``account_type``."""
        kind = self.kind
        if kind is AccountType.ADMIN:
            return AdminDetails(department_name=self.department_name)
        if kind is AccountType.CITY_ADMIN:
            return CityAdminDetails(city_name=self.city_name, city_position=self.city_position)
        if kind is AccountType.BUSINESS:
            return BusinessDetails()
        if kind is AccountType.SUB_MANAGER:
            return SubManagerDetails()
        return RegularUserDetails()


class LoginRequest(CamelModel):
    identifier: str = Field(validation_alias=AliasChoices("identifier", "username", "userName", "email"))
    password: str


class BusinessLoginRequest(CamelModel):
    username: str = Field(validation_alias=AliasChoices("username", "userName"))
    password: str


class AuthResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: dict[str, Any]


# ── Profile ─────────────────────────────────────────────────────────
class ProfileUpdate(CamelModel):
    username: str | None = None
    email: str | None = None
    full_name: str | None = None
    phone_number: str | None = None
    location: str | None = None
    address: str | None = None
    profile_image: bytes | None = None
    department_name: str | None = None
    city_name: str | None = None
    city_position: str | None = None

    @field_validator("username")
    @classmethod
    def _username(cls, v: str | None) -> str | None:
        return None if v is None else _required(v, "Username")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return None if v is None else _check_email(v)

    @field_validator("profile_image", mode="before")
    @classmethod
    def _image(cls, v: object) -> object:
        return decode_image(v)


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)


class AccountSummary(CamelModel):
    id: int
    username: str
    email: str | None
    full_name: str | None
    phone_number: str | None
    location: str | None
    address: str | None
    account_type: str
    roles: list[str] = []
