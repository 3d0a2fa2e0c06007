"""Pydantic schemas for Business CRUD and the approval workflow."""

from __future__ import annotations

from datetime import datetime

from pydantic import field_serializer, field_validator

from guide_api.core.config import settings
from guide_api.schemas.common import CamelModel, decode_image, encode_image


class BusinessCreate(CamelModel):
    name: str
    phone_number: str | None = None
    license_number: str | None = None
    address: str | None = None
    profile_image: bytes | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Business name is required")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("profile_image", mode="before")
    @classmethod
    def _image(cls, v: object) -> object:
        return decode_image(v)


class BusinessUpdate(CamelModel):
    name: str | None = None
    phone_number: str | None = None
    license_number: str | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Business name must not be empty")
        return v


class BusinessRead(CamelModel):
    id: int
    name: str
    phone_number: str | None
    license_number: str | None
    address: str | None
    profile_image: bytes | None = None
    status: str
    owner_id: int
    sub_manager_id: int | None = None
    has_account: bool
    business_username: str | None = None
    created_at: datetime | None = None

    @field_serializer("profile_image")
    def _image(self, v: bytes | None) -> str | None:
        return encode_image(v)


class OwnerSummary(CamelModel):
    id: int
    username: str
    email: str | None
    full_name: str | None
    phone_number: str | None


class PendingBusinessRead(BusinessRead):
    owner: OwnerSummary | None = None


class BusinessDecision(CamelModel):
    message: str
    business: BusinessRead


class DedicatedAccountCreate(CamelModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be empty")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )
        return v


class SubManagerAssign(CamelModel):
    username: str
