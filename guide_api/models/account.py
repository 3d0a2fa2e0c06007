"""
Account model — one identity row per actor, tagged with its account type.

Variant data lives in nullable columns on the same row; only the columns
belonging to the row's ``account_type`` are populated.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer,
                        LargeBinary, String, UniqueConstraint)

from guide_api.db.base import Base


class AccountType(str, enum.Enum):
    REGULAR_USER = "RegularUser"
    ADMIN = "Admin"
    BUSINESS = "Business"
    SUB_MANAGER = "SubManager"
    CITY_ADMIN = "CityAdmin"

    @classmethod
    def parse(cls, value: str | None) -> "AccountType":
        """Map a client-supplied tag to a type, defaulting to RegularUser."""
        if value:
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return cls.REGULAR_USER


# Role names are the account-type tags
ROLE_NAMES = tuple(t.value for t in AccountType)


class Account(Base):
    __tablename__ = "accounts"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    username: str = Column(String(256), nullable=False)  # type: ignore[assignment]
    normalized_username: str = Column(String(256), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    email: str | None = Column(String(320), nullable=True)  # type: ignore[assignment]
    normalized_email: str | None = Column(String(320), unique=True, nullable=True, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(256), nullable=False)  # type: ignore[assignment]
    full_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    phone_number: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    location: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    profile_image: bytes | None = Column(LargeBinary, nullable=True)  # type: ignore[assignment]
    account_type: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=AccountType.REGULAR_USER.value,
        server_default=AccountType.REGULAR_USER.value,
    )  # RegularUser | Admin | Business | SubManager | CityAdmin

    # Admin
    department_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    # CityAdmin
    city_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    city_position: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    # Business
    business_id: int | None = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("businesses.id", ondelete="SET NULL", use_alter=True, name="fk_accounts_business_id"),
        nullable=True,
    )
    # RegularUser
    member_since: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    is_active: bool | None = Column(Boolean, nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def kind(self) -> AccountType:
        return AccountType.parse(self.account_type)


class AccountRole(Base):
    __tablename__ = "account_roles"
    __table_args__ = (UniqueConstraint("account_id", "role", name="uq_account_role"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    account_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: str = Column(String(20), nullable=False)  # type: ignore[assignment]
