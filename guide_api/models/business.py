"""
Business model — a commercial entity with an admin approval workflow.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer,
                        LargeBinary, String)

from guide_api.db.base import Base


class BusinessStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DENIED = "Denied"


class Business(Base):
    __tablename__ = "businesses"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    phone_number: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    license_number: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    profile_image: bytes | None = Column(LargeBinary, nullable=True)  # type: ignore[assignment]
    owner_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=BusinessStatus.PENDING.value,
        server_default=BusinessStatus.PENDING.value,
        index=True,
    )  # Pending | Approved | Denied

    # One SubManager per business, one business per SubManager
    sub_manager_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), unique=True, nullable=True
    )

    # Dedicated Business-role login, provisioned after approval
    has_account: bool = Column(Boolean, nullable=False, default=False, server_default="false")  # type: ignore[assignment]
    business_username: str | None = Column(String(256), unique=True, nullable=True)  # type: ignore[assignment]
    business_password_hash: str | None = Column(String(256), nullable=True)  # type: ignore[assignment]
    account_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), unique=True, nullable=True
    )

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
