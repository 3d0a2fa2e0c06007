"""Pydantic schemas for JWT tokens."""

from __future__ import annotations

from pydantic import BaseModel


class TokenPayload(BaseModel):
    sub: str | None = None
    name: str | None = None
    email: str | None = None
    roles: list[str] = []
    type: str | None = None

    @property
    def account_id(self) -> int | None:
        try:
            return int(self.sub) if self.sub is not None else None
        except ValueError:
            return None
