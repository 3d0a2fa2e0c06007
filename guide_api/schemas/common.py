"""Shared schema base and field helpers."""

from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON uses camelCase; snake_case is still accepted on input."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


def decode_image(v: object) -> object:
    """Accept a base64 string (optionally a data URL) for image fields."""
    if v is None or isinstance(v, bytes):
        return v
    if isinstance(v, str):
        if not v:
            return None
        if v.startswith("data:") and "," in v:
            v = v.split(",", 1)[1]
        try:
            return base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Image must be base64-encoded") from None
    return v


def encode_image(v: bytes | None) -> str | None:
    return base64.b64encode(v).decode("ascii") if v else None


class MessageResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    db: bool
    version: str
