"""
Auth endpoints — registration, the two login paths, and self-service
profile management for the bearer of the token.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from guide_api.api.v1.deps import get_current_account, get_db
from guide_api.core.config import settings
from guide_api.models.account import Account
from guide_api.schemas.account import (AuthResponse, BusinessLoginRequest,
                                       ChangePasswordRequest, LoginRequest,
                                       ProfileUpdate, RegisterRequest)
from guide_api.schemas.common import MessageResponse
from guide_api.services import accounts, businesses

# Keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=AuthResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Create an account of the requested type and sign it in."""
    account = await accounts.register(db, body)
    return await accounts.session_for(db, account)


@router.post("/token", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_for_access_token(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Authenticate with username (or email) and password."""
    account = await accounts.authenticate(db, body.identifier, body.password)
    logger.info("Account %d signed in", account.id)
    return await accounts.session_for(db, account)


@router.post("/business-login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def business_login(
    request: Request,
    body: BusinessLoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Sign in with a dedicated business login; the business must be approved."""
    account = await businesses.business_login(db, body.username, body.password)
    logger.info("Business account %d signed in", account.id)
    return await accounts.session_for(db, account)


@router.get("/me")
async def read_current_account(
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Return the role-shaped profile of the authenticated account."""
    return await accounts.load_profile(db, current)


@router.patch("/me")
async def update_current_account(
    body: ProfileUpdate,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Update only the fields present in the body."""
    account = await accounts.update_profile(db, current, body)
    return await accounts.load_profile(db, account)


@router.delete("/me", response_model=MessageResponse)
async def delete_current_account(
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete the caller's own account and everything it owns."""
    await accounts.delete_account(db, current)
    return MessageResponse(success=True, message="Account deleted")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    current: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await accounts.change_password(db, current, body.current_password, body.new_password)
    return MessageResponse(success=True, message="Password changed successfully")
