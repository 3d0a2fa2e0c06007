"""
FastAPI dependencies — bearer-token auth, role guards and database session.

Role guards decide from the token's role claims once the subject is known
to still exist; resource ownership is checked later by the services.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from guide_api.core.config import settings
from guide_api.core.exceptions import Forbidden, Unauthorized
from guide_api.core.security import decode_access_token
from guide_api.db.session import async_session_factory
from guide_api.models.account import Account, AccountType
from guide_api.schemas.token import TokenPayload
from guide_api.services import accounts

logger = logging.getLogger(__name__)

# auto_error=False so a missing token surfaces through our own 401 body
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/token", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_token_payload(token: Optional[str] = Depends(oauth2_scheme)) -> TokenPayload:
    """Decode and validate the bearer token from the Authorization header."""
    if not token:
        raise Unauthorized("Not authenticated")

    payload = decode_access_token(token)
    if payload is None:
        raise Unauthorized()

    try:
        claims = TokenPayload.model_validate(payload)
    except ValidationError:
        raise Unauthorized() from None
    if claims.account_id is None:
        raise Unauthorized()
    return claims


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, TokenPayload]]:
    """Build a guard admitting callers holding at least one of *roles*."""
    allowed = frozenset(roles)

    async def _guard(
        claims: TokenPayload = Depends(get_token_payload),
        db: AsyncSession = Depends(get_db),
    ) -> TokenPayload:
        # Roles come from the claims; the subject must still exist
        if await accounts.get_account(db, claims.account_id) is None:  # type: ignore[arg-type]
            raise Unauthorized()
        if allowed.isdisjoint(claims.roles):
            logger.warning(
                "Account %s denied: needs one of %s, has %s",
                claims.sub,
                sorted(allowed),
                claims.roles,
            )
            raise Forbidden(f"Requires role: {' or '.join(sorted(allowed))}")
        return claims

    return _guard


require_admin = require_roles(AccountType.ADMIN.value)


async def get_current_account(
    claims: TokenPayload = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> Account:
    """Load the account named by the token's subject."""
    account = await accounts.get_account(db, claims.account_id)  # type: ignore[arg-type]
    if account is None:
        raise Unauthorized()
    return account
