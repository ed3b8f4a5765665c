"""FastAPI dependencies that turn a request into a verified caller.

Usage in any protected router:
    from src.rl_gateway.auth.dependencies import get_current_user, require_admin

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

import secrets

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rl_common.database import get_db_session
from src.rl_common.errors import (
    AccountDisabledError,
    AdminRequiredError,
    InvalidCredentialsError,
    InvalidInternalTokenError,
)
from src.rl_gateway.auth.jwt_handler import decode_access_token
from src.rl_gateway.user.db_models import UserModel

# Tokens are issued by the storefront; tokenUrl only feeds Swagger's "Authorize" button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired, or if the
    user no longer exists. Raises AccountDisabledError for disabled users.
    """
    try:
        payload = decode_access_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == payload["sub"]))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Only admins may decide withdrawals or trigger a backfill."""
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user


async def require_internal_caller(
    x_internal_token: str | None = Header(default=None),
) -> None:
    """Guard for server-to-server notifications (order paid)."""
    if x_internal_token is None or not secrets.compare_digest(
        x_internal_token, settings.INTERNAL_API_TOKEN
    ):
        raise InvalidInternalTokenError()
