from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import uuid

from unirecords.core.database import get_db
from unirecords.core.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from unirecords.core.logging_config import set_user_id
from unirecords.core.security import decode_token
from unirecords.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if not credentials:
        raise AuthenticationError("Not authenticated. Please log in")

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise InvalidTokenError()

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError()

    # Validate user_id is a valid UUID format
    try:
        uuid.UUID(user_id)
    except ValueError:
        raise InvalidTokenError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User no longer exists")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    # Picked up by the audit route class and the log formatter
    request.state.user_id = user.id
    set_user_id(user.id)
    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory: the current user must hold one of `roles`.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
        ...
        user: User = Depends(require_roles(UserRole.ADMIN, UserRole.FACULTY))
    """
    allowed = frozenset(roles)

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"This action requires one of the roles: {', '.join(sorted(r.value for r in allowed))}"
            )
        return current_user

    return checker


get_current_admin = require_roles(UserRole.ADMIN)
