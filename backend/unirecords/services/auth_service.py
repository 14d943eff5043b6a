"""
Auth Service Layer
Registration, login and the password-reset flow
"""

from datetime import datetime, timedelta
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.config import settings
from unirecords.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateRecordError,
    NotificationError,
    ValidationError,
)
from unirecords.core.logging_config import logger
from unirecords.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from unirecords.models.user import User, UserRole
from unirecords.schemas.auth import UserRegister
from unirecords.services.email_service import EmailService, NotificationEvent

# Roles that can only be granted by an administrator
PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.GRIEVANCE_COMMITTEE})


def token_for(user: User) -> str:
    return create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
    })


class AuthService:
    """Service for account and credential operations"""

    def __init__(self, db: AsyncSession, notifier: EmailService):
        self.db = db
        self.notifier = notifier

    async def get_user_by_email(self, email: str):
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def register(self, data: UserRegister) -> User:
        if data.role in PRIVILEGED_ROLES:
            raise AuthorizationError(f"The '{data.role.value}' role cannot be self-assigned")

        if await self.get_user_by_email(data.email):
            raise DuplicateRecordError("User", "email", data.email)

        user = User(
            email=data.email.lower(),
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            contact_number=data.contact_number,
            is_active=True,
        )
        self.db.add(user)
        await self.db.commit()
        logger.log_auth_event("register", True, user_email=user.email)
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.get_user_by_email(email)

        if not user or not verify_password(password, user.hashed_password):
            logger.log_auth_event("login", False, user_email=email, reason="invalid credentials")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            logger.log_auth_event("login", False, user_email=email, reason="account inactive")
            raise AuthenticationError("Your account has been deactivated. Please contact an administrator")

        user.last_login = datetime.utcnow()
        await self.db.commit()

        logger.log_auth_event("login", True, user_email=user.email)
        return user, token_for(user)

    async def forgot_password(self, email: str) -> None:
        """
        Issue a single-use reset token and email it.

        Unknown addresses return silently. If the email cannot be delivered
        the token is withdrawn and NotificationError is raised.
        """
        user = await self.get_user_by_email(email)
        if not user:
            logger.log_auth_event("forgot_password", False, user_email=email, reason="unknown email")
            return

        token, token_hash = generate_reset_token()
        user.reset_token_hash = token_hash
        user.reset_token_expires = datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        await self.db.commit()

        sent = await self.notifier.notify(
            NotificationEvent.PASSWORD_RESET,
            user.email,
            {
                "name": user.first_name,
                "reset_url": f"{settings.FRONTEND_URL}/reset-password/{token}",
                "expires_minutes": settings.PASSWORD_RESET_EXPIRE_MINUTES,
            },
        )
        if not sent:
            user.reset_token_hash = None
            user.reset_token_expires = None
            await self.db.commit()
            raise NotificationError()

        logger.log_auth_event("forgot_password", True, user_email=user.email)

    async def reset_password(self, token: str, new_password: str) -> User:
        result = await self.db.execute(
            select(User).where(
                User.reset_token_hash == hash_reset_token(token),
                User.reset_token_expires > datetime.utcnow(),
            )
        )
        user = result.scalar_one_or_none()
        if not user:
            raise ValidationError("Password reset token is invalid or has expired", field="token")

        user.hashed_password = get_password_hash(new_password)
        user.reset_token_hash = None
        user.reset_token_expires = None
        await self.db.commit()

        logger.log_auth_event("reset_password", True, user_email=user.email)
        return user
