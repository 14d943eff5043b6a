from fastapi import APIRouter, Depends, Request, status

from unirecords.api.v1.deps import get_auth_service
from unirecords.core.exceptions import AuthenticationError
from unirecords.core.logging_config import set_user_id
from unirecords.core.rate_limiter import auth_rate_limit, password_reset_rate_limit
from unirecords.models.audit_log import AuditAction, AuditResource
from unirecords.models.user import User
from unirecords.modules.auth.dependencies import get_current_user
from unirecords.schemas.auth import (
    ForgotPasswordRequest,
    LoginResponse,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from unirecords.schemas.common import success_response
from unirecords.services.audit_service import record_request_audit
from unirecords.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a password reset link has been sent"


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    service: AuthService = Depends(get_auth_service),
):
    """Register a new user account"""
    user = await service.register(data)
    return success_response("User registered successfully", data=UserResponse.model_validate(user))


@router.post("/login")
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    service: AuthService = Depends(get_auth_service),
):
    """Login user (rate limited: 5/min)"""
    try:
        user, token = await service.login(credentials.email, credentials.password)
    except AuthenticationError:
        await record_request_audit(
            request,
            AuditAction.FAILED_LOGIN,
            AuditResource.USER,
            description=f"Failed login attempt for {credentials.email}",
        )
        raise

    set_user_id(user.id)
    await record_request_audit(
        request,
        AuditAction.LOGIN,
        AuditResource.USER,
        resource_id=user.id,
        description="User logged in",
        user_id=user.id,
    )
    return success_response(
        "Login successful",
        data=LoginResponse(user=UserResponse.model_validate(user), token=token),
    )


@router.post("/logout")
async def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
):
    """
    Logout user.

    JWT tokens are stateless: this records the event and the client drops
    the token.
    """
    await record_request_audit(
        request,
        AuditAction.LOGOUT,
        AuditResource.USER,
        resource_id=current_user.id,
        description="User logged out",
    )
    return success_response("Successfully logged out")


@router.get("/me")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return success_response("Current user retrieved", data=UserResponse.model_validate(current_user))


@router.post("/forgot-password")
@password_reset_rate_limit()
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Email a password reset link (rate limited: 3/min)"""
    await service.forgot_password(data.email)
    return success_response(FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
async def reset_password(
    request: Request,
    data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Set a new password using a reset token"""
    user = await service.reset_password(data.token, data.password)
    await record_request_audit(
        request,
        AuditAction.UPDATE,
        AuditResource.USER,
        resource_id=user.id,
        description="Password reset",
        user_id=user.id,
    )
    return success_response("Password has been reset successfully")
