"""Authentication endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_active_user, get_current_user, get_db
from rentflow.config import settings
from rentflow.core.exceptions import AuthenticationError, BadRequestError, ValidationError
from rentflow.core.security import (
    PASSWORD_RESET_TOKEN,
    create_password_reset_token,
    create_tokens,
    get_password_hash,
    password_fingerprint,
    verify_password,
    verify_token,
)
from rentflow.database import utc_now
from rentflow.models.user import User
from rentflow.schemas.user import (
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetResponse,
    PasswordUpdate,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(user: User) -> TokenResponse:
    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens, user=UserResponse.model_validate(user))


def _reset_token_user_id(payload: dict) -> UUID:
    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise BadRequestError("Invalid or expired token")


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Register a new customer account."""
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise ValidationError("Email already registered")

    # Self-registration always creates a customer; staff and admins are promoted by an admin
    user = User(
        name=user_data.name,
        email=user_data.email,
        phone=user_data.phone,
        address=user_data.address,
        password_hash=get_password_hash(user_data.password),
        role="customer",
    )
    db.add(user)
    await db.flush()

    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utc_now()
    await db.flush()

    return _token_response(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """Logout. Access tokens are stateless, so the client discards its token."""
    logger.info("User %s logged out", current_user.id)


@router.put("/update-password", response_model=TokenResponse)
async def update_password(
    request: PasswordUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Change your password after confirming the current one. Returns a fresh token."""
    if not verify_password(request.current_password, current_user.password_hash):
        raise AuthenticationError("Current password is incorrect")

    current_user.password_hash = get_password_hash(request.new_password)
    await db.flush()

    logger.info("Password updated for user %s", current_user.id)
    return _token_response(current_user)


@router.post(
    "/forgot-password",
    response_model=PasswordResetResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def forgot_password(
    request: PasswordResetRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PasswordResetResponse:
    """Issue a password reset token.

    The reply is the same whether or not the email belongs to an account.
    There is no mail channel, so in debug mode the token is returned directly.
    """
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    reset_token = None
    if user and user.is_active:
        reset_token = create_password_reset_token(str(user.id), user.password_hash)
        logger.info("Password reset token issued for user %s", user.id)

    return PasswordResetResponse(
        message="If the email exists, a password reset token has been issued",
        reset_token=reset_token if settings.debug else None,
    )


@router.put("/reset-password/{token}", response_model=TokenResponse)
async def reset_password(
    token: str,
    request: PasswordResetConfirm,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Set a new password with a reset token. Each token works once."""
    try:
        payload = verify_token(token, token_type=PASSWORD_RESET_TOKEN)
    except AuthenticationError:
        raise BadRequestError("Invalid or expired token")

    result = await db.execute(select(User).where(User.id == _reset_token_user_id(payload)))
    user = result.scalar_one_or_none()
    if (
        user is None
        or not user.is_active
        or payload.get("pwd") != password_fingerprint(user.password_hash)
    ):
        raise BadRequestError("Invalid or expired token")

    user.password_hash = get_password_hash(request.password)
    await db.flush()

    logger.info("Password reset for user %s", user.id)
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Get current authenticated user profile."""
    return current_user
