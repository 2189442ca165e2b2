"""Authentication endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
)
from app.models.user import User
from app.schemas.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    MessageOut,
    RefreshRequest,
    ResetPasswordRequest,
    Token,
    TokenRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from app.services import user_service

router = APIRouter()


def _tokens_for(user_id: int) -> Token:
    return Token(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(user_id),
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a new user."""
    return await user_service.register_user(db, user_data)


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
):
    """Exchange email and password for a token pair."""
    user = await user_service.authenticate(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is suspended",
        )
    return _tokens_for(user.id)


@router.post("/refresh", response_model=Token)
async def refresh(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue a new token pair from a refresh token."""
    user_id = decode_token(request.refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return _tokens_for(user.id)


@router.post("/logout", response_model=MessageOut)
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards them."""
    return MessageOut(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/verify-email", response_model=UserResponse)
async def verify_email(
    request: TokenRequest,
    db: AsyncSession = Depends(get_db),
):
    return await user_service.verify_email(db, request.token)


@router.post("/forgot-password", response_model=MessageOut)
async def forgot_password(
    request: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Start a password reset.

    The answer is the same whether or not the email is registered. The
    token is only echoed back in debug mode.
    """
    token = await user_service.generate_password_reset_token(db, request.email)
    return MessageOut(
        message="If the email is registered, a reset link has been sent",
        token=token if settings.DEBUG else None,
    )


@router.post("/reset-password", response_model=MessageOut)
async def reset_password(
    request: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    await user_service.reset_password(db, request.token, request.new_password)
    return MessageOut(message="Password has been reset")


@router.post("/change-password", response_model=MessageOut)
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(db, current_user, request.old_password, request.new_password)
    return MessageOut(message="Password changed")
