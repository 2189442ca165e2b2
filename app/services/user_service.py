"""User accounts, credentials and profiles."""
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserProfile
from app.schemas.user import PreferencesUpdate, ProfileUpdate, UserCreate, UserUpdate

logger = structlog.get_logger(__name__)


def _new_token() -> str:
    return uuid.uuid4().hex


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    """
    Create an account with a default profile.

    The account is active right away but stays unverified until the
    verification token is redeemed.
    """
    if await get_user_by_email(db, data.email):
        raise ConflictError("Email already in use")

    result = await db.execute(select(User).where(User.username == data.username))
    if result.scalar_one_or_none():
        raise ConflictError("Username already in use")

    user = User(
        **data.model_dump(exclude={"password"}),
        hashed_password=get_password_hash(data.password),
        verification_token=_new_token(),
        is_active=True,
        is_verified=False,
    )
    db.add(user)
    await db.flush()

    db.add(UserProfile(user_id=user.id))
    await db.commit()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, username=user.username)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials and stamp the login time."""
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.info("login_failed", email=email)
        return None

    user.last_login = datetime.utcnow()
    await db.commit()
    logger.info("login_succeeded", user_id=user.id)
    return user


async def verify_email(db: AsyncSession, token: str) -> User:
    result = await db.execute(select(User).where(User.verification_token == token))
    user = result.scalar_one_or_none()
    if not user:
        raise InvalidStateError("Invalid or expired verification token")

    user.is_verified = True
    user.verification_token = None
    await db.commit()
    return user


async def generate_password_reset_token(db: AsyncSession, email: str) -> Optional[str]:
    """Store a fresh reset token on the account, if the email is known."""
    user = await get_user_by_email(db, email)
    if not user:
        return None

    token = _new_token()
    user.verification_token = token
    await db.commit()
    logger.info("password_reset_requested", user_id=user.id)
    return token


async def reset_password(db: AsyncSession, token: str, new_password: str) -> None:
    result = await db.execute(select(User).where(User.verification_token == token))
    user = result.scalar_one_or_none()
    if not user:
        raise InvalidStateError("Invalid or expired reset token")

    user.hashed_password = get_password_hash(new_password)
    user.verification_token = None
    await db.commit()
    logger.info("password_reset", user_id=user.id)


async def change_password(
    db: AsyncSession, user: User, old_password: str, new_password: str
) -> None:
    if not verify_password(old_password, user.hashed_password):
        raise InvalidStateError("Current password is incorrect")

    user.hashed_password = get_password_hash(new_password)
    await db.commit()
    logger.info("password_changed", user_id=user.id)


async def update_user(db: AsyncSession, user: User, data: UserUpdate) -> User:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    return user


async def list_users(
    db: AsyncSession,
    page: int,
    page_size: int,
    is_active: Optional[bool] = None,
) -> Tuple[List[User], int]:
    query = select(User)
    if is_active is not None:
        query = query.where(User.is_active == is_active)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    query = query.order_by(User.created_at.desc(), User.id.desc())
    query = query.offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def search_by_name(db: AsyncSession, name: str) -> List[User]:
    pattern = f"%{name}%"
    result = await db.execute(
        select(User).where(
            or_(
                User.username.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        ).order_by(User.username)
    )
    return list(result.scalars().all())


async def search_by_location(
    db: AsyncSession, province: str, district: Optional[str] = None
) -> List[User]:
    query = select(User).where(User.province == province)
    if district is not None:
        query = query.where(User.district == district)
    result = await db.execute(query.order_by(User.username))
    return list(result.scalars().all())


async def set_active(db: AsyncSession, user_id: int, active: bool) -> User:
    """Suspend (``active=False``) or reinstate a user."""
    user = await get_user(db, user_id)
    user.is_active = active
    await db.commit()
    await db.refresh(user)
    logger.info("user_suspended" if not active else "user_unsuspended", user_id=user_id)
    return user


async def count_users(db: AsyncSession, is_active: Optional[bool] = None) -> int:
    query = select(func.count(User.id))
    if is_active is not None:
        query = query.where(User.is_active == is_active)
    return (await db.execute(query)).scalar()


# Profiles

async def get_profile(db: AsyncSession, user_id: int) -> UserProfile:
    """Return the user's profile, creating the default one if it is missing."""
    await get_user(db, user_id)
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        profile = UserProfile(user_id=user_id)
        db.add(profile)
        await db.flush()
        await db.refresh(profile)
    return profile


async def update_profile(db: AsyncSession, user_id: int, data: ProfileUpdate) -> UserProfile:
    profile = await get_profile(db, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    profile.last_active_at = datetime.utcnow()
    await db.commit()
    await db.refresh(profile)
    return profile


async def update_preferences(
    db: AsyncSession, user_id: int, data: PreferencesUpdate
) -> UserProfile:
    profile = await get_profile(db, user_id)
    profile.preferred_language = data.preferred_language
    profile.email_notifications = data.email_notifications
    profile.last_active_at = datetime.utcnow()
    await db.commit()
    await db.refresh(profile)
    return profile


async def increment_profile_counters(db: AsyncSession, user_id: int, **increments: int) -> None:
    """Bump activity counters, e.g. ``items_sold=1``. Does not commit."""
    profile = await get_profile(db, user_id)
    for field, amount in increments.items():
        setattr(profile, field, (getattr(profile, field) or 0) + amount)
