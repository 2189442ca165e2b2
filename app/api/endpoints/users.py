"""User and profile endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import get_current_admin, get_current_user
from app.models.user import User
from app.schemas.user import (
    PreferencesUpdate,
    ProfileResponse,
    ProfileUpdate,
    UserList,
    UserResponse,
    UserStats,
    UserUpdate,
)
from app.services import user_service

router = APIRouter()


@router.get("/", response_model=UserList)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    is_active: Optional[bool] = None,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """List users (admin only), optionally only active or suspended ones."""
    users, total = await user_service.list_users(db, page, page_size, is_active)
    return UserList(
        items=users,
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size,
    )


@router.get("/stats", response_model=UserStats)
async def user_stats(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return UserStats(
        total_users=await user_service.count_users(db),
        active_users=await user_service.count_users(db, is_active=True),
    )


@router.get("/search", response_model=list[UserResponse])
async def search_users(
    name: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.search_by_name(db, name)


@router.get("/search/location", response_model=list[UserResponse])
async def search_users_by_location(
    province: str = Query(..., min_length=1),
    district: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    return await user_service.search_by_location(db, province, district)


@router.put("/me", response_model=UserResponse)
async def update_me(
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(db, current_user, user_data)


@router.get("/me/profile", response_model=ProfileResponse)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_profile(db, current_user.id)


@router.put("/me/profile", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_profile(db, current_user.id, profile_data)


@router.put("/me/profile/preferences", response_model=ProfileResponse)
async def update_my_preferences(
    preferences: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_preferences(db, current_user.id, preferences)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.get("/{user_id}/profile", response_model=ProfileResponse)
async def get_user_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_profile(db, user_id)


@router.put("/{user_id}/suspend", response_model=UserResponse)
async def suspend_user(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.set_active(db, user_id, False)


@router.put("/{user_id}/unsuspend", response_model=UserResponse)
async def unsuspend_user(
    user_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.set_active(db, user_id, True)
