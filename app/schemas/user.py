"""User, profile and auth schemas."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, ConfigDict

from app.models.user import ContactMethod, UserRole


class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    province: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)


class UserCreate(UserBase):
    """Schema for registering a user."""
    password: str = Field(..., min_length=8, max_length=100)


class UserUpdate(BaseModel):
    """Schema for updating a user."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    province: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)


class UserResponse(UserBase):
    """Schema for user response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
    is_verified: bool
    role: UserRole
    created_at: datetime
    last_login: Optional[datetime] = None


class UserList(BaseModel):
    """Schema for paginated user list."""
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
    pages: int


class UserStats(BaseModel):
    total_users: int
    active_users: int


class ProfileUpdate(BaseModel):
    """Schema for updating a profile."""
    profile_picture_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)
    preferred_contact_method: Optional[ContactMethod] = None
    timezone: Optional[str] = Field(None, max_length=50)


class PreferencesUpdate(BaseModel):
    preferred_language: str = Field(..., min_length=2, max_length=10)
    email_notifications: bool


class ProfileResponse(BaseModel):
    """Schema for profile response."""
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    profile_picture_url: Optional[str] = None
    bio: Optional[str] = None
    preferred_contact_method: Optional[ContactMethod] = None
    items_listed: int
    items_sold: int
    items_purchased: int
    total_transactions: int
    last_active_at: Optional[datetime] = None
    preferred_language: str
    timezone: str
    email_notifications: bool


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for authentication token."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenRequest(BaseModel):
    """Schema carrying a verification token."""
    token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8, max_length=100)


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=8, max_length=100)


class MessageOut(BaseModel):
    """Plain acknowledgement with an optional token (debug only)."""
    message: str
    token: Optional[str] = None
