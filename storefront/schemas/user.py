# ==============================================================================
# USER SCHEMAS - Authentication & Profile
# ==============================================================================
# Request/Response schemas for user accounts
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from storefront.schemas.base import BaseSchema, Pagination, TimestampSchema


class ShippingAddress(BaseSchema):
    """Address saved on the user profile."""

    fullname: Optional[str] = Field(None, max_length=100)
    mobile: Optional[str] = Field(None, max_length=20)
    flat: Optional[str] = Field(None, max_length=200)
    area: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=20)


class UserCreate(BaseSchema):
    """Schema for user registration."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=30,
        description="Unique display name",
    )
    email: EmailStr = Field(
        ...,
        description="User email address",
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Account password",
    )

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserLogin(BaseSchema):
    """Schema for user login."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(BaseSchema):
    """Schema for profile updates."""

    username: Optional[str] = Field(None, min_length=3, max_length=30)
    email: Optional[EmailStr] = None
    shipping_address: Optional[ShippingAddress] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class PasswordChange(BaseSchema):
    """Schema for password change."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class UserStatusUpdate(BaseSchema):
    """Admin toggle for account activation."""

    is_active: bool


class UserResponse(TimestampSchema):
    """Public user representation; the password hash is never included."""

    id: str = Field(..., description="User unique identifier")
    username: str
    email: str
    role: str = "user"
    is_active: bool = True
    shipping_address: Optional[ShippingAddress] = None
    last_login: Optional[datetime] = None


class AuthResponse(BaseSchema):
    """Token issued on signup and login."""

    user: UserResponse
    token: str


class UserListResponse(BaseSchema):
    users: List[UserResponse]
    pagination: Pagination
