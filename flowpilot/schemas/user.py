"""
User Schemas - Pydantic models for request/response validation
"""

from pydantic import EmailStr, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from flowpilot.schemas.base import CamelModel, clean_short_text

def _validate_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError('Name cannot be empty')
    if len(v.strip()) < 2:
        raise ValueError('Name must be at least 2 characters')
    if len(v.strip()) > 255:
        raise ValueError('Name cannot exceed 255 characters (database constraint)')
    return v.strip()

class UserBase(CamelModel):
    """Base schema with common user fields"""
    email: EmailStr
    name: str
    full_name: Optional[str] = None

class UserCreate(UserBase):
    """Schema for user registration - requires password"""
    password: str  # Plaintext password (hashed before storage)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters long')
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        return clean_short_text(v)

class UserLogin(CamelModel):
    """Schema for login request"""
    email: EmailStr
    password: str

class UserResponse(UserBase):
    """Schema for user data in responses - excludes password and token"""
    id: UUID
    created_at: datetime
    last_login: Optional[datetime] = None  # None if never logged in

class UserUpdate(CamelModel):
    """Schema for updating the current user's profile - all fields optional"""
    name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            return _validate_name(v)
        return v

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        return clean_short_text(v)

class TokenResponse(CamelModel):
    """Schema for authentication token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse

class RefreshResponse(CamelModel):
    """Schema for a refreshed token pair"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
