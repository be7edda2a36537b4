"""
User and authentication I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from unipivot.core.models.domain.enums import UserRole, UserStatus


class RegisterRequest(BaseModel):
    """Schema for signing up."""

    email: EmailStr
    password: str = Field(min_length=1, description="Plain password, length is checked against settings")
    name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    origin: Optional[str] = Field(default=None, max_length=100)
    birth_year: Optional[int] = Field(default=None, ge=1900, le=2100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class UserRead(BaseModel):
    """Schema for reading a user."""

    id: int
    email: str
    name: str
    phone: Optional[str] = None
    origin: Optional[str] = None
    birth_year: Optional[int] = None
    role: UserRole
    status: UserStatus
    points: int
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    origin: Optional[str] = Field(default=None, max_length=100)
    birth_year: Optional[int] = Field(default=None, ge=1900, le=2100)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str


class RoleChange(BaseModel):
    role: UserRole


class StatusChange(BaseModel):
    status: UserStatus
