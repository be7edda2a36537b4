"""
User account entity models.

This module contains the member account table and the opaque bearer tokens
issued at login.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from unipivot.core.models.domain.enums import UserRole, UserStatus

from ..base import Base, utc_now


class User(Base, table=True):
    """Member account.

    ``points`` is the current point balance; every change to it is mirrored by
    a ``PointHistory`` row so that the ledger always sums to the balance.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    name: str = Field(max_length=100)
    password_hash: str = Field(max_length=255)

    # Profile
    phone: Optional[str] = Field(default=None, max_length=32)
    origin: Optional[str] = Field(default=None, max_length=100, description="Country or region of origin")
    birth_year: Optional[int] = Field(default=None)

    # Access
    role: str = Field(default=UserRole.user.value, max_length=32, index=True)
    status: str = Field(default=UserStatus.active.value, max_length=16)

    points: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class AuthToken(Base, table=True):
    """Bearer token issued at login.

    Table: auth_tokens
    """

    __tablename__ = "auth_tokens"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(max_length=128, unique=True, index=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    expires_at: datetime = Field(sa_type=DateTime)
