"""
Account and authentication service.

Sign-up, login with opaque bearer tokens, logout and password changes.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.users import AuthToken, User
from unipivot.core.exceptions import AuthenticationError, BusinessRuleError, ConflictError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import UserRole, UserStatus
from unipivot.core.models.io.users import RegisterRequest
from unipivot.core.security import generate_token, hash_password, token_expiry, verify_password
from unipivot.server.core.config import settings

logger = get_logger(__name__)


def _check_password_policy(password: str) -> None:
    minimum = settings.security.password_min_length
    if len(password) < minimum:
        raise BusinessRuleError(f"Password must be at least {minimum} characters long")


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


async def register_user(session: AsyncSession, data: RegisterRequest) -> User:
    """Create a USER account. Emails are unique case-insensitively."""
    _check_password_policy(data.password)
    if await get_user_by_email(session, data.email):
        raise ConflictError("Email is already registered")

    user = User(
        email=data.email.lower(),
        name=data.name,
        password_hash=hash_password(data.password),
        phone=data.phone,
        origin=data.origin,
        birth_year=data.birth_year,
        role=UserRole.user.value,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info(f"Registered user {user.id} ({user.email})")
    return user


async def login(session: AsyncSession, email: str, password: str) -> AuthToken:
    """Verify credentials and issue a bearer token."""
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(user.password_hash, password):
        raise AuthenticationError("Invalid email or password")
    if user.status == UserStatus.banned:
        raise PermissionDeniedError("This account has been suspended")

    now = utc_now()
    token = AuthToken(token=generate_token(), user_id=user.id, created_at=now, expires_at=token_expiry(now))
    session.add(token)
    await session.commit()
    await session.refresh(token)
    logger.info(f"User {user.id} logged in")
    return token


async def logout(session: AsyncSession, token: str) -> None:
    await session.execute(delete(AuthToken).where(AuthToken.token == token))
    await session.commit()


async def resolve_token(session: AsyncSession, token: str) -> Optional[User]:
    """Return the user owning a valid, unexpired token."""
    result = await session.execute(select(AuthToken).where(AuthToken.token == token))
    auth_token = result.scalars().first()
    if auth_token is None or auth_token.expires_at <= utc_now():
        return None
    return await session.get(User, auth_token.user_id)


async def change_password(session: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    """Change the password and revoke every token of the user."""
    if not verify_password(user.password_hash, current_password):
        raise AuthenticationError("Current password is incorrect")
    _check_password_policy(new_password)
    user.password_hash = hash_password(new_password)
    session.add(user)
    await session.execute(delete(AuthToken).where(AuthToken.user_id == user.id))
    await session.commit()
