"""
Shared FastAPI dependencies: authentication and grade checks.

Tokens are sent as ``Authorization: Bearer <token>`` and resolved against the
``auth_tokens`` table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import AuthenticationError, PermissionDeniedError
from unipivot.core.models.domain.enums import UserRole, UserStatus
from unipivot.core.rules.grades import has_grade
from unipivot.server.services.auth import resolve_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """Resolve the caller, or ``None`` for anonymous requests and bad tokens."""
    if credentials is None:
        return None
    return await resolve_token(session, credentials.credentials)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the caller; 401 without a valid token, 403 for banned accounts."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    user = await resolve_token(session, credentials.credentials)
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    if user.status == UserStatus.banned:
        raise PermissionDeniedError("This account has been suspended")
    return user


def require_grade(role: UserRole) -> Callable:
    """Build a dependency that requires at least ``role``."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not has_grade(user.role, role):
            raise PermissionDeniedError(f"{role.value} grade or higher is required")
        return user

    return dependency


require_member = require_grade(UserRole.member)
require_staff = require_grade(UserRole.staff)
require_admin = require_grade(UserRole.admin)


@dataclass(frozen=True)
class RequestMeta:
    """Client details stored on change history entries."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def get_request_meta(request: Request) -> RequestMeta:
    forwarded = request.headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    user_agent = request.headers.get("user-agent")
    return RequestMeta(ip_address=ip, user_agent=user_agent[:500] if user_agent else None)
