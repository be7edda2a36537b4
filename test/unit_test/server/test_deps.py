"""Unit tests for the shared authentication dependencies."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from starlette.datastructures import Headers

from unipivot.core.exceptions import AuthenticationError, PermissionDeniedError
from unipivot.core.models.domain.enums import UserRole, UserStatus
from unipivot.server.deps import (
    get_current_user,
    get_optional_user,
    get_request_meta,
    require_admin,
    require_grade,
)


def _credentials(token: str = "token") -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _user(role: UserRole = UserRole.user, status: UserStatus = UserStatus.active) -> Mock:
    return Mock(role=role.value, status=status.value)


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(AuthenticationError, match="Not authenticated"):
            await get_current_user(credentials=None, session=AsyncMock())

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        with patch("unipivot.server.deps.resolve_token", new_callable=AsyncMock, return_value=None):
            with pytest.raises(AuthenticationError, match="Invalid or expired token"):
                await get_current_user(credentials=_credentials(), session=AsyncMock())

    @pytest.mark.asyncio
    async def test_banned_user(self):
        banned = _user(status=UserStatus.banned)
        with patch("unipivot.server.deps.resolve_token", new_callable=AsyncMock, return_value=banned):
            with pytest.raises(PermissionDeniedError):
                await get_current_user(credentials=_credentials(), session=AsyncMock())

    @pytest.mark.asyncio
    async def test_active_user(self):
        user = _user()
        with patch("unipivot.server.deps.resolve_token", new_callable=AsyncMock, return_value=user) as mock_resolve:
            assert await get_current_user(credentials=_credentials("abc"), session=AsyncMock()) is user
        assert mock_resolve.call_args[0][1] == "abc"


class TestGetOptionalUser:
    @pytest.mark.asyncio
    async def test_anonymous(self):
        assert await get_optional_user(credentials=None, session=AsyncMock()) is None

    @pytest.mark.asyncio
    async def test_bad_token_is_anonymous(self):
        with patch("unipivot.server.deps.resolve_token", new_callable=AsyncMock, return_value=None):
            assert await get_optional_user(credentials=_credentials(), session=AsyncMock()) is None


class TestRequireGrade:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [UserRole.admin, UserRole.super_admin])
    async def test_admin_grade_allowed(self, role):
        user = _user(role)
        assert await require_admin(user=user) is user

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [UserRole.user, UserRole.member, UserRole.staff])
    async def test_lower_grade_refused(self, role):
        with pytest.raises(PermissionDeniedError, match="ADMIN grade or higher is required"):
            await require_admin(user=_user(role))

    @pytest.mark.asyncio
    async def test_custom_grade(self):
        require_staff_or_above = require_grade(UserRole.staff)
        staff = _user(UserRole.staff)
        assert await require_staff_or_above(user=staff) is staff


class TestRequestMeta:
    def _request(self, headers: dict, host: str = "10.0.0.5") -> Mock:
        request = Mock()
        request.headers = Headers(headers)
        request.client = Mock(host=host)
        return request

    def test_client_address(self):
        meta = get_request_meta(self._request({"user-agent": "pytest"}))
        assert meta.ip_address == "10.0.0.5"
        assert meta.user_agent == "pytest"

    def test_forwarded_for_wins(self):
        meta = get_request_meta(self._request({"x-forwarded-for": "203.0.113.7, 10.0.0.1"}))
        assert meta.ip_address == "203.0.113.7"
        assert meta.user_agent is None

    def test_long_user_agent_is_truncated(self):
        meta = get_request_meta(self._request({"user-agent": "x" * 600}))
        assert len(meta.user_agent) == 500

    def test_without_client(self):
        request = self._request({})
        request.client = None
        assert get_request_meta(request).ip_address is None
