"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup initializes the database and seeds the badge
definitions, and that a failing database does not prevent the server from
starting.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from unipivot.server.main import lifespan

pytestmark = pytest.mark.asyncio


@pytest.fixture
def mock_session():
    """Session yielded by the patched session factory."""
    session = AsyncMock()
    session_ctx = MagicMock()
    session_ctx.__aenter__ = AsyncMock(return_value=session)
    session_ctx.__aexit__ = AsyncMock(return_value=None)
    with patch("unipivot.server.main.async_session_maker", return_value=session_ctx):
        yield session


class TestLifespanStartup:
    """Test application startup lifespan events."""

    async def test_startup_initializes_database_and_seeds_badges(self, mock_session):
        with (
            patch("unipivot.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("unipivot.server.main.seed_badges", new_callable=AsyncMock) as mock_seed,
        ):
            async with lifespan(FastAPI()):
                mock_init_db.assert_awaited_once()
                mock_seed.assert_awaited_once_with(mock_session)
                mock_session.commit.assert_awaited_once()

    async def test_startup_logs_success(self, mock_session):
        with (
            patch("unipivot.server.main.init_db", new_callable=AsyncMock),
            patch("unipivot.server.main.seed_badges", new_callable=AsyncMock),
            patch("unipivot.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

        messages = [call[0][0] for call in mock_logger.info.call_args_list]
        assert "Starting up UniPivot Server..." in messages
        assert "Database initialized successfully" in messages
        assert "Shutting down UniPivot Server..." in messages
        mock_logger.error.assert_not_called()


class TestLifespanFailures:
    """Test that startup failures are logged, not raised."""

    async def test_init_db_failure_is_logged(self, mock_session):
        with (
            patch("unipivot.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("unipivot.server.main.seed_badges", new_callable=AsyncMock) as mock_seed,
            patch("unipivot.server.main.logger") as mock_logger,
        ):
            mock_init_db.side_effect = ConnectionError("connection refused")

            async with lifespan(FastAPI()):
                mock_seed.assert_not_awaited()

        mock_logger.error.assert_called_once()
        assert "Database initialization failed" in mock_logger.error.call_args[0][0]
        assert mock_logger.error.call_args[1]["exc_info"] is True

    async def test_seed_failure_is_logged(self, mock_session):
        with (
            patch("unipivot.server.main.init_db", new_callable=AsyncMock),
            patch("unipivot.server.main.seed_badges", new_callable=AsyncMock) as mock_seed,
            patch("unipivot.server.main.logger") as mock_logger,
        ):
            mock_seed.side_effect = RuntimeError("badges table missing")

            async with lifespan(FastAPI()):
                pass

        mock_session.commit.assert_not_awaited()
        assert "badges table missing" in mock_logger.error.call_args[0][0]

    async def test_shutdown_runs_after_failure(self, mock_session):
        with (
            patch("unipivot.server.main.init_db", new_callable=AsyncMock, side_effect=OSError("disk")),
            patch("unipivot.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

        messages = [call[0][0] for call in mock_logger.info.call_args_list]
        assert messages[-1] == "Shutting down UniPivot Server..."
