"""
Monitoring and Tracing Configuration Module.

This module provides integration with Logfire for tracing of the UniPivot
server, including:
- API endpoint tracing
- Database operation monitoring
- Request metrics

Instrumentation is opt-in through ``MONITORING__LOGFIRE_ENABLED``.
"""

from typing import Optional

import logfire
from fastapi import FastAPI

from unipivot.server.core.config import settings
from unipivot.server.core.constant import VERSION

from .logging_config import get_logger

logger = get_logger(__name__)

_initialized = False


def is_logfire_enabled() -> bool:
    """Return True when Logfire was configured for this process."""
    return _initialized


def initialize_logfire(app: Optional[FastAPI] = None) -> None:
    """
    Initialize Logfire for monitoring and tracing.

    Sets up Logfire with automatic instrumentation for:
    - SQLAlchemy database operations
    - FastAPI endpoints

    Args:
        app: FastAPI application instance for FastAPI instrumentation (optional).
    """
    global _initialized

    config = settings.monitoring
    if not config.logfire_enabled:
        logger.info("Logfire monitoring is disabled. Set MONITORING__LOGFIRE_ENABLED=true to enable.")
        return

    if not config.logfire_token:
        logger.warning(
            "Logfire is enabled but MONITORING__LOGFIRE_TOKEN is not set. "
            "Monitoring will not work until a token is provided."
        )
        return

    try:
        logfire.configure(
            token=config.logfire_token,
            service_name=config.service_name,
            service_version=VERSION,
            environment=config.environment,
        )

        if config.trace_sqlalchemy:
            try:
                logfire.instrument_sqlalchemy()
                logger.info("Logfire: SQLAlchemy instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument SQLAlchemy: {e}")

        if config.trace_fastapi and app is not None:
            try:
                logfire.instrument_fastapi(app=app)
                logger.info("Logfire: FastAPI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument FastAPI: {e}")

        _initialized = True
        logger.info(
            f"Logfire monitoring initialized: environment={config.environment}, service={config.service_name}"
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not _initialized:
        return
    try:
        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if not _initialized:
        return
    try:
        logfire.error(f"{error_type}: {error_message}", **(context or {}))
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
