"""
Middleware modules for the UniPivot server.

This package contains custom middleware for request/response logging and
performance tracking.
"""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
