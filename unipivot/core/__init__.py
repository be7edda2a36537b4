"""
Core utilities and configuration for UniPivot.

This package provides core functionality including logging configuration,
database setup, business rules and other shared utilities.
"""

from unipivot.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
