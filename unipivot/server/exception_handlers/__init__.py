"""
Exception handlers for the UniPivot server.

This package contains custom exception handlers for different error types
and a setup function to register them with the FastAPI application.
"""

from .domain_handler import domain_exception_handler
from .global_handler import global_exception_handler, setup_exception_handlers

__all__ = ["domain_exception_handler", "global_exception_handler", "setup_exception_handlers"]
