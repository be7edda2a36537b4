"""
Password hashing and token helpers.

Passwords are hashed with werkzeug; bearer tokens are random URL-safe strings
stored in the ``auth_tokens`` table.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from werkzeug.security import check_password_hash, generate_password_hash

from unipivot.server.core.config import settings

TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=settings.security.password_hash_method)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def token_expiry(issued_at: datetime) -> datetime:
    return issued_at + timedelta(hours=settings.security.token_ttl_hours)
