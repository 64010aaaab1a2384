"""
Core Package - Configuration, security, and dependencies

IMPORTANT: Only import config and security here.
Dependencies must be imported directly to avoid circular imports.
"""

from flowpilot.core.config import settings, get_settings
from flowpilot.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)

__all__ = [
    "settings",
    "get_settings",
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
]
