"""Core configuration, security and identifier helpers."""

from .config import Settings, settings
from .identifiers import UserId
from .logging import configure_logging
from .security import (
    create_access_token,
    decode_token,
    hash_password,
    needs_rehash,
    verify_password,
)

__all__ = [
    "Settings",
    "settings",
    "UserId",
    "configure_logging",
    "create_access_token",
    "decode_token",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
