"""Authentication domain services."""

from .avatar import gravatar_url
from .cookies import (
    ACCESS_COOKIE,
    clear_access_cookie,
    set_access_cookie,
)
from .identity_resolution import (
    find_user_by_email,
    normalize_email,
    registration_conflict_exists,
    resolve_login_user,
)

__all__ = [
    "ACCESS_COOKIE",
    "clear_access_cookie",
    "set_access_cookie",
    "gravatar_url",
    "find_user_by_email",
    "normalize_email",
    "registration_conflict_exists",
    "resolve_login_user",
]
