"""Gravatar URLs for newly registered users."""

from __future__ import annotations

import hashlib
from urllib.parse import urlencode

GRAVATAR_BASE_URL = "https://www.gravatar.com/avatar"
GRAVATAR_PARAMS = {"s": "200", "r": "pg", "d": "mm"}


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"{GRAVATAR_BASE_URL}/{digest}?{urlencode(GRAVATAR_PARAMS)}"
