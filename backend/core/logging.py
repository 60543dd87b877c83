"""Logging setup shared by the app factory."""

from __future__ import annotations

import logging

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved_level = (level or settings.log_level).upper()
    # basicConfig is a no-op once the root logger has handlers.
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved_level)
