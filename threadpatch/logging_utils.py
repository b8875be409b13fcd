"""Logging configuration helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(level: str = "INFO", debug_modules: Iterable[str] = ()) -> None:
    """Configure root logging; ``debug_modules`` get DEBUG regardless of ``level``."""
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT)
    for name in debug_modules:
        logging.getLogger(name).setLevel(logging.DEBUG)
