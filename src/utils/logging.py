"""Logging helpers shared across loaders and calculations."""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a module logger. Handlers are left to the calling application."""
    return logging.getLogger(name)
