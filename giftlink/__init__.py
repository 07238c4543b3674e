"""Core utilities for the GiftLink accounts service."""

from __future__ import annotations

from typing import Any

from .config import Settings, load_settings
from .database import DatabaseProvider, UserStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the accounts API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "DatabaseProvider",
    "Settings",
    "UserStore",
    "create_app",
    "load_settings",
]
