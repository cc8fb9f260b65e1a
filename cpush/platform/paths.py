"""User-level directories.

Credentials live outside any project so one login serves every checkout.
"""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path

__all__ = [
    "APP_NAME",
    "clear_caches",
    "is_windows",
    "user_config_dir",
]

APP_NAME = "cpush"


def is_windows() -> bool:
    return sys.platform == "win32"


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Get the user-level configuration directory.

    Location: ``$XDG_CONFIG_HOME/cpush`` or ``~/.config/cpush`` on Linux/macOS,
    ``%APPDATA%/cpush`` on Windows.
    """
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def clear_caches() -> None:
    """Forget the cached directory (tests change the environment)."""
    user_config_dir.cache_clear()
