#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and data directory resolution for the diary store.

The store keeps two files in a per-user application data directory:

    <app-data>/
    ├── encryption.key   # 32 raw key bytes
    ├── diary.db         # SQLite database
    └── logs/            # Rotating log files

Resolution order for the data directory:
    1. DIARY_DATA_DIR environment variable
    2. Platform standard location
        - Windows: %APPDATA%\\secondbrian\\diary\\data
        - macOS:   ~/Library/Application Support/com.secondbrian.diary
        - Other:   $XDG_DATA_HOME/diary (default ~/.local/share/diary)

Nothing is created at import time; callers use ensure_dir() when they
actually need the directory.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
import sys
from pathlib import Path
from typing import Optional


# ----- Application identity -----
APP_QUALIFIER = "com"
APP_ORGANIZATION = "secondbrian"
APP_NAME = "diary"

# ----- File names -----
KEY_FILENAME = "encryption.key"
DB_FILENAME = "diary.db"
LOG_DIRNAME = "logs"

# ----- Environment overrides -----
DATA_DIR_ENV = "DIARY_DATA_DIR"
LOG_DIR_ENV = "DIARY_LOG_DIR"


def _platform_data_dir() -> Path:
    """
    Return the platform-standard per-user data directory for the app.

    Returns:
        Path object (not created)

    Raises:
        RuntimeError: If the home directory cannot be determined
    """
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / APP_ORGANIZATION / APP_NAME / "data"

    if sys.platform == "darwin":
        return (
            Path.home()
            / "Library"
            / "Application Support"
            / f"{APP_QUALIFIER}.{APP_ORGANIZATION}.{APP_NAME}"
        )

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    # XDG spec: relative paths are invalid and must be ignored
    if xdg_data_home and Path(xdg_data_home).is_absolute():
        return Path(xdg_data_home) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def get_data_dir(override: Optional[str | Path] = None) -> Path:
    """
    Resolve the application data directory.

    Args:
        override: Explicit directory (takes precedence over everything)

    Returns:
        Absolute Path for the data directory (not created)
    """
    if override:
        return Path(override).expanduser().resolve()

    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    return _platform_data_dir()


def get_log_dir(
    data_dir: Optional[Path] = None, override: Optional[str | Path] = None
) -> Path:
    """
    Resolve the log directory.

    Args:
        data_dir: Data directory the logs should live under by default
        override: Explicit log directory

    Returns:
        Absolute Path for the log directory (not created)
    """
    if override:
        return Path(override).expanduser().resolve()

    env_dir = os.environ.get(LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    return (data_dir or get_data_dir()) / LOG_DIRNAME


def ensure_dir(path: str | Path) -> Path:
    """
    Ensure directory exists, create if not.

    Args:
        path: Path to directory

    Returns:
        Path object for the directory

    Raises:
        OSError: If the directory cannot be created
    """
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def key_path(data_dir: Path) -> Path:
    """Path of the key file inside a data directory."""
    return data_dir / KEY_FILENAME


def db_path(data_dir: Path) -> Path:
    """Path of the database file inside a data directory."""
    return data_dir / DB_FILENAME
