"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import logging
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "Student Planner"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "tasks.db"
CONFIG_PATH = DATA_DIR / "config.json"
LOG_PATH = LOG_DIR / "planner.log"


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = os.environ.get("PLANNER_API_URL", "http://localhost:3000")
    tasks_path: str = "/api/tasks"
    describe_path: str = "/api/ai/generate-description"
    timeout_sec: float = 10.0


API = ApiSettings()


@dataclass(frozen=True)
class InferenceSettings:
    # None keeps the randomized 1..7 day pick for titles without a date
    fallback_due_days: Optional[int] = None
    min_random_days: int = 1
    max_random_days: int = 7
    min_estimate_minutes: int = 30
    max_estimate_minutes: int = 150
    max_tags: int = 3


INFERENCE = InferenceSettings()


@dataclass(frozen=True)
class LoggingSettings:
    level: int = logging.INFO
    max_bytes: int = 1_000_000
    backup_count: int = 3
    log_path: Path = LOG_PATH


LOGGING = LoggingSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "LOG_PATH",
    "API",
    "INFERENCE",
    "LOGGING",
    "get_default_data_dir",
]
