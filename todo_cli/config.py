"""
todo - Settings
===============
Everything configurable comes from the environment; command-line flags
override it.

    TODO_DB          path to the SQLite file (default: ~/.todo.db)
    TODO_LOG_LEVEL   log level name (default: WARNING)
    NO_COLOR         set to disable color
    FORCE_COLOR      1/true/yes/on to color even when not on a TTY
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_DB_NAME = ".todo.db"
DEFAULT_LOG_LEVEL = "WARNING"


def default_db_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Default per-user database:
      ~/.todo.db

    Override with TODO_DB env var or --db CLI option.
    """
    env = os.environ if env is None else env
    override = env.get("TODO_DB")
    if override:
        return Path(override).expanduser().resolve()
    return (Path.home() / DEFAULT_DB_NAME).resolve()


def _truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in {"1", "true", "yes", "on"}


def _log_level(name: Optional[str]) -> int:
    level = logging.getLevelName((name or DEFAULT_LOG_LEVEL).strip().upper())
    return level if isinstance(level, int) else logging.WARNING


@dataclass
class Settings:
    db_path: Path
    log_level: int = logging.WARNING
    color: bool = False


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    isatty: Optional[bool] = None,
) -> Settings:
    env = os.environ if env is None else env
    if isatty is None:
        isatty = sys.stdout.isatty()

    color = (isatty or _truthy(env.get("FORCE_COLOR"))) and env.get("NO_COLOR") is None
    return Settings(
        db_path=default_db_path(env),
        log_level=_log_level(env.get("TODO_LOG_LEVEL")),
        color=color,
    )
