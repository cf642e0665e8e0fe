"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "worktimer"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"

DEFAULT_CONFIG_TOML = """\
[mongodb]
uri = "mongodb://localhost:27017"
database = "worktimer"

[timer]
# live counter period and display refetch cadence, in seconds
tick_interval = 1.0
refresh_interval = 5.0
in_progress_status = "In Progress"
"""


@dataclass
class MongoConfig:
    uri: str = "mongodb://localhost:27017"
    database: str = "worktimer"


@dataclass
class TimerConfig:
    tick_interval: float = 1.0
    refresh_interval: float = 5.0
    in_progress_status: str = "In Progress"


@dataclass
class AppConfig:
    mongodb: MongoConfig = field(default_factory=MongoConfig)
    timer: TimerConfig = field(default_factory=TimerConfig)
    config_path: Path = DEFAULT_CONFIG_PATH


def _env_overlay(config: AppConfig) -> None:
    """Override config values with environment variables where applicable."""
    if uri := os.environ.get("MONGODB_URI"):
        config.mongodb.uri = uri
    if db := os.environ.get("WORKTIMER_DB"):
        config.mongodb.database = db


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    mongo_raw = raw.get("mongodb", {})
    timer_raw = raw.get("timer", {})

    config = AppConfig(
        mongodb=MongoConfig(
            uri=mongo_raw.get("uri", "mongodb://localhost:27017"),
            database=mongo_raw.get("database", "worktimer"),
        ),
        timer=TimerConfig(
            tick_interval=float(timer_raw.get("tick_interval", 1.0)),
            refresh_interval=float(timer_raw.get("refresh_interval", 5.0)),
            in_progress_status=timer_raw.get("in_progress_status", "In Progress"),
        ),
        config_path=path,
    )

    _env_overlay(config)
    return config


def init_config(config_path: Path | None = None) -> Path:
    """Create default config file."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML)
    return path
