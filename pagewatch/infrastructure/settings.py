"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pagewatch.infrastructure.env import ensure_env_loaded, lookup_env
from pagewatch.infrastructure.errors import ConfigError

# Default window; run the watcher on the same interval
DEFAULT_WATCH_WINDOW_MINUTES = 45
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
DEFAULT_DISPATCH_WORKERS = 4

REQUIRED_KEYS = ("API_BASE_URL", "API_VERSION", "API_KEY", "WEBHOOK_URL", "TEAM_URL")


@dataclass(frozen=True)
class WatchSettings:
    """Everything a run needs from the outside world."""

    api_base_url: str
    api_version: str
    api_key: str
    webhook_url: str
    team_url: str
    watch_window_minutes: int = DEFAULT_WATCH_WINDOW_MINUTES
    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    dispatch_workers: int = DEFAULT_DISPATCH_WORKERS


def _parse_positive(name: str, raw: str | None, default, cast):
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env_path: Path | None = None) -> WatchSettings:
    """
    Build WatchSettings from the environment.

    Each key is read as PAGEWATCH_<KEY> first, then <KEY>.

    Raises:
        ConfigError: If any required key is missing (all missing keys are listed)
            or a numeric setting is malformed
    """
    ensure_env_loaded(env_path)

    values = {key: lookup_env(key) for key in REQUIRED_KEYS}
    missing = [key for key, value in values.items() if value is None]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}", missing=missing)

    return WatchSettings(
        api_base_url=values["API_BASE_URL"],
        api_version=values["API_VERSION"],
        api_key=values["API_KEY"],
        webhook_url=values["WEBHOOK_URL"],
        team_url=values["TEAM_URL"],
        watch_window_minutes=_parse_positive(
            "WATCH_WINDOW", lookup_env("WATCH_WINDOW"), DEFAULT_WATCH_WINDOW_MINUTES, int
        ),
        http_timeout=_parse_positive(
            "HTTP_TIMEOUT", lookup_env("HTTP_TIMEOUT"), DEFAULT_HTTP_TIMEOUT_SECONDS, float
        ),
        dispatch_workers=_parse_positive(
            "DISPATCH_WORKERS", lookup_env("DISPATCH_WORKERS"), DEFAULT_DISPATCH_WORKERS, int
        ),
    )
