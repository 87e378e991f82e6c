"""
Centralized environment variable loader for PageWatch.

Side Effects:
    - Loads .env file from project root (once per process)

Usage:
    from pagewatch.infrastructure.env import ensure_env_loaded, lookup_env

    ensure_env_loaded()
    api_key = lookup_env("API_KEY")
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from pagewatch.infrastructure.errors import ConfigError

ENV_PREFIX = "PAGEWATCH_"

_ENV_LOADED = False


def ensure_env_loaded(env_path: Path | None = None) -> None:
    """
    Load environment variables from a .env file.

    Args:
        env_path: Explicit .env file. It is always loaded, even after an earlier
            default load, and must exist. If None, the nearest .env above this
            package is loaded once per process.

    Raises:
        ConfigError: If env_path is given but is not a file

    Side Effects:
        - Loads environment variables from .env file (never overrides existing ones)
        - Sets module-level flag so the default search runs only once
    """
    global _ENV_LOADED
    if env_path is not None:
        env_path = Path(env_path)
        if not env_path.is_file():
            raise ConfigError(f"env file not found: {env_path}")
        load_dotenv(env_path)
        _ENV_LOADED = True
        return

    if _ENV_LOADED:
        return

    current = Path(__file__).parent
    while current != current.parent:
        env_candidate = current / ".env"
        if env_candidate.exists():
            env_path = env_candidate
            break
        current = current.parent

    if env_path is not None:
        load_dotenv(env_path)
    else:
        load_dotenv()
    _ENV_LOADED = True


def lookup_env(name: str) -> str | None:
    """Read PAGEWATCH_<name> first, then the bare <name>. Blank values count as unset."""
    for key in (f"{ENV_PREFIX}{name}", name):
        value = os.getenv(key)
        if value is not None and value.strip():
            return value.strip()
    return None
