"""Centralized configuration for PageWatch.

Re-exports everything from pagewatch.infrastructure.settings so callers have a
single import point, then adds typed constants for the upstream API, the
change window, and notification rendering.
"""

from __future__ import annotations

from pagewatch.infrastructure.settings import *  # noqa: F401, F403

# --- Upstream API ---
PAGE_SIZE: int = 100  # items per listing page; a shorter page is the last one
AUTH_HEADER: str = "Authorization"

# --- Notifications ---
SNIPPET_LENGTH: int = 150
EMBED_COLOR: int = 10554661
READ_MORE_LABEL: str = "read more"
