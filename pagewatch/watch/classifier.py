"""
Change classification against a trailing watch window.

Each item is classified on its own timestamps only; nothing carries over from
a previously classified item or from a parent collection.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pagewatch.workspace.models import Item


class ChangeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    NONE = "none"

    @property
    def label(self) -> str:
        """Verb shown in notifications: Created / Updated."""
        return self.value.capitalize()


def elapsed_minutes(timestamp: datetime, now: datetime) -> int:
    """
    Whole minutes between timestamp and now, ignoring direction.

    The signed (timestamp - now) delta is rounded half up before taking the
    absolute value, so a timestamp slightly in the future (clock skew) still
    counts as recent.
    """
    delta = (timestamp - now).total_seconds() / 60
    return abs(math.floor(delta + 0.5))


def classify(item: Item, now: datetime, window_minutes: int) -> ChangeKind:
    """Created wins over Updated; an item is never both."""
    if elapsed_minutes(item.created_at, now) <= window_minutes:
        return ChangeKind.CREATED
    if elapsed_minutes(item.last_updated_at, now) <= window_minutes:
        return ChangeKind.UPDATED
    return ChangeKind.NONE
