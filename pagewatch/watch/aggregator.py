"""
Aggregates classified items into one change set per author.

Authors and item ids keep first-encounter order so notifications come out in a
reproducible order. Within one author an id is in created or updated, never
both, and never twice.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from pagewatch.observability.telemetry import counter, log_event
from pagewatch.watch.classifier import ChangeKind
from pagewatch.workspace.models import Item


@dataclass
class AuthorChangeSet:
    """Created/updated item ids attributed to one author in one run."""

    author_id: str
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)

    def add_created(self, item_id: str) -> bool:
        if item_id in self.created:
            return False
        # created takes precedence over an earlier updated entry
        if item_id in self.updated:
            self.updated.remove(item_id)
        self.created.append(item_id)
        return True

    def add_updated(self, item_id: str) -> bool:
        if item_id in self.created or item_id in self.updated:
            return False
        self.updated.append(item_id)
        return True

    @property
    def is_empty(self) -> bool:
        return not self.created and not self.updated

    def __len__(self) -> int:
        return len(self.created) + len(self.updated)


class ChangeAggregator:
    def __init__(self) -> None:
        self._by_author: dict[str, AuthorChangeSet] = {}

    def record(self, item: Item, kind: ChangeKind) -> bool:
        """
        File item.id under the responsible author.

        Created items go to their creator, updated items to their last editor.

        Returns:
            True if the id was newly recorded
        """
        if kind is ChangeKind.NONE:
            return False

        if kind is ChangeKind.CREATED:
            author_id = item.created_by_user_id
        else:
            author_id = item.last_updated_by_user_id

        if not author_id:
            counter("aggregator.missing_author")
            log_event("aggregator.missing_author", item_id=item.id, kind=kind.value)
            return False

        change_set = self._by_author.get(author_id)
        if change_set is None:
            change_set = self._by_author[author_id] = AuthorChangeSet(author_id=author_id)

        if kind is ChangeKind.CREATED:
            return change_set.add_created(item.id)
        return change_set.add_updated(item.id)

    def get(self, author_id: str) -> AuthorChangeSet | None:
        return self._by_author.get(author_id)

    def change_sets(self) -> Iterator[AuthorChangeSet]:
        """Non-empty change sets in author first-encounter order."""
        return (cs for cs in self._by_author.values() if not cs.is_empty)

    def __len__(self) -> int:
        return sum(1 for _ in self.change_sets())

    @property
    def is_empty(self) -> bool:
        return len(self) == 0
