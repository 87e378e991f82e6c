"""
Collection walker - expands item ids into every descendant reachable through
collection childIds.

A visited set spans the whole walk, so cyclic childIds graphs (A -> B -> A)
terminate. Items that cannot be fetched are dead ends: they are logged,
dropped from the result, and their descendants are not explored.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from pagewatch.infrastructure.errors import WatchError
from pagewatch.observability.logging import get_logger
from pagewatch.observability.telemetry import counter, log_event
from pagewatch.workspace.cache import ItemCache

logger = get_logger(__name__)


class CollectionWalker:
    def __init__(self, cache: ItemCache):
        self.cache = cache
        self.dead_ends: list[str] = []

    def walk(self, item_ids: Iterable[str]) -> list[str]:
        """
        Transitive closure of item_ids under childIds, inputs included.

        Args:
            item_ids: Starting frontier (pages or collections)

        Returns:
            Deduplicated ids in first-encounter order (breadth first). Only ids
            whose item could be fetched are returned.

        Side Effects:
            - Fetches uncached items through the cache
            - Appends unreachable ids to self.dead_ends
        """
        frontier = deque(item_ids)
        visited: set[str] = set()
        reached: list[str] = []

        while frontier:
            item_id = frontier.popleft()
            if item_id in visited:
                continue
            visited.add(item_id)

            try:
                item = self.cache.fetch_item_cached(item_id)
            except WatchError as exc:
                self._record_dead_end(item_id, exc)
                continue

            reached.append(item_id)
            if item.has_children:
                frontier.extend(child for child in item.child_ids if child not in visited)

        counter("walker.items_reached", len(reached))
        return reached

    def _record_dead_end(self, item_id: str, exc: WatchError) -> None:
        if item_id not in self.dead_ends:
            self.dead_ends.append(item_id)
        counter("walker.dead_end")
        log_event(
            "walker.dead_end",
            item_id=item_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )
