"""
Provides the run-scoped item cache.

Every item fetched during a run (listing pages included) is kept by id so the
walker, the classifier and the notification builder never refetch it. Failed
lookups are remembered too: each distinct id costs at most one network call
per run. A cache is created per run and discarded with it.

Key: ItemCache.fetch_item_cached() composes client + cache atomically per id.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from typing import Protocol

from pagewatch.infrastructure.errors import WatchError
from pagewatch.observability.telemetry import counter
from pagewatch.workspace.models import Item


class ItemFetcher(Protocol):
    def fetch_item(self, item_id: str) -> Item: ...


class ItemCache:
    """In-memory id -> Item map with single-flight fetches."""

    def __init__(self, client: ItemFetcher, name: str = "items"):
        self.client = client
        self.name = name
        self._items: dict[str, Item] = {}
        self._failures: dict[str, WatchError] = {}
        self._guard = threading.Lock()
        self._id_locks: dict[str, threading.Lock] = {}

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> Item | None:
        return self._items.get(item_id)

    def put(self, item: Item) -> None:
        """
        Store an item under its id (last write wins).

        Side Effects:
            - Writes to _items dict (in-memory cache)
            - Increments telemetry counter (cache.{name}.write)
        """
        self._items[item.id] = item
        counter(f"cache.{self.name}.write")

    def put_many(self, items: Iterable[Item]) -> None:
        for item in items:
            self.put(item)

    def failure(self, item_id: str) -> WatchError | None:
        """Error recorded for an id whose fetch already failed this run, if any."""
        return self._failures.get(item_id)

    def fetch_item_cached(self, item_id: str) -> Item:
        """
        Return the cached item, fetching (once) on a miss.

        Concurrent callers asking for the same id wait on one fetch instead of
        issuing their own.

        Raises:
            WatchError: The fetch error for this id. Later calls raise a fresh copy
                chained to the recorded error
        """
        item = self._items.get(item_id)
        if item is not None:
            counter(f"cache.{self.name}.hit")
            return item

        with self._guard:
            id_lock = self._id_locks.setdefault(item_id, threading.Lock())

        with id_lock:
            item = self._items.get(item_id)
            if item is not None:
                counter(f"cache.{self.name}.hit")
                return item
            failed = self._failures.get(item_id)
            if failed is not None:
                counter(f"cache.{self.name}.failure_hit")
                raise copy.copy(failed) from failed

            counter(f"cache.{self.name}.miss")
            try:
                item = self.client.fetch_item(item_id)
            except WatchError as exc:
                self._failures[item_id] = exc
                raise
            self.put(item)
            return item
