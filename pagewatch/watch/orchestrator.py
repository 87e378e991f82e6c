"""
Run orchestrator - one complete watch pass per scheduled trigger.

FetchingWorkspace → FetchingAllItems → ClassifyingTopLevel → WalkingCollections
→ ClassifyingDiscovered → Dispatching → Done

All per-run state (item cache, author change sets) lives inside run(); nothing
survives to the next run. Workspace and listing failures abort the run;
single-item and single-dispatch failures are logged and skipped.
"""

from __future__ import annotations

import concurrent.futures
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pagewatch.config import DEFAULT_DISPATCH_WORKERS, PAGE_SIZE
from pagewatch.infrastructure.errors import NotFoundError, WatchError
from pagewatch.infrastructure.settings import WatchSettings
from pagewatch.notify.builder import NotificationBuilder
from pagewatch.notify.models import WebhookMessage
from pagewatch.notify.webhook import Notifier, WebhookNotifier
from pagewatch.observability.logging import get_logger
from pagewatch.observability.telemetry import counter, log_event, time_block
from pagewatch.watch.aggregator import ChangeAggregator
from pagewatch.watch.classifier import ChangeKind, classify
from pagewatch.watch.walker import CollectionWalker
from pagewatch.workspace.cache import ItemCache
from pagewatch.workspace.client import WorkspaceClient
from pagewatch.workspace.models import Item, Workspace, utc_now

logger = get_logger(__name__)


class RunState(str, Enum):
    PENDING = "pending"
    FETCHING_WORKSPACE = "fetching_workspace"
    FETCHING_ALL_ITEMS = "fetching_all_items"
    CLASSIFYING_TOP_LEVEL = "classifying_top_level"
    WALKING_COLLECTIONS = "walking_collections"
    CLASSIFYING_DISCOVERED = "classifying_discovered"
    DISPATCHING = "dispatching"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    state: RunState
    workspace_id: str
    item_ids: list[str] = field(default_factory=list)
    discovered_ids: list[str] = field(default_factory=list)
    notifications_sent: int = 0
    failed_authors: list[str] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)

    @property
    def no_updates(self) -> bool:
        return self.notifications_sent == 0 and not self.failed_authors


class WatchRun:
    """
    Drives one watch pass over the first workspace the API lists.

    Args:
        client: Workspace API client
        notifier: Delivery target for per-author messages
        window_minutes: Trailing window defining "recent"
        team_url: Prefix for the workspace link in notifications
        clock: Source of "now" (evaluated once per run)
        page_size: Listing page size; a shorter page ends pagination
        parallel: Send notifications concurrently (default False for determinism)
        max_workers: Thread pool size when parallel
    """

    def __init__(
        self,
        client: WorkspaceClient,
        notifier: Notifier,
        window_minutes: int,
        team_url: str,
        clock: Callable[[], datetime] = utc_now,
        page_size: int = PAGE_SIZE,
        parallel: bool = False,
        max_workers: int = DEFAULT_DISPATCH_WORKERS,
    ):
        self.client = client
        self.notifier = notifier
        self.window_minutes = window_minutes
        self.team_url = team_url
        self.clock = clock
        self.page_size = page_size
        self.parallel = parallel
        self.max_workers = max_workers
        self.state = RunState.PENDING

    @classmethod
    def from_settings(
        cls,
        settings: WatchSettings,
        notifier: Notifier | None = None,
        parallel: bool = False,
    ) -> WatchRun:
        return cls(
            client=WorkspaceClient.from_settings(settings),
            notifier=notifier
            or WebhookNotifier(settings.webhook_url, timeout=settings.http_timeout),
            window_minutes=settings.watch_window_minutes,
            team_url=settings.team_url,
            parallel=parallel,
            max_workers=settings.dispatch_workers,
        )

    def run(self, now: datetime | None = None) -> RunResult:
        """
        Execute one pass.

        Returns:
            RunResult in state DONE

        Raises:
            WatchError: Workspace or item listing failed (state is left at FAILED)
        """
        now = now or self.clock()
        try:
            with time_block("run.total"):
                return self._run(now)
        except WatchError as exc:
            failed_in = self.state
            self.state = RunState.FAILED
            counter("run.failed")
            log_event(
                "run.failed",
                stage=failed_in.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

    def _run(self, now: datetime) -> RunResult:
        cache = ItemCache(self.client)
        aggregator = ChangeAggregator()

        self._enter(RunState.FETCHING_WORKSPACE)
        workspace = self.fetch_workspace()

        self._enter(RunState.FETCHING_ALL_ITEMS)
        items = self.fetch_all_items(workspace.id)
        cache.put_many(items)

        self._enter(RunState.CLASSIFYING_TOP_LEVEL)
        top_level_ids: dict[str, None] = {}
        collections: list[Item] = []
        for item in items:
            if item.id in top_level_ids:
                continue
            top_level_ids[item.id] = None
            self._record(aggregator, item, now)
            if item.is_collection:
                collections.append(item)

        self._enter(RunState.WALKING_COLLECTIONS)
        walker = CollectionWalker(cache)
        discovered: dict[str, None] = {}
        for collection in collections:
            if collection.child_ids:
                discovered.update(dict.fromkeys(walker.walk(collection.child_ids)))
        skipped = list(walker.dead_ends)

        self._enter(RunState.CLASSIFYING_DISCOVERED)
        for item_id in discovered:
            if item_id in top_level_ids:
                continue
            try:
                item = cache.fetch_item_cached(item_id)
            except WatchError as exc:
                if item_id not in skipped:
                    skipped.append(item_id)
                counter("run.item_skipped")
                log_event("run.item_skipped", item_id=item_id, error=str(exc))
                continue
            self._record(aggregator, item, now)

        self._enter(RunState.DISPATCHING)
        builder = NotificationBuilder(
            users=self.client, cache=cache, workspace=workspace, team_url=self.team_url
        )
        sent, failed_authors = self.dispatch(aggregator, builder)

        self._enter(RunState.DONE)
        log_event(
            "run.completed",
            workspace_id=workspace.id,
            items=len(top_level_ids),
            discovered=len(discovered),
            notifications=sent,
            failed=len(failed_authors),
            skipped=len(skipped),
        )
        return RunResult(
            state=RunState.DONE,
            workspace_id=workspace.id,
            item_ids=list(top_level_ids),
            discovered_ids=list(discovered),
            notifications_sent=sent,
            failed_authors=failed_authors,
            skipped_ids=skipped,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def fetch_workspace(self) -> Workspace:
        """The first workspace the API lists."""
        workspaces = self.client.fetch_workspace_list()
        if not workspaces:
            raise NotFoundError("workspace listing is empty")
        if len(workspaces) > 1:
            logger.info("%d workspaces listed; watching %s", len(workspaces), workspaces[0].name)
        return workspaces[0]

    def fetch_all_items(self, workspace_id: str) -> list[Item]:
        """
        Every listing page, concatenated in order.

        Pages are requested with the last item id of the previous page as the
        cursor until a page comes back shorter than page_size (or empty).
        """
        items: list[Item] = []
        cursor: str | None = None
        pages = 0
        while True:
            page = self.client.fetch_items_page(workspace_id, cursor)
            pages += 1
            items.extend(page)
            if len(page) < self.page_size:
                break
            next_cursor = page[-1].id
            if next_cursor == cursor:
                logger.warning("Listing cursor did not advance past %s; stopping", cursor)
                break
            cursor = next_cursor

        counter("run.pages_fetched", pages)
        logger.info("Fetched %d items in %d pages", len(items), pages)
        return items

    def dispatch(
        self, aggregator: ChangeAggregator, builder: NotificationBuilder
    ) -> tuple[int, list[str]]:
        """
        Build and send one notification per author with changes.

        Returns:
            (messages sent, author ids whose build or send failed)
        """
        if aggregator.is_empty:
            counter("run.no_updates")
            logger.info("No updates to notify")
            return 0, []

        change_sets = list(aggregator.change_sets())
        failed: set[str] = set()
        messages: list[WebhookMessage] = []
        for change_set in change_sets:
            try:
                message = builder.build(change_set)
            except WatchError as exc:
                failed.add(change_set.author_id)
                counter("dispatch.failed")
                log_event("dispatch.build_failed", author_id=change_set.author_id, error=str(exc))
                continue
            if message is not None:
                messages.append(message)

        if self.parallel and len(messages) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(self._send_one, messages))
        else:
            outcomes = [self._send_one(message) for message in messages]

        sent = 0
        for message, ok in zip(messages, outcomes):
            if ok:
                sent += 1
            else:
                failed.add(message.author_id)
        return sent, [cs.author_id for cs in change_sets if cs.author_id in failed]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _send_one(self, message: WebhookMessage) -> bool:
        try:
            return self.notifier.send(message)
        except Exception as e:
            logger.exception("Notifier raised for author %s: %s", message.author_id, e)
            return False

    def _record(self, aggregator: ChangeAggregator, item: Item, now: datetime) -> ChangeKind:
        kind = classify(item, now, self.window_minutes)
        if kind is not ChangeKind.NONE:
            aggregator.record(item, kind)
        return kind

    def _enter(self, state: RunState) -> None:
        self.state = state
        logger.debug("Run state -> %s", state.value)
