"""
Pytest configuration for PageWatch tests

Provides an in-memory workspace API fake, an item factory, and a fixed clock
shared across unit and integration tests.
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime, timedelta

import pytest

from pagewatch.infrastructure.errors import NotFoundError, TransportError
from pagewatch.observability.telemetry import reset_telemetry
from pagewatch.workspace.models import Item, User, Workspace

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class FakeWorkspaceClient:
    """Workspace API double backed by dicts; records every call."""

    def __init__(
        self,
        listing: list[Item] | None = None,
        hidden: list[Item] | None = None,
        users: list[User] | None = None,
        workspaces: list[Workspace] | None = None,
        page_size: int = 100,
    ):
        self.listing = list(listing or [])
        self.items = {item.id: item for item in [*self.listing, *(hidden or [])]}
        self.users = {user.id: user for user in users or []}
        self.workspaces = (
            workspaces if workspaces is not None else [Workspace(id="ws-1", name="Team Wiki")]
        )
        self.page_size = page_size
        self.calls: list[tuple[str, ...]] = []
        self.fail_listing: Exception | None = None

    def fetch_workspace_list(self) -> list[Workspace]:
        self.calls.append(("workspaces",))
        return list(self.workspaces)

    def fetch_items_page(self, workspace_id: str, after_id: str | None = None) -> list[Item]:
        self.calls.append(("items", workspace_id, after_id or ""))
        if self.fail_listing is not None:
            raise self.fail_listing
        start = 0
        if after_id is not None:
            ids = [item.id for item in self.listing]
            start = ids.index(after_id) + 1
        return self.listing[start : start + self.page_size]

    def fetch_item(self, item_id: str) -> Item:
        self.calls.append(("item", item_id))
        if item_id not in self.items:
            raise NotFoundError(f"item {item_id} not found", resource_id=item_id)
        return self.items[item_id]

    def fetch_user(self, user_id: str) -> User:
        self.calls.append(("user", user_id))
        if user_id not in self.users:
            raise NotFoundError(f"user {user_id} not found", resource_id=user_id)
        return self.users[user_id]

    def item_fetches(self) -> Counter:
        return Counter(call[1] for call in self.calls if call[0] == "item")


class RecordingNotifier:
    """Notifier double; fails for the author ids in fail_for."""

    def __init__(self, fail_for: set[str] | None = None, raise_for: set[str] | None = None):
        self.fail_for = fail_for or set()
        self.raise_for = raise_for or set()
        self.sent = []

    def send(self, message) -> bool:
        if message.author_id in self.raise_for:
            raise TransportError("webhook unreachable")
        if message.author_id in self.fail_for:
            return False
        self.sent.append(message)
        return True


def build_item(
    item_id: str,
    *,
    kind: str = "item",
    created_ago: float = 600,
    updated_ago: float | None = None,
    created_by: str | None = "u-1",
    updated_by: str | None = None,
    children: list[str] | None = None,
    content: str | None = "Some page content",
    title: str | None = None,
    now: datetime = NOW,
) -> Item:
    """Item built from API-shaped JSON; *_ago are minutes before now."""
    if updated_ago is None:
        updated_ago = created_ago
    payload = {
        "id": item_id,
        "object": kind,
        "title": title or f"Page {item_id}",
        "url": f"https://app.example.com/t/{item_id}",
        "content": content,
        "createdAt": (now - timedelta(minutes=created_ago)).isoformat(),
        "lastUpdatedAt": (now - timedelta(minutes=updated_ago)).isoformat(),
        "createdUserId": created_by,
        "lastUpdatedUserId": updated_by or created_by,
    }
    if kind == "collection":
        payload["childIds"] = children or []
    return Item.model_validate(payload)


@pytest.fixture(autouse=True)
def reset_counters():
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_item():
    """Factory fixture: make_item("p1", created_ago=10, ...)"""
    return build_item


@pytest.fixture
def fake_client_cls():
    return FakeWorkspaceClient


@pytest.fixture
def recording_notifier_cls():
    return RecordingNotifier


@pytest.fixture
def users() -> list[User]:
    return [
        User.model_validate({"id": "u-1", "firstName": "Ada", "avatarUrl": "https://img/ada.png"}),
        User.model_validate({"id": "u-2", "firstName": "Grace", "avatarUrl": "https://img/g.png"}),
        User.model_validate({"id": "u-3", "firstName": "Linus"}),
    ]
