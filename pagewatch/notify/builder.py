"""
Builds the per-author notification from an aggregated change set.

Created items are listed before updated ones. Every field's snippet comes from
the item being rendered.
"""

from __future__ import annotations

from typing import Protocol

from pagewatch.config import READ_MORE_LABEL, SNIPPET_LENGTH
from pagewatch.notify.models import Embed, EmbedAuthor, EmbedField, WebhookMessage
from pagewatch.observability.logging import get_logger
from pagewatch.observability.telemetry import counter
from pagewatch.watch.aggregator import AuthorChangeSet
from pagewatch.watch.classifier import ChangeKind
from pagewatch.workspace.cache import ItemCache
from pagewatch.workspace.models import Item, User, Workspace

logger = get_logger(__name__)


class UserFetcher(Protocol):
    def fetch_user(self, user_id: str) -> User: ...


def workspace_link(team_url: str, workspace_name: str) -> str:
    """Team URL followed by the workspace name with spaces as dashes."""
    return team_url + workspace_name.replace(" ", "-")


def snippet(content: str | None, length: int = SNIPPET_LENGTH) -> str:
    """First `length` characters of content with newlines removed."""
    if not content:
        return ""
    return content[:length].replace("\r", "").replace("\n", "")


def pluralize_pages(count: int, verb: str) -> str:
    return f"{count} {'page' if count == 1 else 'pages'} {verb}"


def describe(created_count: int, updated_count: int) -> str:
    """
    One-line summary, e.g. "2 pages created - 1 page updated".

    Zero counts are omitted; both zero gives an empty string.
    """
    parts = []
    if created_count:
        parts.append(pluralize_pages(created_count, "created"))
    if updated_count:
        parts.append(pluralize_pages(updated_count, "updated"))
    return " - ".join(parts)


def build_field(item: Item, kind: ChangeKind) -> EmbedField:
    link = f"[{READ_MORE_LABEL}]({item.url})"
    return EmbedField(
        name=f"{item.title} ({kind.label})", value=f"{snippet(item.content)}...\n{link}"
    )


class NotificationBuilder:
    """
    Turns AuthorChangeSets into WebhookMessages for one workspace.

    Items are resolved through the run's cache (already populated by
    classification); users are fetched once per author.
    """

    def __init__(self, users: UserFetcher, cache: ItemCache, workspace: Workspace, team_url: str):
        self.users = users
        self.cache = cache
        self.workspace = workspace
        self.workspace_url = workspace_link(team_url, workspace.name)

    def build(self, change_set: AuthorChangeSet) -> WebhookMessage | None:
        """
        Build the notification for one author.

        Returns:
            None when the change set is empty

        Raises:
            WatchError: If the author cannot be fetched
        """
        if change_set.is_empty:
            return None

        user = self.users.fetch_user(change_set.author_id)

        fields: list[EmbedField] = []
        for kind, item_ids in (
            (ChangeKind.CREATED, change_set.created),
            (ChangeKind.UPDATED, change_set.updated),
        ):
            for item_id in item_ids:
                fields.append(build_field(self.cache.fetch_item_cached(item_id), kind))

        embed = Embed(
            author=EmbedAuthor(name=user.display_name, icon_url=user.avatar_url),
            title=self.workspace.name,
            url=self.workspace_url,
            description=describe(len(change_set.created), len(change_set.updated)),
            fields=fields,
        )
        counter("notify.built")
        logger.debug("Built notification for %s with %d fields", change_set.author_id, len(fields))
        return WebhookMessage(author_id=change_set.author_id, embeds=[embed])
