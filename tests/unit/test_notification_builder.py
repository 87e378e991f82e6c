"""Tests for per-author notification payloads"""

from __future__ import annotations

import pytest

from pagewatch.infrastructure.errors import NotFoundError
from pagewatch.notify.builder import (
    NotificationBuilder,
    build_field,
    describe,
    snippet,
    workspace_link,
)
from pagewatch.watch.aggregator import AuthorChangeSet
from pagewatch.watch.classifier import ChangeKind
from pagewatch.workspace.cache import ItemCache
from pagewatch.workspace.models import Workspace

WORKSPACE = Workspace(id="ws-1", name="Team Wiki")


@pytest.fixture
def builder_for(fake_client_cls, users):
    def _build(items):
        client = fake_client_cls(hidden=items, users=users)
        cache = ItemCache(client)
        cache.put_many(items)
        return NotificationBuilder(
            users=client, cache=cache, workspace=WORKSPACE, team_url="https://app.example.com/"
        )

    return _build


@pytest.mark.parametrize(
    ("created", "updated", "expected"),
    [
        (1, 0, "1 page created"),
        (3, 0, "3 pages created"),
        (0, 1, "1 page updated"),
        (2, 1, "2 pages created - 1 page updated"),
        (1, 4, "1 page created - 4 pages updated"),
        (0, 0, ""),
    ],
)
def test_describe(created, updated, expected):
    assert describe(created, updated) == expected


def test_workspace_link_replaces_spaces():
    assert workspace_link("https://app.example.com/", "Team Wiki Docs") == (
        "https://app.example.com/Team-Wiki-Docs"
    )


def test_snippet_truncates_then_strips_newlines():
    content = "line one\nline two\n" + "x" * 200

    text = snippet(content)

    assert "\n" not in text
    assert text == content[:150].replace("\n", "")


def test_snippet_of_missing_content_is_empty():
    assert snippet(None) == ""
    assert snippet("") == ""


def test_build_field_format(make_item):
    item = make_item("p1", title="Roadmap", content="Q4\ngoals")

    field = build_field(item, ChangeKind.CREATED)

    assert field.name == "Roadmap (Created)"
    assert field.value == "Q4goals...\n[read more](https://app.example.com/t/p1)"


def test_build_field_without_content_keeps_ellipsis(make_item):
    field = build_field(make_item("p1", content=None), ChangeKind.UPDATED)

    assert field.value == "...\n[read more](https://app.example.com/t/p1)"


def test_build_lists_created_before_updated(builder_for, make_item):
    items = [
        make_item("p1", title="Edited", content="edited body"),
        make_item("p2", title="Fresh", content="fresh body"),
        make_item("p3", title="Also Fresh", content="another body"),
    ]
    change_set = AuthorChangeSet(author_id="u-1", created=["p2", "p3"], updated=["p1"])

    message = builder_for(items).build(change_set)

    assert message.field_names == ["Fresh (Created)", "Also Fresh (Created)", "Edited (Updated)"]
    embed = message.embeds[0]
    assert embed.description == "2 pages created - 1 page updated"
    assert embed.author.name == "Ada"
    assert embed.author.icon_url == "https://img/ada.png"
    assert embed.title == "Team Wiki"
    assert embed.url == "https://app.example.com/Team-Wiki"


def test_each_field_uses_its_own_snippet(builder_for, make_item):
    items = [make_item("p1", content="alpha"), make_item("p2", content="beta")]
    change_set = AuthorChangeSet(author_id="u-1", created=["p1"], updated=["p2"])

    message = builder_for(items).build(change_set)

    values = [f.value for f in message.embeds[0].fields]
    assert values[0].startswith("alpha...")
    assert values[1].startswith("beta...")


def test_empty_change_set_builds_nothing(builder_for):
    assert builder_for([]).build(AuthorChangeSet(author_id="u-1")) is None


def test_unknown_author_raises(builder_for, make_item):
    change_set = AuthorChangeSet(author_id="u-404", created=["p1"])

    with pytest.raises(NotFoundError):
        builder_for([make_item("p1")]).build(change_set)


def test_payload_shape(builder_for, make_item):
    change_set = AuthorChangeSet(author_id="u-3", created=["p1"])

    payload = builder_for([make_item("p1", title="Roadmap")]).build(change_set).to_payload()

    assert "author_id" not in payload
    embed = payload["embeds"][0]
    assert embed["color"] == 10554661
    # u-3 has no avatar; icon_url is dropped rather than sent as null
    assert embed["author"] == {"name": "Linus"}
    assert embed["fields"][0]["name"] == "Roadmap (Created)"
