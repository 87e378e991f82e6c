"""
Domain models (Pydantic v2) for workspace content.

Models validate the upstream API's camelCase JSON directly; Python code reads
snake_case attributes. Unknown fields are ignored so API additions never break
a run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


class ItemKind(str, Enum):
    """Whether an item can hold children."""

    PAGE = "page"
    COLLECTION = "collection"


class WorkspaceModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Workspace(WorkspaceModel):
    id: str
    name: str = ""


class User(WorkspaceModel):
    id: str
    display_name: str = Field(default="", alias="displayName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")

    @model_validator(mode="before")
    @classmethod
    def _derive_display_name(cls, data: Any) -> Any:
        """Fall back to firstName, then lastName, then the id."""
        if not isinstance(data, dict) or data.get("displayName") or data.get("display_name"):
            return data
        first = (data.get("firstName") or "").strip()
        last = (data.get("lastName") or "").strip()
        data = dict(data)
        data["displayName"] = first or last or str(data.get("id", ""))
        return data


class Item(WorkspaceModel):
    """A page or collection in the content tree."""

    id: str
    kind: ItemKind = Field(default=ItemKind.PAGE, validation_alias=AliasChoices("object", "kind"))
    child_ids: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("childIds", "child_ids")
    )
    title: str = ""
    url: str = ""
    content: str | None = None
    created_at: datetime = Field(validation_alias=AliasChoices("createdAt", "created_at"))
    last_updated_at: datetime = Field(
        validation_alias=AliasChoices("lastUpdatedAt", "last_updated_at")
    )
    created_by_user_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("createdUserId", "createdByUserId", "created_by_user_id"),
    )
    last_updated_by_user_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "lastUpdatedUserId", "lastUpdatedByUserId", "last_updated_by_user_id"
        ),
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> ItemKind:
        # The API reports pages as "item"; only collections carry children
        if isinstance(value, ItemKind):
            return value
        return ItemKind.COLLECTION if value == "collection" else ItemKind.PAGE

    @field_validator("child_ids", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("created_at", "last_updated_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def is_collection(self) -> bool:
        return self.kind is ItemKind.COLLECTION

    @property
    def has_children(self) -> bool:
        return self.is_collection and bool(self.child_ids)
