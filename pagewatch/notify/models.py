"""
Webhook payload models (embed-style message, one embed per author).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pagewatch.config import EMBED_COLOR


class EmbedAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    icon_url: str | None = None


class EmbedField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Item title and change verb, e.g. 'Roadmap (Created)'")
    value: str = Field(..., description="Content snippet and read-more link")


class Embed(BaseModel):
    author: EmbedAuthor
    title: str = Field(..., description="Workspace name")
    url: str = Field(..., description="Workspace link")
    description: str = Field(..., description="Created/updated summary line")
    color: int = EMBED_COLOR
    fields: list[EmbedField] = Field(default_factory=list)


class WebhookMessage(BaseModel):
    """One notification: everything one author changed during the window."""

    author_id: str = Field(..., exclude=True)
    embeds: list[Embed]

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the webhook POST."""
        return self.model_dump(mode="json", exclude_none=True)

    @property
    def field_names(self) -> list[str]:
        return [f.name for embed in self.embeds for f in embed.fields]
