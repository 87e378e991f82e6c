"""
PageWatch notifications - per-author embed payloads and their delivery.
"""

from pagewatch.notify.models import Embed, EmbedAuthor, EmbedField, WebhookMessage

__all__ = [
    "Embed",
    "EmbedAuthor",
    "EmbedField",
    "WebhookMessage",
]
