"""
Notification delivery.

WebhookNotifier POSTs one JSON message per author. Delivery problems are
logged and reported through the return value; they never raise, so one
author's failure cannot stop the others.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod

import requests

from pagewatch.config import DEFAULT_HTTP_TIMEOUT_SECONDS
from pagewatch.notify.models import WebhookMessage
from pagewatch.observability.logging import get_logger
from pagewatch.observability.telemetry import counter, log_event

logger = get_logger(__name__)


class Notifier(ABC):
    @abstractmethod
    def send(self, message: WebhookMessage) -> bool:
        """Deliver one message. Returns True on success."""
        raise NotImplementedError


class WebhookNotifier(Notifier):
    def __init__(
        self,
        webhook_url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, message: WebhookMessage) -> bool:
        """
        POST the message payload to the webhook.

        Returns:
            True if sent successfully (2xx), False otherwise

        Side Effects:
            - Makes API calls
            - Logs the outgoing payload at debug level
        """
        payload = message.to_payload()
        logger.debug("Sending: %s", json.dumps(payload))
        try:
            response = self.session.post(self.webhook_url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            counter("dispatch.failed")
            log_event("dispatch.failed", author_id=message.author_id, error=str(e))
            return False

        if not 200 <= response.status_code < 300:
            counter("dispatch.failed")
            log_event(
                "dispatch.failed",
                author_id=message.author_id,
                status=response.status_code,
                body=response.text[:200],
            )
            return False

        counter("dispatch.sent")
        logger.info("Sent notification for author %s", message.author_id)
        return True


class ConsoleNotifier(Notifier):
    """Dry-run notifier: logs the payload instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[WebhookMessage] = []

    def send(self, message: WebhookMessage) -> bool:
        self.sent.append(message)
        logger.info("[dry-run] %s", json.dumps(message.to_payload(), indent=2))
        return True
