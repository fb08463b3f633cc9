"""Notification dispatcher — explicit delivery of composed payloads to the hub."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from hub_notifications.hub.client import NotificationHubClient, notification_hub_client_from_config
from hub_notifications.notifications.builder import as_payload

if TYPE_CHECKING:
    from hub_notifications.config import AppConfig
    from hub_notifications.notifications.models import NotificationPayload

logger = logging.getLogger(__name__)


class NotificationCollector:
    """Accumulates payloads until flush() commits them to the hub in order."""

    def __init__(
        self, dispatcher: NotificationDispatcher, tag_expression: str | None = None
    ) -> None:
        self._dispatcher = dispatcher
        self._tag_expression = tag_expression
        self._pending: deque[NotificationPayload] = deque()

    @property
    def pending(self) -> list[NotificationPayload]:
        return list(self._pending)

    def add(self, payload: NotificationPayload | Mapping[str, str]) -> None:
        self._pending.append(as_payload(payload))

    def flush(self) -> int:
        """Send every pending payload in insertion order and clear the queue.

        Payloads that were sent before a failure are removed; the failing
        payload and everything after it stay pending.

        Returns:
            Number of payloads sent.
        """
        sent = 0
        while self._pending:
            self._dispatcher.send(self._pending[0], self._tag_expression)
            self._pending.popleft()
            sent += 1
        logger.info("[flush] collector flushed; sent_count:%d", sent)
        return sent


class NotificationDispatcher:
    """Hands finished payloads to the Notification Hub client."""

    def __init__(self, client: NotificationHubClient) -> None:
        """Initialise the dispatcher.

        Args:
            client: NotificationHubClient used for delivery.
        """
        self._client = client

    def send(
        self,
        payload: NotificationPayload | Mapping[str, str],
        tag_expression: str | None = None,
    ) -> None:
        """Deliver a single payload, optionally routed by tag expression.

        A bare template-properties mapping is sent as a template notification.
        """
        self._client.send(as_payload(payload), tag_expression)

    def send_all(
        self,
        payloads: Iterable[NotificationPayload | Mapping[str, str]],
        tag_expression: str | None = None,
    ) -> int:
        """Deliver payloads in order, stopping at the first failure.

        Args:
            payloads: Ordered payloads to deliver.
            tag_expression: Optional tag expression applied to every payload.

        Returns:
            Number of payloads sent.
        """
        sent = 0
        for payload in payloads:
            self.send(payload, tag_expression)
            sent += 1
        logger.info("[send_all] batch delivered; sent_count:%d", sent)
        return sent

    def collector(self, tag_expression: str | None = None) -> NotificationCollector:
        """Return a collector bound to this dispatcher."""
        return NotificationCollector(self, tag_expression)


def notification_dispatcher_from_config(config: AppConfig) -> NotificationDispatcher:
    """Construct a NotificationDispatcher from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured NotificationDispatcher instance.
    """
    return NotificationDispatcher(client=notification_hub_client_from_config(config))
