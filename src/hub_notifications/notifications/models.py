"""Data models for notification payloads and inbound routing records."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

# Queue item JSON field names (PascalCase as serialized by .NET producers)
FIELD_USER_ID_TAG = "UserIdTag"
FIELD_USER_NAME = "UserName"

TemplateProperties = Mapping[str, str]


class Platform(Enum):
    """Notification Hubs payload formats.

    The value is the ``ServiceBusNotification-Format`` name expected by the hub.
    """

    TEMPLATE = "template"
    WNS = "windows"
    APNS = "apple"
    FCM = "fcmv1"
    ADM = "adm"
    BAIDU = "baidu"


@dataclass(frozen=True)
class TemplateNotification:
    """Generic template notification, expanded by the hub per registration.

    Attributes:
        properties: Placeholder name to substitution value mapping.
    """

    properties: TemplateProperties

    @property
    def platform(self) -> Platform:
        return Platform.TEMPLATE


@dataclass(frozen=True)
class RawNotification:
    """Platform-specific notification whose body is sent verbatim.

    Attributes:
        platform: Target platform (selects the hub format header).
        markup: Native payload, e.g. WNS toast XML or an APNs JSON document.
    """

    platform: Platform
    markup: str


NotificationPayload = TemplateNotification | RawNotification


@dataclass(frozen=True)
class RoutingRecord:
    """Inbound event carrying the user identifier used for tag routing."""

    tag_key: str
    display_name: str = ""

    @classmethod
    def from_queue_message(cls, body: str | bytes) -> RoutingRecord:
        """Decode a JSON queue item into a RoutingRecord.

        Accepts both PascalCase (``UserIdTag``) and camelCase (``userIdTag``)
        field names. Missing fields become empty strings.

        Args:
            body: Raw queue message body.

        Returns:
            RoutingRecord populated from the message.

        Raises:
            ValueError: If the body is not a JSON object.
        """
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("Queue message must be a JSON object")
        return cls(
            tag_key=str(_lookup(data, FIELD_USER_ID_TAG)),
            display_name=str(_lookup(data, FIELD_USER_NAME)),
        )


def _lookup(data: dict, field: str) -> object:  # type: ignore[type-arg]
    """Return data[field], falling back to its camelCase spelling; null reads as ""."""
    value = data[field] if field in data else data.get(field[0].lower() + field[1:])
    return "" if value is None else value
