"""Tag expression resolution for routed notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hub_notifications.notifications.models import RoutingRecord

TAG_PLACEHOLDER = "{tag}"
DEFAULT_TAG_PATTERN = TAG_PLACEHOLDER


class InvalidRoutingRecord(ValueError):
    """Raised when a routing record cannot produce a tag expression."""


def resolve_tag_expression(record: RoutingRecord, pattern: str = DEFAULT_TAG_PATTERN) -> str:
    """Substitute the record's tag key into a tag expression pattern.

    Only emptiness is checked here; tag syntax is validated by the hub when
    the notification is sent. A pattern without the ``{tag}`` placeholder is
    returned unchanged.

    Args:
        record: Inbound routing record.
        pattern: Tag expression containing a single ``{tag}`` placeholder,
            e.g. ``"{tag}"`` or ``"{tag} && ios"``.

    Returns:
        Tag expression ready to pass to the hub.

    Raises:
        InvalidRoutingRecord: If the record's tag key is empty.
    """
    if not record.tag_key:
        raise InvalidRoutingRecord("Routing record has an empty tag key")
    return pattern.replace(TAG_PLACEHOLDER, record.tag_key, 1)
