"""Template notification composition."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from xml.sax.saxutils import escape

from hub_notifications.notifications.models import (
    NotificationPayload,
    Platform,
    RawNotification,
    TemplateNotification,
    TemplateProperties,
)

# Template placeholder names registered by the sample mobile clients
PROPERTY_MESSAGE = "message"
PROPERTY_LOCATION = "location"

TOAST_TEXT01_TEMPLATE = (
    '<toast><visual><binding template="ToastText01">'
    '<text id="1">{text}</text>'
    "</binding></visual></toast>"
)


def build_template(
    message: str,
    location: str | None = None,
    extra: Mapping[str, str] | None = None,
) -> TemplateProperties:
    """Build the template properties for a single message.

    Values are passed through unescaped; any escaping required by the
    transport is done by the hub. The ``message`` argument always wins
    over a ``"message"`` key in ``extra``.

    Args:
        message: Text substituted for the ``$(message)`` placeholder. May be empty.
        location: Optional value for the ``$(location)`` placeholder.
        extra: Additional caller-controlled placeholder/value pairs.

    Returns:
        Read-only mapping of placeholder name to value.
    """
    properties: dict[str, str] = dict(extra or {})
    if location is not None:
        properties[PROPERTY_LOCATION] = location
    properties[PROPERTY_MESSAGE] = message
    return MappingProxyType(properties)


def build_template_notification(
    message: str,
    location: str | None = None,
    extra: Mapping[str, str] | None = None,
) -> TemplateNotification:
    """Wrap build_template() output as a generic template notification."""
    return TemplateNotification(properties=build_template(message, location, extra))


def build_raw_payload(platform: Platform, markup: str) -> RawNotification:
    """Wrap native platform markup without inspecting it.

    Malformed markup is only reported by the hub when the payload is sent.
    """
    return RawNotification(platform=platform, markup=markup)


def windows_toast(text: str) -> RawNotification:
    """Build a ToastText01 WNS toast carrying a single line of text."""
    return build_raw_payload(Platform.WNS, TOAST_TEXT01_TEMPLATE.format(text=escape(text)))


def as_payload(value: NotificationPayload | Mapping[str, str]) -> NotificationPayload:
    """Coerce a bare template-properties mapping into a TemplateNotification.

    Typed payloads are returned unchanged, so this is safe to apply at every
    hand-off to the hub.
    """
    if isinstance(value, TemplateNotification | RawNotification):
        return value
    return TemplateNotification(properties=MappingProxyType(dict(value)))
