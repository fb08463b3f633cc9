"""Azure Notification Hubs REST client with Shared Access Signature authentication."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import re
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import quote

from hub_notifications.notifications.builder import as_payload
from hub_notifications.notifications.models import (
    NotificationPayload,
    Platform,
    RawNotification,
    TemplateNotification,
)

if TYPE_CHECKING:
    from hub_notifications.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2015-01"
DEFAULT_SAS_TTL_SECONDS = 3600
DEFAULT_REQUEST_TIMEOUT = 30.0

# Oldest REST API version that accepts each platform format
_MIN_API_VERSIONS: dict[Platform, str] = {
    Platform.FCM: "2023-10-01",
}

# Connection string keys
CONN_ENDPOINT = "Endpoint"
CONN_KEY_NAME = "SharedAccessKeyName"
CONN_KEY = "SharedAccessKey"

# Request headers
HEADER_FORMAT = "ServiceBusNotification-Format"
HEADER_TAGS = "ServiceBusNotification-Tags"
HEADER_WNS_TYPE = "X-WNS-Type"

_JSON_CONTENT_TYPE = "application/json;charset=utf-8"
_CONTENT_TYPES: dict[Platform, str] = {
    Platform.TEMPLATE: _JSON_CONTENT_TYPE,
    Platform.WNS: "application/xml",
    Platform.APNS: _JSON_CONTENT_TYPE,
    Platform.FCM: _JSON_CONTENT_TYPE,
    Platform.ADM: _JSON_CONTENT_TYPE,
    Platform.BAIDU: "application/x-www-form-urlencoded",
}

_WNS_ROOT_TYPES = {"toast": "wns/toast", "tile": "wns/tile", "badge": "wns/badge"}
_XML_ROOT = re.compile(r"^\s*(?:<\?xml[^>]*\?>\s*)?<([A-Za-z]+)")


class NotificationHubConfigError(Exception):
    """Raised when the hub connection string is malformed."""


class NotificationHubApiError(Exception):
    """Raised when the Notification Hubs API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Notification Hubs error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def parse_connection_string(connection_string: str) -> tuple[str, str, str]:
    """Split a hub connection string into (https_endpoint, key_name, key).

    Args:
        connection_string: e.g. ``Endpoint=sb://ns.servicebus.windows.net/;
            SharedAccessKeyName=DefaultFullSharedAccessSignature;SharedAccessKey=...``

    Returns:
        Tuple of the HTTPS namespace endpoint (with trailing slash), key name and key.

    Raises:
        NotificationHubConfigError: If a required part is missing.
    """
    parts: dict[str, str] = {}
    for segment in connection_string.split(";"):
        if "=" not in segment:
            continue
        key, _, value = segment.partition("=")
        parts[key.strip()] = value.strip()

    missing = [k for k in (CONN_ENDPOINT, CONN_KEY_NAME, CONN_KEY) if not parts.get(k)]
    if missing:
        raise NotificationHubConfigError(
            f"Connection string is missing: {', '.join(missing)}"
        )

    endpoint = parts[CONN_ENDPOINT]
    if endpoint.startswith("sb://"):
        endpoint = "https://" + endpoint[len("sb://") :]
    if not endpoint.endswith("/"):
        endpoint += "/"
    return endpoint, parts[CONN_KEY_NAME], parts[CONN_KEY]


class NotificationHubClient:
    """Sends notifications to a single Azure Notification Hub."""

    def __init__(
        self,
        connection_string: str,
        hub_name: str,
        api_version: str = DEFAULT_API_VERSION,
        sas_ttl_seconds: int = DEFAULT_SAS_TTL_SECONDS,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialise the client from a namespace connection string.

        Args:
            connection_string: Notification Hubs namespace connection string.
            hub_name: Name of the hub within the namespace.
            api_version: REST API version query parameter.
            sas_ttl_seconds: Lifetime of each generated SAS token.
            request_timeout: Socket timeout for send requests, in seconds.

        Raises:
            NotificationHubConfigError: If the connection string is malformed.
        """
        self._endpoint, self._key_name, self._key = parse_connection_string(connection_string)
        self._hub_name = hub_name
        self._api_version = api_version
        self._sas_ttl_seconds = sas_ttl_seconds
        self._request_timeout = request_timeout

    @property
    def hub_url(self) -> str:
        return f"{self._endpoint}{self._hub_name}"

    def _generate_sas_token(self) -> str:
        """Build a SharedAccessSignature token scoped to the hub URL."""
        resource = quote(self.hub_url.lower(), safe="").lower()
        expiry = int(time.time()) + self._sas_ttl_seconds
        to_sign = f"{resource}\n{expiry}".encode()
        digest = hmac.new(self._key.encode("utf-8"), to_sign, hashlib.sha256).digest()
        signature = quote(base64.b64encode(digest).decode("ascii"), safe="")
        return (
            f"SharedAccessSignature sr={resource}&sig={signature}"
            f"&se={expiry}&skn={self._key_name}"
        )

    @staticmethod
    def _body(payload: NotificationPayload) -> bytes:
        if isinstance(payload, TemplateNotification):
            return json.dumps(dict(payload.properties)).encode("utf-8")
        return payload.markup.encode("utf-8")

    @staticmethod
    def _headers(payload: NotificationPayload, tag_expression: str | None) -> dict[str, str]:
        platform = payload.platform
        headers = {
            HEADER_FORMAT: platform.value,
            "Content-Type": _CONTENT_TYPES[platform],
        }
        if isinstance(payload, RawNotification) and platform is Platform.WNS:
            wns_type = wns_type_for(payload.markup)
            headers[HEADER_WNS_TYPE] = wns_type
            if wns_type == "wns/raw":
                headers["Content-Type"] = "application/octet-stream"
        if tag_expression:
            headers[HEADER_TAGS] = tag_expression
        return headers

    def _api_version_for(self, platform: Platform) -> str:
        """Return the configured API version, raised to the platform minimum if older."""
        required = _MIN_API_VERSIONS.get(platform)
        if required is None:
            return self._api_version
        return max(self._api_version, required)

    def send(
        self,
        payload: NotificationPayload | Mapping[str, str],
        tag_expression: str | None = None,
    ) -> None:
        """Send a notification to every registration matching the tag expression.

        Without a tag expression the notification is broadcast to all
        registrations of the payload's platform (or all template registrations).

        Args:
            payload: Template or raw platform notification, or a bare template
                properties mapping.
            tag_expression: Optional tag or tag expression to route on.

        Raises:
            NotificationHubApiError: If the hub rejects the request.
        """
        payload = as_payload(payload)
        api_version = self._api_version_for(payload.platform)
        url = f"{self.hub_url}/messages/?api-version={api_version}"
        headers = self._headers(payload, tag_expression)
        headers["Authorization"] = self._generate_sas_token()
        req = urllib_request.Request(
            url,
            data=self._body(payload),
            headers=headers,
            method="POST",
        )
        try:
            with urllib_request.urlopen(req, timeout=self._request_timeout) as resp:
                resp.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace").strip() or exc.reason
            logger.error(
                "[send] hub rejected notification; status:%d;format:%s",
                exc.code,
                payload.platform.value,
            )
            raise NotificationHubApiError(exc.code, detail) from exc

        logger.info(
            "[send] notification sent; hub:%s;format:%s;tags:%s",
            self._hub_name,
            payload.platform.value,
            tag_expression or "-",
        )


def wns_type_for(markup: str) -> str:
    """Return the X-WNS-Type for a WNS payload based on its root element."""
    match = _XML_ROOT.match(markup)
    if match is None:
        return "wns/raw"
    return _WNS_ROOT_TYPES.get(match.group(1).lower(), "wns/raw")


def notification_hub_client_from_config(config: AppConfig) -> NotificationHubClient:
    """Construct a NotificationHubClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured NotificationHubClient instance.
    """
    return NotificationHubClient(
        connection_string=config.hub_connection_string,
        hub_name=config.hub_name,
        api_version=config.api_version,
        sas_ttl_seconds=config.sas_ttl_seconds,
        request_timeout=config.request_timeout,
    )
