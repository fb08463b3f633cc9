"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

# Setting names shared with the Functions host binding conventions
ENV_HUB_CONNECTION_STRING = "AzureWebJobsNotificationHubsConnectionString"
ENV_HUB_NAME = "AzureWebJobsNotificationHubName"


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Hub tuning values
    have sensible defaults but can be overridden via environment variables.
    """

    # Required — no defaults, fail at startup if missing
    hub_connection_string: str
    hub_name: str

    # Tuning — defaults provided, overridable via env
    tag_pattern: str = "{tag}"
    api_version: str = "2015-01"
    sas_ttl_seconds: int = 3600
    request_timeout: float = 30.0


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        AzureWebJobsNotificationHubsConnectionString: Notification Hubs namespace
            connection string (Endpoint, SharedAccessKeyName, SharedAccessKey).
        AzureWebJobsNotificationHubName: Name of the notification hub to send to.

    Optional environment variables (with defaults):
        NH_TAG_PATTERN: Tag expression pattern with a ``{tag}`` placeholder (default: {tag}).
        NH_API_VERSION: Notification Hubs REST API version (default: 2015-01).
        NH_SAS_TTL_SECONDS: Lifetime of generated SAS tokens (default: 3600).
        NH_REQUEST_TIMEOUT: HTTP timeout in seconds for send requests (default: 30).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        hub_connection_string=os.environ[ENV_HUB_CONNECTION_STRING],
        hub_name=os.environ[ENV_HUB_NAME],
        tag_pattern=os.environ.get("NH_TAG_PATTERN", "{tag}"),
        api_version=os.environ.get("NH_API_VERSION", "2015-01"),
        sas_ttl_seconds=int(os.environ.get("NH_SAS_TTL_SECONDS", "3600")),
        request_timeout=float(os.environ.get("NH_REQUEST_TIMEOUT", "30")),
    )
