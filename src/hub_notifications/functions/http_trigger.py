"""HTTP trigger blueprint — hub configuration health check."""

import json
import logging

import azure.functions as func

from hub_notifications import __version__
from hub_notifications.config import load_config
from hub_notifications.hub.client import NotificationHubConfigError, parse_connection_string

logger = logging.getLogger(__name__)

bp = func.Blueprint()


def _json_response(payload: dict, status_code: int) -> func.HttpResponse:  # type: ignore[type-arg]
    return func.HttpResponse(
        json.dumps(payload), status_code=status_code, mimetype="application/json"
    )


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Report whether the notification hub settings load and parse.

    Returns 200 with the hub name and namespace endpoint when the settings are
    usable, or 503 naming the missing or malformed setting. The shared access
    key is never included in the response.
    """
    logger.info("[health_check] health check requested")

    try:
        config = load_config()
        endpoint, key_name, _ = parse_connection_string(config.hub_connection_string)
    except KeyError as exc:
        logger.warning("[health_check] hub setting missing; setting:%s", exc.args[0])
        return _json_response(
            {
                "status": "misconfigured",
                "version": __version__,
                "message": f"Missing setting: {exc.args[0]}",
            },
            status_code=503,
        )
    except NotificationHubConfigError as exc:
        logger.warning("[health_check] hub connection string invalid; error:%s", exc)
        return _json_response(
            {"status": "misconfigured", "version": __version__, "message": str(exc)},
            status_code=503,
        )

    return _json_response(
        {
            "status": "ok",
            "version": __version__,
            "hub": config.hub_name,
            "endpoint": endpoint,
            "key_name": key_name,
        },
        status_code=200,
    )
