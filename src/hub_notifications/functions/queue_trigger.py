"""Queue trigger blueprint — sends a notification to the user tag carried by each item."""

import logging

import azure.functions as func

from hub_notifications.config import load_config
from hub_notifications.notifications.builder import build_raw_payload
from hub_notifications.notifications.models import Platform, RoutingRecord
from hub_notifications.notifications.tags import InvalidRoutingRecord, resolve_tag_expression
from hub_notifications.orchestration.dispatcher import notification_dispatcher_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()

ROUTING_QUEUE = "queue"

# Pre-serialized template properties, sent as the body of a template notification
TEMPLATE_PROPERTIES_JSON = '{"message":"Hello","location":"Redmond"}'


@bp.queue_trigger(arg_name="msg", queue_name=ROUTING_QUEUE, connection="AzureWebJobsStorage")
def send_to_user_tag(msg: func.QueueMessage) -> None:
    """Send a template notification to the registrations tagged with the item's user.

    The queue item is a JSON object with ``UserIdTag`` and ``UserName``. Items
    with an empty tag are rejected and left to the host's poison-queue handling.
    """
    logger.info("[send_to_user_tag] queue item received; id:%s", msg.id)

    try:
        config = load_config()
        record = RoutingRecord.from_queue_message(msg.get_body())
        tag_expression = resolve_tag_expression(record, config.tag_pattern)
        dispatcher = notification_dispatcher_from_config(config)
        payload = build_raw_payload(Platform.TEMPLATE, TEMPLATE_PROPERTIES_JSON)
        dispatcher.send(payload, tag_expression)
        logger.info(
            "[send_to_user_tag] notification routed; tag_expression:%s;user:%s",
            tag_expression,
            record.display_name,
        )

    except InvalidRoutingRecord:
        logger.warning("[send_to_user_tag] rejected queue item; id:%s", msg.id)
        raise
    except Exception:
        logger.exception("[send_to_user_tag] send failed")
        raise
