"""Timer trigger blueprint — scheduled notification senders."""

import logging

import azure.functions as func

from hub_notifications.config import load_config
from hub_notifications.notifications.builder import (
    TOAST_TEXT01_TEMPLATE,
    build_raw_payload,
    build_template,
    build_template_notification,
    windows_toast,
)
from hub_notifications.notifications.models import Platform
from hub_notifications.orchestration.dispatcher import notification_dispatcher_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()

TOAST_MESSAGE = "Test message"

# Pre-serialized template properties, sent as the body of a template notification
TEMPLATE_PROPERTIES_JSON = '{"message":"Hello","location":"Redmond"}'


def _log_past_due(timer: func.TimerRequest, name: str) -> None:
    if timer.past_due:
        logger.warning("[%s] timer is past due", name)


@bp.timer_trigger(schedule="*/15 * * * * *", arg_name="timer", run_on_startup=False)
def send_template_notification(timer: func.TimerRequest) -> None:
    """Broadcast a "Hello" template notification to all template registrations."""
    _log_past_due(timer, "send_template_notification")
    try:
        dispatcher = notification_dispatcher_from_config(load_config())
        dispatcher.send(build_template_notification("Hello"))
    except Exception:
        logger.exception("[send_template_notification] send failed")
        raise


@bp.timer_trigger(schedule="*/30 * * * * *", arg_name="timer", run_on_startup=False)
def send_windows_notification(timer: func.TimerRequest) -> None:
    """Broadcast a native WNS toast to all registered Windows clients."""
    _log_past_due(timer, "send_windows_notification")
    try:
        dispatcher = notification_dispatcher_from_config(load_config())
        dispatcher.send(windows_toast(TOAST_MESSAGE))
    except Exception:
        logger.exception("[send_windows_notification] send failed")
        raise


@bp.timer_trigger(schedule="*/15 * * * * *", arg_name="timer", run_on_startup=False)
def send_template_properties(timer: func.TimerRequest) -> None:
    """Broadcast a template notification from a pre-serialized properties string."""
    _log_past_due(timer, "send_template_properties")
    try:
        dispatcher = notification_dispatcher_from_config(load_config())
        dispatcher.send(build_raw_payload(Platform.TEMPLATE, TEMPLATE_PROPERTIES_JSON))
    except Exception:
        logger.exception("[send_template_properties] send failed")
        raise


@bp.timer_trigger(schedule="*/45 * * * * *", arg_name="timer", run_on_startup=False)
def send_windows_string(timer: func.TimerRequest) -> None:
    """Broadcast a WNS toast built from a literal markup string."""
    _log_past_due(timer, "send_windows_string")
    try:
        markup = TOAST_TEXT01_TEMPLATE.format(text=TOAST_MESSAGE)
        dispatcher = notification_dispatcher_from_config(load_config())
        dispatcher.send(build_raw_payload(Platform.WNS, markup))
    except Exception:
        logger.exception("[send_windows_string] send failed")
        raise


@bp.timer_trigger(schedule="*/30 * * * * *", arg_name="timer", run_on_startup=False)
def send_notification_batch(timer: func.TimerRequest) -> None:
    """Send an ordered batch of template notifications."""
    _log_past_due(timer, "send_notification_batch")
    try:
        dispatcher = notification_dispatcher_from_config(load_config())
        sent = dispatcher.send_all(
            [build_template_notification("Message1"), build_template_notification("Message2")]
        )
        logger.info("[send_notification_batch] batch complete; sent_count:%d", sent)
    except Exception:
        logger.exception("[send_notification_batch] send failed")
        raise


@bp.timer_trigger(schedule="*/15 * * * * *", arg_name="timer", run_on_startup=False)
def send_collected_notifications(timer: func.TimerRequest) -> None:
    """Collect notifications during the run and commit them with one flush."""
    _log_past_due(timer, "send_collected_notifications")
    try:
        collector = notification_dispatcher_from_config(load_config()).collector()
        collector.add(build_template_notification("Hello"))
        collector.add(build_template_notification("World"))
        collector.flush()
    except Exception:
        logger.exception("[send_collected_notifications] send failed")
        raise


@bp.timer_trigger(schedule="*/15 * * * * *", arg_name="timer", run_on_startup=False)
def send_template_dictionary(timer: func.TimerRequest) -> None:
    """Broadcast a bare template-properties dictionary as a template notification."""
    _log_past_due(timer, "send_template_dictionary")
    try:
        dispatcher = notification_dispatcher_from_config(load_config())
        dispatcher.send(build_template("Hello"))
    except Exception:
        logger.exception("[send_template_dictionary] send failed")
        raise
