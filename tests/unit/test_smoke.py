"""Smoke tests — validate the function app triggers end-to-end with a mocked hub."""

import json
import os
from unittest.mock import MagicMock, patch

import azure.functions as func
import pytest

from hub_notifications.notifications.models import Platform, RawNotification
from hub_notifications.notifications.tags import InvalidRoutingRecord


def _user_function(decorated):  # type: ignore[no-untyped-def]
    """Unwrap a blueprint-decorated function into the plain callable the host invokes."""
    return decorated.build().get_user_function()


def _timer() -> MagicMock:
    mock_timer = MagicMock(spec=func.TimerRequest)
    mock_timer.past_due = False
    return mock_timer


def _queue_message(body: dict) -> MagicMock:  # type: ignore[type-arg]
    msg = MagicMock(spec=func.QueueMessage)
    msg.id = "msg-1"
    msg.get_body.return_value = json.dumps(body).encode()
    return msg


def _run_timer(name: str) -> MagicMock:
    """Run a timer function with config and dispatcher patched; return the dispatcher mock."""
    from hub_notifications.functions import timer_trigger

    mock_dispatcher = MagicMock()
    with (
        patch("hub_notifications.functions.timer_trigger.load_config"),
        patch(
            "hub_notifications.functions.timer_trigger.notification_dispatcher_from_config",
            return_value=mock_dispatcher,
        ),
    ):
        _user_function(getattr(timer_trigger, name))(_timer())
    return mock_dispatcher


def _sent_payload(mock_dispatcher: MagicMock):  # type: ignore[no-untyped-def]
    mock_dispatcher.send.assert_called_once()
    return mock_dispatcher.send.call_args[0][0]


# ---------------------------------------------------------------------------
# Timer trigger tests
# ---------------------------------------------------------------------------


class TestTimerTriggers:
    def test_send_template_notification(self) -> None:
        payload = _sent_payload(_run_timer("send_template_notification"))
        assert dict(payload.properties) == {"message": "Hello"}

    def test_send_windows_notification(self) -> None:
        payload = _sent_payload(_run_timer("send_windows_notification"))
        assert isinstance(payload, RawNotification)
        assert payload.platform is Platform.WNS
        assert "Test message" in payload.markup

    def test_send_template_properties_sends_serialized_string(self) -> None:
        payload = _sent_payload(_run_timer("send_template_properties"))
        assert isinstance(payload, RawNotification)
        assert payload.platform is Platform.TEMPLATE
        assert json.loads(payload.markup) == {"message": "Hello", "location": "Redmond"}

    def test_send_template_dictionary_sends_bare_mapping(self) -> None:
        payload = _sent_payload(_run_timer("send_template_dictionary"))
        assert dict(payload) == {"message": "Hello"}

    def test_every_sample_timer_is_registered(self) -> None:
        from hub_notifications.functions import timer_trigger

        names = [
            "send_template_notification",
            "send_windows_notification",
            "send_template_properties",
            "send_windows_string",
            "send_notification_batch",
            "send_collected_notifications",
            "send_template_dictionary",
        ]
        for name in names:
            assert _user_function(getattr(timer_trigger, name)).__name__ == name

    def test_send_windows_string(self) -> None:
        payload = _sent_payload(_run_timer("send_windows_string"))
        assert payload.platform is Platform.WNS
        assert payload.markup.startswith("<toast>")

    def test_send_notification_batch(self) -> None:
        mock_dispatcher = _run_timer("send_notification_batch")
        payloads = mock_dispatcher.send_all.call_args[0][0]
        assert [p.properties["message"] for p in payloads] == ["Message1", "Message2"]

    def test_send_collected_notifications_flushes(self) -> None:
        mock_dispatcher = _run_timer("send_collected_notifications")
        collector = mock_dispatcher.collector.return_value
        added = [c.args[0].properties["message"] for c in collector.add.call_args_list]
        assert added == ["Hello", "World"]
        collector.flush.assert_called_once()

    def test_failure_is_reraised(self) -> None:
        from hub_notifications.functions.timer_trigger import send_template_notification

        with (
            patch(
                "hub_notifications.functions.timer_trigger.load_config",
                side_effect=KeyError("AzureWebJobsNotificationHubName"),
            ),
            pytest.raises(KeyError),
        ):
            _user_function(send_template_notification)(_timer())


# ---------------------------------------------------------------------------
# Queue trigger tests
# ---------------------------------------------------------------------------


class TestQueueTrigger:
    def test_routes_to_user_tag(self) -> None:
        from hub_notifications.config import AppConfig
        from hub_notifications.functions.queue_trigger import send_to_user_tag

        mock_dispatcher = MagicMock()
        config = AppConfig(hub_connection_string="conn", hub_name="hub", tag_pattern="{tag}")
        with (
            patch("hub_notifications.functions.queue_trigger.load_config", return_value=config),
            patch(
                "hub_notifications.functions.queue_trigger.notification_dispatcher_from_config",
                return_value=mock_dispatcher,
            ),
        ):
            _user_function(send_to_user_tag)(
                _queue_message({"UserIdTag": "alice123", "UserName": "Alice"})
            )

        payload, tag_expression = mock_dispatcher.send.call_args[0]
        assert tag_expression == "alice123"
        assert payload.platform is Platform.TEMPLATE
        assert json.loads(payload.markup) == {"message": "Hello", "location": "Redmond"}

    def test_empty_tag_is_rejected_without_sending(self) -> None:
        from hub_notifications.config import AppConfig
        from hub_notifications.functions.queue_trigger import send_to_user_tag

        mock_dispatcher = MagicMock()
        config = AppConfig(hub_connection_string="conn", hub_name="hub")
        with (
            patch("hub_notifications.functions.queue_trigger.load_config", return_value=config),
            patch(
                "hub_notifications.functions.queue_trigger.notification_dispatcher_from_config",
                return_value=mock_dispatcher,
            ),
            pytest.raises(InvalidRoutingRecord),
        ):
            _user_function(send_to_user_tag)(_queue_message({"UserIdTag": "", "UserName": "N"}))

        mock_dispatcher.send.assert_not_called()


# ---------------------------------------------------------------------------
# HTTP trigger tests
# ---------------------------------------------------------------------------


_HUB_ENV = {
    "AzureWebJobsNotificationHubsConnectionString": (
        "Endpoint=sb://test-ns.servicebus.windows.net/;"
        "SharedAccessKeyName=DefaultFullSharedAccessSignature;SharedAccessKey=c2VjcmV0"
    ),
    "AzureWebJobsNotificationHubName": "test-hub",
}


class TestHealthCheck:
    def _call(self, env: dict) -> func.HttpResponse:  # type: ignore[type-arg]
        from hub_notifications.functions.http_trigger import health_check

        with patch.dict(os.environ, env, clear=True):
            return _user_function(health_check)(MagicMock(spec=func.HttpRequest))

    def test_reports_hub_when_configuration_is_valid(self) -> None:
        response = self._call(_HUB_ENV)

        assert response.status_code == 200
        body = json.loads(response.get_body())
        assert body["status"] == "ok"
        assert body["version"] == "0.1.0"
        assert body["hub"] == "test-hub"
        assert body["endpoint"] == "https://test-ns.servicebus.windows.net/"

    def test_never_exposes_shared_access_key(self) -> None:
        response = self._call(_HUB_ENV)
        assert b"c2VjcmV0" not in response.get_body()

    def test_missing_setting_returns_503(self) -> None:
        env = {k: v for k, v in _HUB_ENV.items() if k != "AzureWebJobsNotificationHubName"}
        response = self._call(env)

        assert response.status_code == 503
        body = json.loads(response.get_body())
        assert body["status"] == "misconfigured"
        assert "AzureWebJobsNotificationHubName" in body["message"]

    def test_malformed_connection_string_returns_503(self) -> None:
        env = {**_HUB_ENV, "AzureWebJobsNotificationHubsConnectionString": "Endpoint=sb://x/"}
        response = self._call(env)

        assert response.status_code == 503
        body = json.loads(response.get_body())
        assert body["status"] == "misconfigured"
        assert "SharedAccessKey" in body["message"]
