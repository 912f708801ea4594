"""Tests for the monitoring capability handler."""

from unittest.mock import MagicMock, patch

import pytest

import infra.capabilities.monitoring  # noqa: F401 - register monitoring capability
from infra.capabilities.context import CapabilityContext
from infra.capabilities.registry import CAPABILITIES
from infra.config import AlarmConfig, StackConfig


def _make_ctx(alarm: AlarmConfig) -> CapabilityContext:
    config = StackConfig(
        service_name="test-svc",
        region="us-east-1",
        raw_spec={"container": {}},
        alarm=alarm,
    )
    ctx = CapabilityContext(config=config, network=MagicMock(), aws_provider=MagicMock())
    cluster = MagicMock()
    cluster.name = "test-svc"
    service = MagicMock()
    service.name = "test-svc"
    ctx.set_ecs(cluster, service)
    return ctx


@patch("infra.capabilities.monitoring.create_alarm_topic")
@patch("infra.capabilities.monitoring.create_service_alarm")
def test_monitoring_handler_without_email(
    mock_alarm: MagicMock,
    mock_topic: MagicMock,
) -> None:
    """No notifyEmail: alarm has no actions and no topic is created."""
    alarm = AlarmConfig()
    ctx = _make_ctx(alarm)

    CAPABILITIES["monitoring"].handler({}, ctx)

    mock_topic.assert_not_called()
    mock_alarm.assert_called_once_with("test-svc", alarm, "test-svc", "test-svc", [], ctx.aws_provider)
    assert ctx.exports["alarm_name"] is mock_alarm.return_value.name
    assert "alarm_topic_arn" not in ctx.exports


@patch("infra.capabilities.monitoring.create_alarm_topic")
@patch("infra.capabilities.monitoring.create_service_alarm")
def test_monitoring_handler_with_email(
    mock_alarm: MagicMock,
    mock_topic: MagicMock,
) -> None:
    """notifyEmail: SNS topic arn becomes the alarm action."""
    mock_topic.return_value.arn = "arn:aws:sns:us-east-1:123:test-svc-alarms"
    ctx = _make_ctx(AlarmConfig(notify_email="oncall@example.com"))

    CAPABILITIES["monitoring"].handler({}, ctx)

    mock_topic.assert_called_once_with("test-svc", "oncall@example.com", ctx.aws_provider)
    assert mock_alarm.call_args[0][4] == ["arn:aws:sns:us-east-1:123:test-svc-alarms"]
    assert ctx.exports["alarm_topic_arn"] == "arn:aws:sns:us-east-1:123:test-svc-alarms"


def test_monitoring_handler_requires_compute_outputs() -> None:
    config = StackConfig(service_name="test-svc", region="us-east-1", raw_spec={})
    ctx = CapabilityContext(config=config, network=MagicMock(), aws_provider=MagicMock())
    with pytest.raises(RuntimeError, match="ecs.cluster"):
        CAPABILITIES["monitoring"].handler({}, ctx)
