"""Tests for log group and alarm modules."""

from unittest.mock import MagicMock, patch

from infra.config import AlarmConfig
from infra.observability.alarms import alarm_name, create_alarm_topic, create_service_alarm
from infra.observability.log_group import create_log_group, log_group_name


@patch("infra.observability.log_group.pulumi_aws.cloudwatch.LogGroup")
def test_create_log_group(mock_group: MagicMock) -> None:
    create_log_group("flask-app", 14, MagicMock())

    call_kw = mock_group.call_args[1]
    assert call_kw["name"] == "/ecs/flask-app"
    assert call_kw["retention_in_days"] == 14
    assert log_group_name("flask-app") == "/ecs/flask-app"


@patch("infra.observability.alarms.pulumi_aws.sns.TopicSubscription")
@patch("infra.observability.alarms.pulumi_aws.sns.Topic")
def test_create_alarm_topic(mock_topic: MagicMock, mock_sub: MagicMock) -> None:
    """Topic gets one email subscription."""
    mock_topic.return_value.arn = "arn:sns:topic"

    topic = create_alarm_topic("flask-app", "oncall@example.com", MagicMock())

    assert topic.arn == "arn:sns:topic"
    assert mock_topic.call_args[1]["name"] == "flask-app-alarms"
    sub_kw = mock_sub.call_args[1]
    assert sub_kw["topic"] == "arn:sns:topic"
    assert sub_kw["protocol"] == "email"
    assert sub_kw["endpoint"] == "oncall@example.com"


@patch("infra.observability.alarms.pulumi_aws.cloudwatch.MetricAlarm")
def test_create_service_alarm(mock_alarm: MagicMock) -> None:
    """Alarm watches AWS/ECS for the cluster/service pair."""
    alarm = AlarmConfig(metric="MemoryUtilization", threshold=85.0, evaluation_periods=3, period=60)

    create_service_alarm("flask-app", alarm, "cluster-name", "svc-name", ["arn:sns"], MagicMock())

    call_kw = mock_alarm.call_args[1]
    assert call_kw["name"] == "flask-app-memoryutilization-high"
    assert call_kw["namespace"] == "AWS/ECS"
    assert call_kw["metric_name"] == "MemoryUtilization"
    assert call_kw["comparison_operator"] == "GreaterThanOrEqualToThreshold"
    assert call_kw["threshold"] == 85.0
    assert call_kw["evaluation_periods"] == 3
    assert call_kw["period"] == 60
    assert call_kw["dimensions"] == {"ClusterName": "cluster-name", "ServiceName": "svc-name"}
    assert call_kw["alarm_actions"] == ["arn:sns"]
    assert call_kw["alarm_description"] == "MemoryUtilization >= 85% for flask-app"


def test_alarm_name() -> None:
    assert alarm_name("flask-app", "CPUUtilization") == "flask-app-cpuutilization-high"
