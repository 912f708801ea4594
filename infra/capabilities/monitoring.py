"""Monitoring capability: CloudWatch alarm on the ECS service, optional SNS email."""

from typing import Any

import pulumi

from infra.capabilities.context import CapabilityContext
from infra.capabilities.registry import Phase, register
from infra.config import AlarmConfig
from infra.observability.alarms import create_alarm_topic, create_service_alarm


@register("monitoring", phase=Phase.MONITORING, requires=["compute"])
def monitoring_handler(
    section_config: dict[str, Any],
    ctx: CapabilityContext,
) -> None:
    """Create the utilization alarm; wire an SNS topic as action when notifyEmail is set."""
    config = ctx.config
    alarm = config.alarm or AlarmConfig()
    cluster = ctx.cluster
    ecs_service = ctx.ecs_service

    alarm_actions: list[Any] = []
    if alarm.notify_email:
        topic = create_alarm_topic(config.service_name, alarm.notify_email, ctx.aws_provider)
        alarm_actions.append(topic.arn)
        ctx.export("alarm_topic_arn", topic.arn)
        pulumi.log.info(
            f"Alarm notifications go to {alarm.notify_email} once the subscription is confirmed"
        )

    metric_alarm = create_service_alarm(
        config.service_name,
        alarm,
        cluster.name,
        ecs_service.name,
        alarm_actions,
        ctx.aws_provider,
    )
    ctx.export("alarm_name", metric_alarm.name)
