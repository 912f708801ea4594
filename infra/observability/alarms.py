"""CloudWatch alarm on the ECS service, with an optional SNS email topic."""

import pulumi
import pulumi_aws

from infra.config import AlarmConfig


def alarm_name(service_name: str, metric: str) -> str:
    return f"{service_name}-{metric.lower()}-high"


def create_alarm_topic(
    service_name: str,
    email: str,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.sns.Topic:
    """Create SNS topic with an email subscription (needs confirmation by the recipient)."""
    topic = pulumi_aws.sns.Topic(
        f"{service_name}_alarm_topic",
        name=f"{service_name}-alarms",
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.sns.TopicSubscription(
        f"{service_name}_alarm_email",
        topic=topic.arn,
        protocol="email",
        endpoint=email,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    return topic


def create_service_alarm(
    service_name: str,
    alarm: AlarmConfig,
    cluster_name: pulumi.Input[str],
    ecs_service_name: pulumi.Input[str],
    alarm_actions: list[pulumi.Input[str]],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.cloudwatch.MetricAlarm:
    """Create metric alarm on AWS/ECS utilization for the service."""
    return pulumi_aws.cloudwatch.MetricAlarm(
        f"{service_name}_alarm",
        name=alarm_name(service_name, alarm.metric),
        comparison_operator="GreaterThanOrEqualToThreshold",
        evaluation_periods=alarm.evaluation_periods,
        metric_name=alarm.metric,
        namespace="AWS/ECS",
        period=alarm.period,
        statistic=alarm.statistic,
        threshold=alarm.threshold,
        alarm_description=f"{alarm.metric} >= {alarm.threshold:g}% for {service_name}",
        treat_missing_data="missing",
        alarm_actions=alarm_actions,
        ok_actions=alarm_actions,
        dimensions={
            "ClusterName": cluster_name,
            "ServiceName": ecs_service_name,
        },
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
