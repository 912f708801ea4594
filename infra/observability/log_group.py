"""CloudWatch log group for container logs."""

import pulumi
import pulumi_aws


def log_group_name(service_name: str) -> str:
    return f"/ecs/{service_name}"


def create_log_group(
    service_name: str,
    retention_days: int,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.cloudwatch.LogGroup:
    """Create the /ecs/<service> log group with the given retention."""
    return pulumi_aws.cloudwatch.LogGroup(
        f"{service_name}_logs",
        name=log_group_name(service_name),
        retention_in_days=retention_days,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
