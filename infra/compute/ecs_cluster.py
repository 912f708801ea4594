"""ECS cluster."""

import pulumi
import pulumi_aws


def create_ecs_cluster(
    service_name: str,
    container_insights: bool,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ecs.Cluster:
    """Create ECS cluster for the service."""
    return pulumi_aws.ecs.Cluster(
        f"{service_name}_cluster",
        name=service_name,
        settings=[
            pulumi_aws.ecs.ClusterSettingArgs(
                name="containerInsights",
                value="enabled" if container_insights else "disabled",
            )
        ],
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
