"""ECS Fargate service."""

import pulumi
import pulumi_aws

from infra.config import StackConfig


def sanitize_ecs_service_name(service_name: str) -> str:
    """ECS service name must be <= 32 chars; replace . and / with _."""
    return service_name.replace(".", "_").replace("/", "_")[:32]


def create_ecs_service(
    config: StackConfig,
    cluster: pulumi_aws.ecs.Cluster,
    task_def: pulumi_aws.ecs.TaskDefinition,
    security_group: pulumi_aws.ec2.SecurityGroup,
    subnet_ids: list[str],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ecs.Service:
    """Create ECS Fargate service; public IP assignment follows the network variant."""
    return pulumi_aws.ecs.Service(
        f"{config.service_name}_svc",
        name=sanitize_ecs_service_name(config.service_name),
        cluster=cluster.arn,
        task_definition=task_def.arn,
        desired_count=config.container.desired_count,
        launch_type="FARGATE",
        network_configuration=pulumi_aws.ecs.ServiceNetworkConfigurationArgs(
            assign_public_ip=config.network.assign_public_ip,
            subnets=subnet_ids,
            security_groups=[security_group.id],
        ),
        deployment_circuit_breaker=pulumi_aws.ecs.ServiceDeploymentCircuitBreakerArgs(
            enable=True,
            rollback=True,
        ),
        deployment_minimum_healthy_percent=100,
        deployment_maximum_percent=200,
        wait_for_steady_state=False,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
