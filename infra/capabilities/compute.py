"""Compute capability: ECS (optional ECR, cluster, task definition, Fargate service)."""

import os
from typing import Any

import pulumi

from infra.capabilities.context import CapabilityContext
from infra.capabilities.registry import Phase, register
from infra.compute.ecr import create_ecr_repository
from infra.compute.ecs_cluster import create_ecs_cluster
from infra.compute.ecs_service import create_ecs_service
from infra.compute.ecs_task import create_task_definition


def _collect_container_secrets(names: list[str]) -> list[dict[str, str]]:
    container_secrets: list[dict[str, str]] = []
    for name in names:
        value = os.environ.get(name)
        if value:
            container_secrets.append({"name": name, "value": value})
            pulumi.log.info(f"Secret '{name}' will be passed to container")
        else:
            pulumi.log.warn(
                f"Secret '{name}' declared in stack.yaml but not found in environment"
            )
    return container_secrets


@register("compute", phase=Phase.COMPUTE)
def compute_handler(
    section_config: dict[str, Any],
    ctx: CapabilityContext,
) -> None:
    """Provision ECS path: image source, cluster, task definition, service.

    Needs the foundation security group and roles; uses the log group when logging ran.
    Section_config is ignored; config comes from ctx.config.
    """
    config = ctx.config
    aws_provider = ctx.aws_provider

    security_group = ctx.security_group
    task_role = ctx.task_role
    exec_role = ctx.exec_role
    log_group = ctx.log_group

    if config.container.image:
        image_uri: Any = config.container.image
    else:
        ecr_repo = create_ecr_repository(config.service_name, aws_provider)
        image_uri = pulumi.Output.concat(ecr_repo.repository_url, ":latest")
        ctx.export("ecr_repository_uri", ecr_repo.repository_url)
        pulumi.log.info(f"No image set; service will run {config.service_name}:latest from ECR")

    cluster = create_ecs_cluster(
        config.service_name,
        config.container.container_insights,
        aws_provider,
    )
    task_def = create_task_definition(
        config,
        image_uri,
        task_role,
        exec_role,
        _collect_container_secrets(config.secrets),
        aws_provider,
        log_group=log_group,
    )
    ecs_service = create_ecs_service(
        config=config,
        cluster=cluster,
        task_def=task_def,
        security_group=security_group,
        subnet_ids=ctx.network.subnet_ids,
        aws_provider=aws_provider,
    )

    ctx.set_ecs(cluster, ecs_service)

    ctx.export("image_uri", image_uri)
    ctx.export("ecs_cluster_name", cluster.name)
    ctx.export("ecs_cluster_arn", cluster.arn)
    ctx.export("ecs_service_name", ecs_service.name)
    ctx.export("task_definition_arn", task_def.arn)
    ctx.export("variant", config.variant)
