"""ECS task definition and container definition builder."""

import json
from typing import Any

import pulumi
import pulumi_aws

from infra.config import StackConfig


def sanitize_container_name(service_name: str) -> str:
    """Container name for ECS; replace . and / with -."""
    return service_name.replace(".", "-").replace("/", "-")[:255]


def health_check_command(port: int, path: str) -> list[str]:
    """Container health check using the image's own Python (slim images ship no curl)."""
    url = f"http://localhost:{port}{path}"
    return [
        "CMD-SHELL",
        f"python -c \"import urllib.request; urllib.request.urlopen('{url}', timeout=3)\" || exit 1",
    ]


def container_environment(
    config: StackConfig,
    container_secrets: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Flask defaults, then user environment, then secrets; one entry per name.

    A later source replaces an earlier value for the same name but keeps its position.
    """
    port = str(config.container_port)
    env: dict[str, str] = {
        "PYTHONUNBUFFERED": "1",
        "FLASK_RUN_HOST": "0.0.0.0",
        "FLASK_RUN_PORT": port,
        "PORT": port,
    }
    for name, value in sorted(config.container.environment.items()):
        env[name] = value
    for secret in container_secrets:
        env[secret["name"]] = secret["value"]
    return [{"name": k, "value": v} for k, v in env.items()]


def _make_container_def(
    uri: str,
    config: StackConfig,
    container_secrets: list[dict[str, Any]],
    log_group_name: str | None = None,
) -> str:
    """Build ECS container definition JSON string for the Flask container."""
    port = config.container_port
    container_spec: dict[str, Any] = {
        "name": sanitize_container_name(config.service_name),
        "image": uri,
        "essential": True,
        "portMappings": [
            {
                "containerPort": port,
                "hostPort": port,
                "protocol": "tcp",
                "name": "http",
            }
        ],
        "environment": container_environment(config, container_secrets),
        "healthCheck": {
            "command": health_check_command(port, config.container.health_path),
            "interval": 30,
            "timeout": 5,
            "retries": 3,
            "startPeriod": 15,
        },
    }
    if log_group_name is not None:
        stream_prefix = config.logging.stream_prefix if config.logging else "ecs"
        container_spec["logConfiguration"] = {
            "logDriver": "awslogs",
            "options": {
                "awslogs-region": config.region,
                "awslogs-group": log_group_name,
                "awslogs-stream-prefix": stream_prefix,
            },
        }
    return json.dumps([container_spec])


def create_task_definition(
    config: StackConfig,
    image_uri: pulumi.Input[str],
    task_role: pulumi_aws.iam.Role,
    exec_role: pulumi_aws.iam.Role,
    container_secrets: list[dict[str, Any]],
    aws_provider: pulumi_aws.Provider,
    log_group: pulumi_aws.cloudwatch.LogGroup | None = None,
) -> pulumi_aws.ecs.TaskDefinition:
    """Create ECS Fargate task definition for the Flask container.

    When secret values are embedded, the container definitions are marked as a
    Pulumi secret so they are encrypted in state and masked in previews.
    """
    if log_group is not None:
        container_def = pulumi.Output.all(image_uri, log_group.name).apply(
            lambda args: _make_container_def(args[0], config, container_secrets, log_group_name=args[1])
        )
        depends_on = [log_group]
    else:
        container_def = pulumi.Output.from_input(image_uri).apply(
            lambda uri: _make_container_def(uri, config, container_secrets)
        )
        depends_on = []
    secret_outputs: list[str] = []
    if container_secrets:
        container_def = pulumi.Output.secret(container_def)
        secret_outputs = ["container_definitions"]
    return pulumi_aws.ecs.TaskDefinition(
        f"{config.service_name}_task",
        family=config.service_name,
        cpu=config.cpu,
        memory=config.memory,
        network_mode="awsvpc",
        requires_compatibilities=["FARGATE"],
        execution_role_arn=exec_role.arn,
        task_role_arn=task_role.arn,
        container_definitions=container_def,
        runtime_platform=pulumi_aws.ecs.TaskDefinitionRuntimePlatformArgs(
            operating_system_family="LINUX",
            cpu_architecture="X86_64",
        ),
        opts=pulumi.ResourceOptions(
            provider=aws_provider,
            depends_on=depends_on,
            additional_secret_outputs=secret_outputs,
        ),
    )
