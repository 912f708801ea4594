"""Logging capability: CloudWatch log group and the task role's write policy."""

from typing import Any

from infra.capabilities.context import CapabilityContext
from infra.capabilities.registry import Phase, register
from infra.iam.roles import create_log_write_policy
from infra.observability.log_group import create_log_group


@register("logging", phase=Phase.INFRASTRUCTURE)
def logging_handler(
    section_config: dict[str, Any],
    ctx: CapabilityContext,
) -> None:
    """Create /ecs/<service> log group; let the task role write to it when present."""
    config = ctx.config
    retention_days = config.logging.retention_days if config.logging else 7

    log_group = create_log_group(config.service_name, retention_days, ctx.aws_provider)
    ctx.set_log_group(log_group)

    if ctx.has_task_role:
        create_log_write_policy(config.service_name, ctx.task_role, log_group.arn, ctx.aws_provider)

    ctx.export("log_group_name", log_group.name)
