"""Foundation provisioning: security group and IAM roles shared by capabilities."""

from infra.capabilities.context import CapabilityContext
from infra.config import NETWORK_MODE_TAGGED


def _ingress_cidrs(ctx: CapabilityContext) -> list[str]:
    network = ctx.config.network
    if network.ingress_cidrs:
        return list(network.ingress_cidrs)
    if network.mode == NETWORK_MODE_TAGGED:
        return [ctx.network.vpc_cidr]
    return ["0.0.0.0/0"]


def provision_foundation(spec_sections: dict, ctx: CapabilityContext) -> None:
    """Create the service security group and IAM roles when compute is declared.

    Imports security_groups and iam.roles inside the function to avoid circular imports.
    """
    if "compute" not in spec_sections:
        return

    from infra.iam.roles import create_task_roles
    from infra.networking.security_groups import create_service_security_group

    service_name = ctx.config.service_name
    aws_provider = ctx.aws_provider

    service_sg = create_service_security_group(
        service_name,
        ctx.network.vpc_id,
        ctx.config.container_port,
        _ingress_cidrs(ctx),
        aws_provider,
    )
    task_role, exec_role = create_task_roles(service_name, aws_provider)
    ctx.set_foundation(service_sg, task_role, exec_role)

    ctx.export("security_group_id", service_sg.id)
    ctx.export("task_role_arn", task_role.arn)
    ctx.export("execution_role_arn", exec_role.arn)
