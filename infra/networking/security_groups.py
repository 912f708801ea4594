"""Security group for the Flask service tasks."""

import pulumi
import pulumi_aws


def create_service_security_group(
    service_name: str,
    vpc_id: str,
    port: int,
    ingress_cidrs: list[str],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ec2.SecurityGroup:
    """Create security group for ECS tasks: ingress TCP on the container port, egress all."""
    return pulumi_aws.ec2.SecurityGroup(
        f"{service_name}_ecs_sg",
        name=f"{service_name}-ecs",
        vpc_id=vpc_id,
        description=f"ECS tasks for {service_name}",
        ingress=[
            pulumi_aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp",
                from_port=port,
                to_port=port,
                cidr_blocks=list(ingress_cidrs),
                description=f"HTTP {port} to Flask",
            ),
        ],
        egress=[
            pulumi_aws.ec2.SecurityGroupEgressArgs(
                protocol="-1",
                from_port=0,
                to_port=0,
                cidr_blocks=["0.0.0.0/0"],
            ),
        ],
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
