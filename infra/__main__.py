"""
Flask on Fargate: provisions one service from stack.yaml.
Places the service in the default VPC (public variant) or in tagged private
subnets (private variant); creates ECS cluster, task definition, service, IAM
roles, security group, CloudWatch log group and alarm.
"""
import pulumi

from infra.capabilities import run_capabilities
from infra.capabilities.context import CapabilityContext
from infra.config import create_aws_provider, load_stack_config
from infra.shared.lookups import lookup_network

config = load_stack_config()
aws_provider = create_aws_provider(config.service_name, config.region)
network = lookup_network(config.network, aws_provider)

pulumi.log.info(
    f"Provisioning '{config.service_name}' ({config.variant} variant) in {config.region}"
)

ctx = CapabilityContext(config=config, network=network, aws_provider=aws_provider)
for key, value in run_capabilities(ctx).items():
    pulumi.export(key, value)
