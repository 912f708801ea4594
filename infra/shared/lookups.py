"""Lookup existing network resources (VPC, subnets) and the caller account."""

from dataclasses import dataclass

import pulumi
import pulumi_aws

from infra.config import NETWORK_MODE_TAGGED, NetworkConfig


@dataclass
class NetworkInfo:
    """Existing network resources the service is placed into."""

    vpc_id: str
    vpc_cidr: str
    subnet_ids: list[str]
    account_id: str


def lookup_network(
    network: NetworkConfig,
    aws_provider: pulumi_aws.Provider,
) -> NetworkInfo:
    """Lookup the VPC and subnets for the configured network mode.

    Default mode uses the account default VPC and all of its subnets.
    Tagged mode finds subnets by tag and takes the VPC of the first one.
    Does not create any resources.
    """
    invoke_opts = pulumi.InvokeOptions(provider=aws_provider)

    if network.mode == NETWORK_MODE_TAGGED:
        subnets = pulumi_aws.ec2.get_subnets(
            filters=[
                pulumi_aws.ec2.GetSubnetsFilterArgs(
                    name=f"tag:{network.subnet_tag_key}",
                    values=[network.subnet_tag_value],
                )
            ],
            opts=invoke_opts,
        )
        if not subnets.ids:
            raise SystemExit(
                f"No subnets found (tag {network.subnet_tag_key}={network.subnet_tag_value})"
            )
        first_subnet = pulumi_aws.ec2.get_subnet(id=subnets.ids[0], opts=invoke_opts)
        vpc = pulumi_aws.ec2.get_vpc(id=first_subnet.vpc_id, opts=invoke_opts)
    else:
        vpc = pulumi_aws.ec2.get_vpc(default=True, opts=invoke_opts)
        subnets = pulumi_aws.ec2.get_subnets(
            filters=[pulumi_aws.ec2.GetSubnetsFilterArgs(name="vpc-id", values=[vpc.id])],
            opts=invoke_opts,
        )
        if not subnets.ids:
            raise SystemExit(f"No subnets found in default VPC {vpc.id}")

    identity = pulumi_aws.get_caller_identity(opts=invoke_opts)

    return NetworkInfo(
        vpc_id=vpc.id,
        vpc_cidr=vpc.cidr_block,
        subnet_ids=list(subnets.ids),
        account_id=identity.account_id,
    )
