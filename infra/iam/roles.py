"""IAM roles for the ECS task and the ECS task execution."""

import json

import pulumi
import pulumi_aws

TASK_EXECUTION_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"


def _ecs_tasks_assume_policy() -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "sts:AssumeRole",
                    "Effect": "Allow",
                    "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                }
            ],
        }
    )


def create_task_roles(
    service_name: str,
    aws_provider: pulumi_aws.Provider,
) -> tuple[pulumi_aws.iam.Role, pulumi_aws.iam.Role]:
    """Create ECS task role and execution role.

    The execution role carries the managed task execution policy (image pull,
    log delivery). The task role starts empty; the Flask app gets permissions
    through inline policies added by other capabilities.
    """
    assume_policy = _ecs_tasks_assume_policy()

    task_role = pulumi_aws.iam.Role(
        f"{service_name}_task_role",
        name=f"{service_name}-ecs-task",
        assume_role_policy=assume_policy,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )

    execution_role = pulumi_aws.iam.Role(
        f"{service_name}_exec_role",
        name=f"{service_name}-ecs-exec",
        assume_role_policy=assume_policy,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.iam.RolePolicyAttachment(
        f"{service_name}_exec_policy",
        role=execution_role.name,
        policy_arn=TASK_EXECUTION_POLICY_ARN,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )

    return task_role, execution_role


def _log_write_policy(log_group_arn: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Action": ["logs:CreateLogStream", "logs:PutLogEvents"],
                    "Resource": f"{log_group_arn}:*",
                }
            ],
        }
    )


def create_log_write_policy(
    service_name: str,
    task_role: pulumi_aws.iam.Role,
    log_group_arn: pulumi.Output[str],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.iam.RolePolicy:
    """Allow the task role to write streams into the service log group only."""
    return pulumi_aws.iam.RolePolicy(
        f"{service_name}_task_logs_policy",
        role=task_role.name,
        policy=pulumi.Output.from_input(log_group_arn).apply(_log_write_policy),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
