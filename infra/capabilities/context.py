"""Capability execution context: config, network, shared resources, and Pulumi exports."""

from dataclasses import dataclass, field
from typing import Any

import pulumi_aws

from infra.config import StackConfig
from infra.shared.lookups import NetworkInfo

SECURITY_GROUP = "security_groups.service"
TASK_ROLE = "iam.task_role"
EXEC_ROLE = "iam.exec_role"
LOG_GROUP = "logs.group"
ECS_CLUSTER = "ecs.cluster"
ECS_SERVICE = "ecs.service"


@dataclass
class CapabilityContext:
    """Context passed to capability handlers.

    Resources one capability creates for another are stored under the keys above;
    the typed properties read them and fail with the available keys when the
    producing step has not run.
    """

    config: StackConfig
    network: NetworkInfo
    aws_provider: pulumi_aws.Provider
    _outputs: dict[str, Any] = field(default_factory=dict)
    _exports: dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> None:
        self._outputs[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._outputs.get(key, default)

    def require(self, key: str) -> Any:
        """Retrieve a value; raise RuntimeError with available keys if missing."""
        if key not in self._outputs:
            available = ", ".join(sorted(self._outputs.keys())) or "(none)"
            raise RuntimeError(
                f"missing required key: {key!r}. Available keys: {available}"
            )
        return self._outputs[key]

    def export(self, key: str, value: Any) -> None:
        """Register a Pulumi stack export."""
        self._exports[key] = value

    @property
    def exports(self) -> dict[str, Any]:
        """Return all registered Pulumi exports."""
        return dict(self._exports)

    # --- foundation: security group and IAM roles ---

    def set_foundation(
        self,
        security_group: pulumi_aws.ec2.SecurityGroup,
        task_role: pulumi_aws.iam.Role,
        exec_role: pulumi_aws.iam.Role,
    ) -> None:
        self.set(SECURITY_GROUP, security_group)
        self.set(TASK_ROLE, task_role)
        self.set(EXEC_ROLE, exec_role)

    @property
    def security_group(self) -> pulumi_aws.ec2.SecurityGroup:
        return self.require(SECURITY_GROUP)

    @property
    def task_role(self) -> pulumi_aws.iam.Role:
        return self.require(TASK_ROLE)

    @property
    def exec_role(self) -> pulumi_aws.iam.Role:
        return self.require(EXEC_ROLE)

    @property
    def has_task_role(self) -> bool:
        return TASK_ROLE in self._outputs

    # --- logging ---

    def set_log_group(self, log_group: pulumi_aws.cloudwatch.LogGroup) -> None:
        self.set(LOG_GROUP, log_group)

    @property
    def log_group(self) -> pulumi_aws.cloudwatch.LogGroup | None:
        """The service log group, or None when logging is disabled."""
        return self.get(LOG_GROUP)

    # --- compute ---

    def set_ecs(self, cluster: pulumi_aws.ecs.Cluster, service: pulumi_aws.ecs.Service) -> None:
        self.set(ECS_CLUSTER, cluster)
        self.set(ECS_SERVICE, service)

    @property
    def cluster(self) -> pulumi_aws.ecs.Cluster:
        return self.require(ECS_CLUSTER)

    @property
    def ecs_service(self) -> pulumi_aws.ecs.Service:
        return self.require(ECS_SERVICE)
