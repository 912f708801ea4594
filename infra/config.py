"""Stack.yaml configuration loading and validation."""

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any

import jsonschema
import pulumi
import pulumi_aws
import yaml

from infra.spec.validator import validate_stack_spec

NETWORK_MODE_DEFAULT = "default"
NETWORK_MODE_TAGGED = "tagged"


@dataclass
class ContainerConfig:
    image: str | None = None
    port: int = 5000
    cpu: int = 256
    memory: int = 512
    desired_count: int = 1
    health_path: str = "/health"
    container_insights: bool = False
    environment: dict[str, str] = field(default_factory=dict)


@dataclass
class NetworkConfig:
    mode: str = NETWORK_MODE_DEFAULT
    subnet_tag_key: str = "network"
    subnet_tag_value: str = "private"
    assign_public_ip: bool = True
    # None means: 0.0.0.0/0 in default mode, the VPC CIDR in tagged mode
    ingress_cidrs: list[str] | None = None


@dataclass
class LoggingConfig:
    retention_days: int = 7
    stream_prefix: str = "ecs"


@dataclass
class AlarmConfig:
    metric: str = "CPUUtilization"
    threshold: float = 80.0
    evaluation_periods: int = 2
    period: int = 300
    statistic: str = "Average"
    notify_email: str | None = None


@dataclass
class StackConfig:
    """Parsed and validated stack.yaml configuration."""

    service_name: str
    region: str
    raw_spec: dict[str, Any]
    container: ContainerConfig = field(default_factory=ContainerConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    logging: LoggingConfig | None = field(default_factory=LoggingConfig)
    alarm: AlarmConfig | None = field(default_factory=AlarmConfig)
    secrets: list[str] = field(default_factory=list)

    @property
    def variant(self) -> str:
        return "private" if self.network.mode == NETWORK_MODE_TAGGED else "public"

    @property
    def container_port(self) -> int:
        return self.container.port

    @property
    def cpu(self) -> str:
        return str(self.container.cpu)

    @property
    def memory(self) -> str:
        return str(self.container.memory)

    @property
    def spec_sections(self) -> dict[str, Any]:
        """Return enabled capability sections and their raw config (for the runner).

        logging and alarm are on unless disabled; the alarm capability is named monitoring.
        """
        sections: dict[str, Any] = {"compute": self.raw_spec.get("container") or {}}
        if self.logging is not None:
            sections["logging"] = self.raw_spec.get("logging") or {}
        if self.alarm is not None:
            sections["monitoring"] = self.raw_spec.get("alarm") or {}
        return sections

    @classmethod
    def from_file(cls, path: str) -> "StackConfig":
        """Load and validate stack.yaml from file path."""
        if not Path(path).exists():
            raise SystemExit(f"stack.yaml not found: {path}")

        with open(path, encoding="utf-8") as f:
            stack = yaml.safe_load(f)

        try:
            validate_stack_spec(stack)
        except jsonschema.ValidationError as e:
            raise SystemExit(str(e)) from e

        metadata = stack["metadata"]
        spec = stack["spec"]
        aws_config = pulumi.Config("aws")
        region = aws_config.require("region")

        c = spec["container"]
        hc = c.get("healthCheck") or {}
        container = ContainerConfig(
            image=c.get("image"),
            port=c.get("port", 5000),
            cpu=c.get("cpu", 256),
            memory=c.get("memory", 512),
            desired_count=c.get("desiredCount", 1),
            health_path=hc.get("path", "/health"),
            container_insights=c.get("containerInsights", False),
            environment={k: str(v) for k, v in (c.get("environment") or {}).items()},
        )

        n = spec.get("network") or {}
        mode = n.get("mode", NETWORK_MODE_DEFAULT)
        tag = n.get("subnetTag") or {}
        network = NetworkConfig(
            mode=mode,
            subnet_tag_key=tag.get("key", "network"),
            subnet_tag_value=tag.get("value", "private"),
            assign_public_ip=n.get("assignPublicIp", mode == NETWORK_MODE_DEFAULT),
            ingress_cidrs=n.get("ingressCidrs"),
        )

        logging_config = None
        lg = spec.get("logging") or {}
        if lg.get("enabled", True):
            logging_config = LoggingConfig(
                retention_days=lg.get("retentionDays", 7),
                stream_prefix=lg.get("streamPrefix", "ecs"),
            )

        alarm = None
        al = spec.get("alarm") or {}
        if al.get("enabled", True):
            alarm = AlarmConfig(
                metric=al.get("metric", "CPUUtilization"),
                threshold=float(al.get("threshold", 80)),
                evaluation_periods=al.get("evaluationPeriods", 2),
                period=al.get("period", 300),
                statistic=al.get("statistic", "Average"),
                notify_email=al.get("notifyEmail"),
            )

        return cls(
            service_name=metadata["name"],
            region=region,
            raw_spec=spec,
            container=container,
            network=network,
            logging=logging_config,
            alarm=alarm,
            secrets=spec.get("secrets", []),
        )


def load_stack_config() -> StackConfig:
    """Load stack.yaml from STACK_YAML_PATH environment variable."""
    path = os.environ.get("STACK_YAML_PATH")
    if not path:
        raise SystemExit("STACK_YAML_PATH environment variable required")
    if not Path(path).exists():
        raise SystemExit("STACK_YAML_PATH must point to stack.yaml")
    return StackConfig.from_file(path)


def create_aws_provider(service_name: str, region: str) -> pulumi_aws.Provider:
    """Create AWS provider with default resource tags."""
    return pulumi_aws.Provider(
        "aws-tagged",
        region=region,
        default_tags=pulumi_aws.ProviderDefaultTagsArgs(
            tags={
                "service": service_name,
                "managed-by": "flask-fargate-infra",
            }
        ),
    )
