"""Tests for config loading and validation."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from infra.config import (
    AlarmConfig,
    ContainerConfig,
    LoggingConfig,
    NetworkConfig,
    StackConfig,
    create_aws_provider,
    load_stack_config,
)

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


def _load(path: Path, region: str = "us-east-1") -> StackConfig:
    mock_config = MagicMock()
    mock_config.require.return_value = region
    with patch("infra.config.pulumi.Config", return_value=mock_config):
        return StackConfig.from_file(str(path))


def test_public_variant_fixture() -> None:
    """Default-VPC fixture parses into the public variant; no image means an ECR repository is used."""
    config = _load(FIXTURES / "flask-public.yaml")

    assert config.service_name == "flask-app"
    assert config.region == "us-east-1"
    assert config.variant == "public"
    assert config.container.image is None
    assert config.container_port == 5000
    assert config.cpu == "256"
    assert config.memory == "512"
    assert config.container.environment == {"FLASK_APP": "app.py"}
    assert config.network.assign_public_ip is True
    assert config.logging == LoggingConfig(retention_days=7, stream_prefix="flask")
    assert config.alarm is not None
    assert config.alarm.metric == "CPUUtilization"
    assert config.alarm.threshold == 80.0


def test_private_variant_fixture() -> None:
    """Tagged fixture parses into the private variant; public IP defaults off."""
    config = _load(FIXTURES / "flask-private.yaml", region="eu-west-1")

    assert config.variant == "private"
    assert config.container.image is None
    assert config.container.desired_count == 2
    assert config.container.container_insights is True
    assert config.container.health_path == "/healthz"
    assert config.network.mode == "tagged"
    assert config.network.assign_public_ip is False
    assert config.network.ingress_cidrs is None
    assert config.alarm is not None
    assert config.alarm.notify_email == "oncall@example.com"
    assert config.secrets == ["DATABASE_URL", "SECRET_KEY"]


def test_defaults_when_sections_missing(tmp_path: Path) -> None:
    """Only container declared: network, logging and alarm fall back to defaults."""
    yaml_file = tmp_path / "stack.yaml"
    yaml_file.write_text(
        """
apiVersion: stack.flask-fargate.io/v1
kind: Service
metadata:
  name: minimal
spec:
  container: {}
"""
    )
    config = _load(yaml_file)

    assert config.container == ContainerConfig()
    assert config.network == NetworkConfig()
    assert config.logging == LoggingConfig()
    assert config.alarm == AlarmConfig()
    assert config.secrets == []
    assert set(config.spec_sections) == {"compute", "logging", "monitoring"}


def test_disabled_logging_and_alarm_drop_sections(tmp_path: Path) -> None:
    """enabled: false removes the capability section."""
    yaml_file = tmp_path / "stack.yaml"
    yaml_file.write_text(
        """
apiVersion: stack.flask-fargate.io/v1
kind: Service
metadata:
  name: quiet
spec:
  container:
    image: nginx
  logging:
    enabled: false
  alarm:
    enabled: false
"""
    )
    config = _load(yaml_file)

    assert config.logging is None
    assert config.alarm is None
    assert list(config.spec_sections) == ["compute"]


def test_environment_values_are_strings(tmp_path: Path) -> None:
    yaml_file = tmp_path / "stack.yaml"
    yaml_file.write_text(
        """
apiVersion: stack.flask-fargate.io/v1
kind: Service
metadata:
  name: envs
spec:
  container:
    environment:
      WORKERS: 4
      DEBUG: false
"""
    )
    config = _load(yaml_file)
    assert config.container.environment == {"WORKERS": "4", "DEBUG": "False"}


def test_invalid_stack_raises_system_exit(tmp_path: Path) -> None:
    """Schema violations surface as SystemExit with the failing path."""
    yaml_file = tmp_path / "stack.yaml"
    yaml_file.write_text(
        """
apiVersion: stack.flask-fargate.io/v1
kind: Service
metadata:
  name: bad
spec:
  container:
    cpu: 300
"""
    )
    with pytest.raises(SystemExit) as exc_info:
        _load(yaml_file)
    assert "spec.container.cpu" in str(exc_info.value)


@pytest.mark.parametrize("content", ["", "# nothing here\n", "- just\n- a list\n"])
def test_empty_or_non_mapping_stack_raises_system_exit(tmp_path: Path, content: str) -> None:
    yaml_file = tmp_path / "stack.yaml"
    yaml_file.write_text(content)
    with pytest.raises(SystemExit, match="must be a mapping"):
        _load(yaml_file)


def test_from_file_missing_file() -> None:
    with pytest.raises(SystemExit, match="not found"):
        StackConfig.from_file("/nonexistent/stack.yaml")


def test_load_stack_config_requires_env() -> None:
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(SystemExit, match="STACK_YAML_PATH"):
            load_stack_config()


def test_load_stack_config_missing_path() -> None:
    with patch.dict(os.environ, {"STACK_YAML_PATH": "/nonexistent/stack.yaml"}):
        with pytest.raises(SystemExit, match="must point to stack.yaml"):
            load_stack_config()


def test_load_stack_config_reads_env_path() -> None:
    mock_config = MagicMock()
    mock_config.require.return_value = "us-west-2"
    path = str(FIXTURES / "flask-public.yaml")
    with patch.dict(os.environ, {"STACK_YAML_PATH": path}):
        with patch("infra.config.pulumi.Config", return_value=mock_config):
            config = load_stack_config()
    assert config.service_name == "flask-app"
    assert config.region == "us-west-2"


@patch("infra.config.pulumi_aws.ProviderDefaultTagsArgs")
@patch("infra.config.pulumi_aws.Provider")
def test_create_aws_provider(mock_provider: MagicMock, mock_tags: MagicMock) -> None:
    """Provider gets region and service/managed-by default tags."""
    create_aws_provider("flask-app", "us-east-1")

    mock_tags.assert_called_once_with(
        tags={"service": "flask-app", "managed-by": "flask-fargate-infra"}
    )
    call_kw = mock_provider.call_args[1]
    assert call_kw["region"] == "us-east-1"
    assert call_kw["default_tags"] is mock_tags.return_value
