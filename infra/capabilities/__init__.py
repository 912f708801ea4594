"""Capability modules: each provisions one slice of the service (logs, ECS, alarm)."""

# Imported for their @register side effects.
from infra.capabilities import compute, logs, monitoring  # noqa: F401
from infra.capabilities.runner import run_capabilities

__all__ = ["run_capabilities"]
