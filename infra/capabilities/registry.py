"""Capability registry: stack.yaml sections mapped to handlers, and their run order."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Protocol

import pulumi

from infra.capabilities.context import CapabilityContext


class Phase(IntEnum):
    """When a capability runs. The log group exists before the task definition
    references it, and the alarm is created once the ECS service has a name."""

    FOUNDATION = 0
    INFRASTRUCTURE = 1
    COMPUTE = 2
    MONITORING = 3


class CapabilityHandler(Protocol):
    def __call__(self, section_config: dict[str, Any], ctx: CapabilityContext) -> None:
        ...


@dataclass
class CapabilityDef:
    """A section handler with its phase and the sections it needs declared alongside it."""

    handler: Callable[[dict[str, Any], CapabilityContext], None]
    phase: Phase
    requires: list[str] = field(default_factory=list)


# Section name (as in StackConfig.spec_sections) -> capability
CAPABILITIES: dict[str, CapabilityDef] = {}


def register(
    name: str,
    phase: Phase,
    requires: list[str] | None = None,
) -> Callable[[CapabilityHandler], CapabilityHandler]:
    """Decorator registering the handler for stack section `name`."""

    def decorator(fn: CapabilityHandler) -> CapabilityHandler:
        CAPABILITIES[name] = CapabilityDef(
            handler=fn,
            phase=phase,
            requires=requires or [],
        )
        return fn

    return decorator


def resolve_order(sections: Iterable[str]) -> list[str]:
    """Return the declared sections that have a capability, in (phase, name) order.

    Sections without a registered capability are skipped with a warning.
    Raises RuntimeError if a capability requires a section that is not declared.
    """
    declared = []
    for name in sections:
        if name not in CAPABILITIES:
            pulumi.log.warn(f"No capability registered for section '{name}'; skipping")
            continue
        declared.append(name)

    for name in declared:
        missing = [req for req in CAPABILITIES[name].requires if req not in declared]
        if missing:
            raise RuntimeError(
                f"capability {name!r} requires undeclared section(s): {', '.join(missing)}"
            )

    return sorted(declared, key=lambda n: (CAPABILITIES[n].phase, n))
