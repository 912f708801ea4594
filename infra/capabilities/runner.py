"""Run declared capabilities in phase order and collect their exports."""

from typing import Any

from infra.capabilities.context import CapabilityContext
from infra.capabilities.foundation import provision_foundation
from infra.capabilities.registry import CAPABILITIES, resolve_order


def run_capabilities(ctx: CapabilityContext) -> dict[str, Any]:
    """Provision foundation, then every declared capability sorted by (phase, name).

    The order is resolved before anything is created, so a missing requirement
    raises RuntimeError with nothing provisioned.
    """
    sections = ctx.config.spec_sections
    order = resolve_order(sections)

    provision_foundation(sections, ctx)
    for name in order:
        CAPABILITIES[name].handler(sections[name], ctx)

    return ctx.exports
