"""Topology builder.

Answers, once per status or deploy request: "in what order can the
components install, and are the integrations they need configured?"

Structural checks (collection shape, dependency names, cycles) and
expression checks run purely in memory before the cluster is consulted, so
an invalid collection is reported even when the cluster is unreachable.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from ..cluster.errors import ClusterTimeoutError
from .collection import Collection, Component, load_collection
from .errors import MissingIntegrationsError
from .expression import IntegrationRequirement, parse
from .graph import DependencyGraph

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig

logger = structlog.get_logger(__name__)


class IntegrationStateSource(Protocol):
    """Source of integration state for the active cluster configuration."""

    def known_integrations(self) -> frozenset[str]:
        """Every integration name the tool recognises."""
        ...

    async def configured_integrations(self, config: ClusterConfig) -> frozenset[str]:
        """Integration names currently configured in the cluster."""
        ...


@dataclass(frozen=True)
class ResolutionResult:
    """A valid install order plus per-component requirement satisfaction."""

    components: tuple[Component, ...]
    satisfied: Mapping[str, bool] = field(default_factory=dict, hash=False)
    configured: frozenset[str] = frozenset()

    @property
    def order(self) -> list[str]:
        """Component names in install order."""
        return [c.name for c in self.components]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dict."""
        return {
            "order": self.order,
            "configured": sorted(self.configured),
            "components": [
                {
                    "name": c.name,
                    "dependsOn": list(c.depends_on),
                    "integrations": c.integrations,
                    "satisfied": self.satisfied[c.name],
                }
                for c in self.components
            ],
        }


class TopologyBuilder:
    """Build a ResolutionResult from a collection and the cluster state."""

    def __init__(self, source: Mapping[str, Any], state_source: IntegrationStateSource):
        """Initialize builder.

        Args:
            source: Decoded collection document, see ``read_collection_source``.
            state_source: Provider of known and configured integrations.
        """
        self.source = source
        self.state_source = state_source

    def plan(self) -> tuple[Collection, list[str], dict[str, IntegrationRequirement]]:
        """Run every check that needs no cluster access.

        Returns:
            The collection, the install order and the parsed requirement of
            each component.

        Raises:
            InvalidCollectionError, DependencyNotFoundError,
            CircularDependencyError, InvalidExpressionError,
            UnknownIntegrationError.
        """
        collection = load_collection(self.source)
        graph = DependencyGraph(collection)
        order = graph.topological_order()

        known = self.state_source.known_integrations()
        requirements: dict[str, IntegrationRequirement] = {}
        for name in order:
            requirement = parse(collection[name].integrations, component=name)
            requirement.validate(known, component=name)
            requirements[name] = requirement

        logger.debug("topology planned", components=len(order), order=order)
        return collection, order, requirements

    async def build(self, config: ClusterConfig, timeout: float | None = None) -> ResolutionResult:
        """Resolve the install topology.

        Args:
            config: Active cluster configuration.
            timeout: Optional bound, in seconds, on reading integration state.

        Returns:
            ResolutionResult with the install order and satisfaction flags.

        Raises:
            ResolverError: Any taxonomy error, see ``tssc_cli.resolver.errors``.
            ClusterError: Reading the integration state failed.
        """
        collection, order, requirements = self.plan()

        try:
            configured = await asyncio.wait_for(
                self.state_source.configured_integrations(config), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            message = "Timed out reading integration state"
            if timeout is not None:
                message += f" after {timeout:g}s"
            raise ClusterTimeoutError(
                message=message,
                data={"timeout": timeout},
            ) from e
        configured = frozenset(configured)

        satisfied: dict[str, bool] = {}
        missing: set[str] = set()
        unmet: dict[str, str] = {}
        for name in order:
            requirement = requirements[name]
            satisfied[name] = requirement.evaluate(configured)
            if not satisfied[name]:
                missing.update(requirement.missing(configured))
                unmet[name] = requirement.expression

        if unmet:
            logger.info(
                "integration requirements unmet",
                missing=sorted(missing),
                components=sorted(unmet),
            )
            raise MissingIntegrationsError(integrations=sorted(missing), components=unmet)

        logger.debug("topology resolved", order=order, configured=sorted(configured))
        return ResolutionResult(
            components=tuple(collection[name] for name in order),
            satisfied=MappingProxyType(satisfied),
            configured=configured,
        )
