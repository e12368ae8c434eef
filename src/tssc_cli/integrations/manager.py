"""Integration state for the active cluster.

``IntegrationManager`` is the resolver's integration state source: it knows
every integration the tool can configure and reads which of them are
configured by listing the secrets in the installer namespace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from .base import secret_name

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig
    from ..cluster.kubectl import Kubectl

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IntegrationInfo:
    """Description of a supported integration."""

    name: str
    kind: str
    description: str


INTEGRATIONS: dict[str, IntegrationInfo] = {
    info.name: info
    for info in (
        IntegrationInfo("acs", "security", "Advanced Cluster Security central endpoint"),
        IntegrationInfo("artifactory", "registry", "JFrog Artifactory container registry"),
        IntegrationInfo("github", "scm", "GitHub or GitHub Enterprise"),
        IntegrationInfo("gitlab", "scm", "GitLab or self-managed GitLab"),
        IntegrationInfo("jenkins", "ci", "Jenkins CI server"),
        IntegrationInfo("nexus", "registry", "Sonatype Nexus container registry"),
        IntegrationInfo("quay", "registry", "Quay container registry"),
    )
}


class IntegrationManager:
    """Known and configured integrations."""

    def __init__(self, kubectl: Kubectl):
        """Initialize manager.

        Args:
            kubectl: Cluster transport.
        """
        self.kubectl = kubectl

    def known_integrations(self) -> frozenset[str]:
        return frozenset(INTEGRATIONS)

    async def configured_integrations(self, config: ClusterConfig) -> frozenset[str]:
        """Integrations whose secret exists in the installer namespace.

        One ``kubectl get secrets`` round trip per call; nothing is cached.
        """
        secrets = await self.kubectl.get_json("secrets", "-n", config.namespace)
        names = {
            item.get("metadata", {}).get("name", "") for item in secrets.get("items") or []
        }
        configured = frozenset(
            integration for integration in INTEGRATIONS if secret_name(integration) in names
        )
        logger.debug(
            "integration state read",
            namespace=config.namespace,
            configured=sorted(configured),
        )
        return configured
