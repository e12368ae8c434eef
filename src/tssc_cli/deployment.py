"""Deployment orchestration shared by the command line and the MCP tools.

``Deployer`` ties the cluster configuration, the topology builder and the
installer Job together: ``status`` walks the same checks a user would
(configuration, then topology, then job state) and ``deploy`` creates the
installer Job once those checks pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .cluster.config import ClusterConfig, ConfigMapManager
from .cluster.errors import ClusterConfigNotFoundError
from .cluster.job import DEFAULT_IMAGE, InstallerJob, JobState
from .cluster.kubectl import Kubectl
from .formatters import describe_error, describe_job_state
from .integrations.manager import IntegrationManager
from .resolver.collection import read_collection_source
from .resolver.errors import ResolverError
from .resolver.topology import ResolutionResult, TopologyBuilder

logger = logging.getLogger(__name__)


@dataclass
class DeployStatus:
    """Outcome of the deployment status checks."""

    stage: str  # "config", "topology" or "job"
    message: str
    state: JobState | None = None
    error: BaseException | None = None
    logs_cmd: str | None = None

    @property
    def failed(self) -> bool:
        """Whether the status needs user action before deploying."""
        return self.error is not None or self.state == JobState.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dict."""
        data: dict[str, Any] = {
            "stage": self.stage,
            "state": self.state.value if self.state else None,
            "message": self.message,
        }
        if self.logs_cmd:
            data["logs"] = self.logs_cmd
        if isinstance(self.error, ResolverError):
            data["error"] = self.error.to_dict()
        return data


class Deployer:
    """Check and deploy the components through the installer Job."""

    def __init__(
        self,
        kubectl: Kubectl,
        namespace: str,
        collection: str | None = None,
        timeout: float | None = None,
        image: str = DEFAULT_IMAGE,
    ):
        """Initialize deployer.

        Args:
            kubectl: Cluster transport.
            namespace: Namespace holding the cluster configuration.
            collection: Dependency collection file, None for the bundled one.
            timeout: Bound on reading the integration state.
            image: Installer container image.
        """
        self.kubectl = kubectl
        self.config_manager = ConfigMapManager(kubectl, namespace=namespace)
        self.job = InstallerJob(kubectl)
        self.collection = collection
        self.timeout = timeout
        self.image = image

    def topology_builder(self) -> TopologyBuilder:
        """Builder over the collection; the collection is read on every call."""
        source = read_collection_source(self.collection)
        return TopologyBuilder(source, IntegrationManager(self.kubectl))

    async def get_config(self) -> ClusterConfig:
        return await self.config_manager.get_config()

    async def resolve(self, config: ClusterConfig) -> ResolutionResult:
        """Resolve the topology for ``config``."""
        return await self.topology_builder().build(config, timeout=self.timeout)

    async def status(self) -> DeployStatus:
        """Run the configuration, topology and job checks in order.

        A missing configuration and taxonomy errors are reported in the
        returned status; transport errors propagate.
        """
        try:
            config = await self.get_config()
        except ClusterConfigNotFoundError as e:
            return DeployStatus(stage="config", message=describe_error(e), error=e)

        try:
            await self.resolve(config)
        except ResolverError as e:
            return DeployStatus(stage="topology", message=describe_error(e), error=e)

        state = await self.job.get_state(config.namespace)
        logs_cmd = self.job.log_follow_cmd(config.namespace)
        logger.debug(f"Installer job state in {config.namespace}: {state.value}")
        return DeployStatus(
            stage="job",
            message=describe_job_state(state, logs_cmd),
            state=state,
            logs_cmd=logs_cmd,
        )

    async def deploy(self, image: str | None = None) -> str:
        """Create the installer Job.

        Returns:
            Command line that follows the installer Job logs.

        Raises:
            ClusterConfigNotFoundError: The cluster is not configured.
            ResolverError: The topology does not resolve.
            InstallerJobError: The installer Job is already running.
        """
        config = await self.get_config()
        result = await self.resolve(config)
        logger.info(f"Topology resolved: {', '.join(result.order)}")

        await self.job.create(config.namespace, image or self.image)
        return self.job.log_follow_cmd(config.namespace)
