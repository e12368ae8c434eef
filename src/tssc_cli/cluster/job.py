"""Installer Job management.

The actual chart installs run inside the cluster as a Kubernetes Job using
the installer container image. This module creates that Job and reports its
state; it knows nothing about the dependency topology.

The Job runs the installer image's own entrypoint (``INSTALLER_COMMAND``),
which installs the charts from inside the cluster. This CLI never runs in the
Job: its ``deploy`` command only creates it.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import yaml

from .errors import InstallerJobError, KubectlError
from .kubectl import Kubectl

logger = logging.getLogger(__name__)

JOB_NAME = "tssc-installer"
SERVICE_ACCOUNT_NAME = "tssc-installer"
JOB_LABEL = "tssc.redhat-appstudio.github.com/installer-job"
DEFAULT_IMAGE = "quay.io/redhat-tssc/cli:latest"
# Entrypoint of the installer image that installs the charts in-cluster
INSTALLER_COMMAND = ("tssc", "deploy", "--local")


class JobState(Enum):
    """State of the installer Job."""

    NOT_FOUND = "not_found"  # No job in the namespace
    DEPLOYING = "deploying"  # Job pod still running
    FAILED = "failed"  # Job exhausted its retries
    DONE = "done"  # Job completed successfully


def job_state_from_status(status: dict[str, Any]) -> JobState:
    """Classify a Job ``.status`` block."""
    if status.get("succeeded", 0) > 0:
        return JobState.DONE
    if status.get("failed", 0) > 0 and status.get("active", 0) == 0:
        return JobState.FAILED
    return JobState.DEPLOYING


class InstallerJob:
    """Create and inspect the installer Job."""

    def __init__(
        self,
        kubectl: Kubectl,
        backoff_limit: int = 0,
        command: tuple[str, ...] = INSTALLER_COMMAND,
    ):
        """Initialize job manager.

        Args:
            kubectl: Cluster transport.
            backoff_limit: Job retries before it is marked failed.
            command: Container command; must match the installer image.
        """
        self.kubectl = kubectl
        self.backoff_limit = backoff_limit
        self.command = command

    async def get_state(self, namespace: str) -> JobState:
        """Get the installer Job state in ``namespace``."""
        try:
            job = await self.kubectl.get_json("job", JOB_NAME, "-n", namespace)
        except KubectlError as e:
            if e.not_found:
                return JobState.NOT_FOUND
            raise
        return job_state_from_status(job.get("status") or {})

    def log_follow_cmd(self, namespace: str) -> str:
        """Command line that follows the installer Job logs."""
        return f"kubectl --namespace={namespace} logs --follow job/{JOB_NAME}"

    def build_manifests(self, namespace: str, image: str) -> list[dict[str, Any]]:
        """Build the ServiceAccount, ClusterRoleBinding and Job documents."""
        service_account = {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": {"name": SERVICE_ACCOUNT_NAME, "namespace": namespace},
        }

        binding = {
            "apiVersion": "rbac.authorization.k8s.io/v1",
            "kind": "ClusterRoleBinding",
            "metadata": {"name": f"{SERVICE_ACCOUNT_NAME}-{namespace}"},
            "roleRef": {
                "apiGroup": "rbac.authorization.k8s.io",
                "kind": "ClusterRole",
                "name": "cluster-admin",
            },
            "subjects": [
                {
                    "kind": "ServiceAccount",
                    "name": SERVICE_ACCOUNT_NAME,
                    "namespace": namespace,
                }
            ],
        }

        job = {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": {
                "name": JOB_NAME,
                "namespace": namespace,
                "labels": {JOB_LABEL: "true"},
            },
            "spec": {
                "backoffLimit": self.backoff_limit,
                "template": {
                    "metadata": {"labels": {JOB_LABEL: "true"}},
                    "spec": {
                        "serviceAccountName": SERVICE_ACCOUNT_NAME,
                        "restartPolicy": "Never",
                        "containers": [
                            {
                                "name": "tssc",
                                "image": image,
                                "command": list(self.command),
                                "env": [
                                    {"name": "TSSC_NAMESPACE", "value": namespace},
                                ],
                            }
                        ],
                    },
                },
            },
        }

        return [service_account, binding, job]

    async def create(self, namespace: str, image: str = DEFAULT_IMAGE) -> None:
        """Create the installer Job.

        A finished (done or failed) job is replaced; a running one is not.

        Raises:
            InstallerJobError: The job is still deploying.
        """
        state = await self.get_state(namespace)
        if state == JobState.DEPLOYING:
            raise InstallerJobError(
                message=f"The installer job is already running in {namespace!r}",
                data={"namespace": namespace, "job": JOB_NAME},
            )
        if state != JobState.NOT_FOUND:
            logger.info(f"Removing previous installer job ({state.value})")
            await self.kubectl.delete("job", JOB_NAME, namespace)

        manifests = self.build_manifests(namespace, image)
        logger.info(f"Creating installer job in {namespace} with image {image}")
        await self.kubectl.apply(
            yaml.dump_all(manifests, default_flow_style=False, sort_keys=False)
        )
