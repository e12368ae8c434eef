"""Cluster access for tssc-cli.

This package wraps kubectl and provides the cluster-side collaborators:
- Kubectl: async transport with timeout and cancellation handling
- ConfigMapManager: installer configuration stored in the cluster
- InstallerJob: the in-cluster Job that performs the installs
"""

from .config import ClusterConfig, ConfigMapManager, parse_config
from .errors import (
    ClusterConfigNotFoundError,
    ClusterError,
    ClusterTimeoutError,
    InstallerJobError,
    KubectlError,
    KubectlNotFoundError,
)
from .job import InstallerJob, JobState
from .kubectl import Kubectl, KubectlResult

__all__ = [
    # Transport
    "Kubectl",
    "KubectlResult",
    # Configuration
    "ClusterConfig",
    "ConfigMapManager",
    "parse_config",
    # Installer job
    "InstallerJob",
    "JobState",
    # Errors
    "ClusterError",
    "ClusterConfigNotFoundError",
    "ClusterTimeoutError",
    "InstallerJobError",
    "KubectlError",
    "KubectlNotFoundError",
]
