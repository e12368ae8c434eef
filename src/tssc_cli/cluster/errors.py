"""Cluster transport errors.

These describe infrastructure problems (kubectl missing, API unreachable,
timeouts, absent resources) and are deliberately separate from the
resolver taxonomy so front ends can tell "cluster unreachable" apart from
"dependency set invalid".
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ClusterError(Exception):
    """Base error for cluster communication."""

    message: str
    retryable: bool = False
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


@dataclass
class KubectlNotFoundError(ClusterError):
    """The kubectl binary is not installed."""

    message: str = "kubectl not found. Is kubectl installed?"
    retryable: bool = False


@dataclass
class ClusterTimeoutError(ClusterError):
    """A cluster call did not finish in time."""

    message: str = "Timed out talking to the cluster"
    retryable: bool = True


@dataclass
class KubectlError(ClusterError):
    """kubectl exited with a non-zero status."""

    message: str = "kubectl failed"
    retryable: bool = True
    returncode: int = 1
    stderr: str = ""

    @property
    def not_found(self) -> bool:
        """Whether kubectl reported the requested resource as absent."""
        return "NotFound" in self.stderr or "not found" in self.stderr


@dataclass
class ClusterConfigNotFoundError(ClusterError):
    """The cluster configuration ConfigMap does not exist."""

    message: str = "The cluster is not configured yet"
    retryable: bool = False


@dataclass
class InstallerJobError(ClusterError):
    """The installer Job cannot be created in its current state."""

    message: str = "Installer job conflict"
    retryable: bool = False
