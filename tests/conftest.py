"""Shared test fixtures for tssc-cli tests.

This module provides fixtures for testing the resolver and the front ends:
- FakeStateSource: in-memory integration state source
- cluster_config: a parsed cluster configuration
- mock_kubectl: AsyncMock standing in for the kubectl transport
- collection_doc: helper building collection documents
- fake_cluster / cli_env: a configured cluster behind the CLI
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from tssc_cli.cluster.config import ClusterConfig
from tssc_cli.cluster.errors import KubectlError
from tssc_cli.cluster.kubectl import Kubectl
from tssc_cli.config import ENV_VARS
from tssc_cli.integrations.manager import INTEGRATIONS

CONFIG_DOCUMENT = """\
tssc:
  namespace: tssc
  settings:
    crc: false
  products:
    - name: Developer Hub
      enabled: true
    - name: Trusted Artifact Signer
      enabled: false
"""


@dataclass
class FakeStateSource:
    """Integration state source backed by in-memory sets."""

    known: frozenset[str] = field(default_factory=lambda: frozenset(INTEGRATIONS))
    configured: frozenset[str] = frozenset()
    delay: float = 0.0
    error: BaseException | None = None
    calls: int = 0

    def known_integrations(self) -> frozenset[str]:
        return self.known

    async def configured_integrations(self, config: ClusterConfig) -> frozenset[str]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.configured


@pytest.fixture
def state_source() -> FakeStateSource:
    """Fake state source with nothing configured."""
    return FakeStateSource()


@pytest.fixture
def cluster_config() -> ClusterConfig:
    """Cluster configuration for the 'tssc' namespace."""
    return ClusterConfig(
        namespace="tssc",
        settings={"crc": False},
        products=[{"name": "Developer Hub", "enabled": True}],
        raw=CONFIG_DOCUMENT,
    )


@pytest.fixture
def mock_kubectl() -> AsyncMock:
    """AsyncMock with the Kubectl interface."""
    return AsyncMock(spec=Kubectl)


@pytest.fixture
def collection_doc() -> Callable[..., dict[str, Any]]:
    """Build a collection document from (name, dependsOn, integrations) tuples."""

    def _build(*components: tuple, version: int = 1) -> dict[str, Any]:
        entries = []
        for name, depends_on, *rest in components:
            entry: dict[str, Any] = {"name": name, "dependsOn": list(depends_on)}
            if rest:
                entry["integrations"] = rest[0]
            entries.append(entry)
        return {"version": version, "components": entries}

    return _build


@pytest.fixture
def fake_cluster(mock_kubectl) -> AsyncMock:
    """mock_kubectl answering like a configured cluster.

    ``configmap`` returns CONFIG_DOCUMENT, ``secrets`` returns the secrets of
    the integrations listed in ``mock_kubectl.configured`` and ``job`` is
    absent until ``mock_kubectl.job_status`` is set.
    """
    mock_kubectl.configured = set()
    mock_kubectl.job_status = None
    mock_kubectl.config_document = CONFIG_DOCUMENT

    async def get_json(kind: str, *args: str, **kwargs: Any) -> dict[str, Any]:
        if kind == "configmap":
            if mock_kubectl.config_document is None:
                raise KubectlError(stderr='configmaps "tssc-config" not found')
            return {"data": {"config.yaml": mock_kubectl.config_document}}
        if kind == "secrets":
            return {
                "items": [
                    {"metadata": {"name": f"tssc-{name}-integration"}}
                    for name in sorted(mock_kubectl.configured)
                ]
            }
        if kind == "job":
            if mock_kubectl.job_status is None:
                raise KubectlError(stderr='jobs.batch "tssc-installer" not found')
            return {"status": mock_kubectl.job_status}
        raise AssertionError(f"unexpected kubectl get {kind}")

    mock_kubectl.get_json.side_effect = get_json
    mock_kubectl.exists.return_value = False
    return mock_kubectl


@pytest.fixture
def cli_env(tmp_path, monkeypatch, fake_cluster):
    """Isolate the CLI from the user's config and the real cluster."""
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    config_path = tmp_path / ".tssc" / "config.yaml"
    with (
        patch("tssc_cli.config.get_config_path", return_value=config_path),
        patch("tssc_cli.commands.config.get_config_path", return_value=config_path),
        patch("tssc_cli.main.Kubectl", return_value=fake_cluster),
    ):
        yield fake_cluster
