"""Cluster configuration stored in a ConfigMap.

The installer configuration lives in the ``tssc-config`` ConfigMap as a YAML
document under the ``config.yaml`` key::

    tssc:
      namespace: tssc
      settings:
        crc: false
      products:
        - name: Developer Hub
          enabled: true
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import yaml

from .errors import ClusterConfigNotFoundError, ClusterError, KubectlError
from .kubectl import Kubectl

logger = logging.getLogger(__name__)

CONFIGMAP_NAME = "tssc-config"
CONFIGMAP_KEY = "config.yaml"
CONFIGMAP_LABEL = "tssc.redhat-appstudio.github.com/config"
DEFAULT_NAMESPACE = "tssc"


@dataclass
class ClusterConfig:
    """Installer configuration read from the cluster."""

    namespace: str = DEFAULT_NAMESPACE
    settings: dict[str, Any] = field(default_factory=dict)
    products: list[dict[str, Any]] = field(default_factory=list)
    raw: str = ""

    @property
    def enabled_products(self) -> list[str]:
        """Names of enabled products."""
        return [p.get("name", "") for p in self.products if p.get("enabled", True)]


def parse_config(document: str) -> ClusterConfig:
    """Parse the installer configuration document.

    Raises:
        ValueError: If the document is not valid configuration YAML.
    """
    try:
        data = yaml.safe_load(document) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid configuration YAML: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("tssc"), dict):
        raise ValueError("Configuration must contain a 'tssc' mapping")

    root = data["tssc"]
    namespace = root.get("namespace", DEFAULT_NAMESPACE)
    if not isinstance(namespace, str) or not namespace:
        raise ValueError("'tssc.namespace' must be a non-empty string")

    settings = root.get("settings") or {}
    products = root.get("products") or []
    if not isinstance(settings, dict):
        raise ValueError("'tssc.settings' must be a mapping")
    if not isinstance(products, list) or not all(isinstance(p, dict) for p in products):
        raise ValueError("'tssc.products' must be a list of mappings")

    return ClusterConfig(namespace=namespace, settings=settings, products=products, raw=document)


class ConfigMapManager:
    """Read and write the cluster configuration ConfigMap."""

    def __init__(self, kubectl: Kubectl, namespace: str = DEFAULT_NAMESPACE):
        """Initialize manager.

        Args:
            kubectl: Cluster transport.
            namespace: Namespace holding the configuration ConfigMap.
        """
        self.kubectl = kubectl
        self.namespace = namespace

    async def get_config(self) -> ClusterConfig:
        """Read the cluster configuration.

        Raises:
            ClusterConfigNotFoundError: The ConfigMap is absent or unreadable.
            ClusterError: Transport failures.
        """
        try:
            configmap = await self.kubectl.get_json(
                "configmap", CONFIGMAP_NAME, "-n", self.namespace
            )
        except KubectlError as e:
            if e.not_found:
                raise ClusterConfigNotFoundError(
                    message=f"ConfigMap {self.namespace}/{CONFIGMAP_NAME} not found",
                    data={"namespace": self.namespace, "name": CONFIGMAP_NAME},
                ) from e
            raise

        document = (configmap.get("data") or {}).get(CONFIGMAP_KEY)
        if not document:
            raise ClusterConfigNotFoundError(
                message=f"ConfigMap {self.namespace}/{CONFIGMAP_NAME} has no {CONFIGMAP_KEY!r}",
                data={"namespace": self.namespace, "name": CONFIGMAP_NAME},
            )
        try:
            return parse_config(document)
        except ValueError as e:
            raise ClusterConfigNotFoundError(
                message=f"ConfigMap {self.namespace}/{CONFIGMAP_NAME} is unreadable: {e}",
                data={"namespace": self.namespace, "name": CONFIGMAP_NAME},
            ) from e

    def build_manifest(self, config: ClusterConfig) -> dict[str, Any]:
        """Build the ConfigMap manifest for a configuration."""
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": CONFIGMAP_NAME,
                "namespace": self.namespace,
                "labels": {CONFIGMAP_LABEL: "true"},
            },
            "data": {CONFIGMAP_KEY: config.raw},
        }

    async def create(self, document: str, force: bool = False) -> ClusterConfig:
        """Store a configuration document in the cluster.

        Args:
            document: Configuration YAML.
            force: Overwrite an existing configuration.

        Raises:
            ValueError: The document is invalid.
            ClusterError: The configuration exists and ``force`` is not set,
                or a transport failure.
        """
        config = parse_config(document)
        if not force and await self.kubectl.exists("configmap", CONFIGMAP_NAME, self.namespace):
            raise ClusterError(
                message=(
                    f"ConfigMap {self.namespace}/{CONFIGMAP_NAME} already exists, "
                    "use --force to overwrite it"
                ),
            )
        await self.kubectl.ensure_namespace(self.namespace)
        logger.info(f"Storing cluster configuration in {self.namespace}/{CONFIGMAP_NAME}")
        await self.kubectl.apply(yaml.safe_dump(self.build_manifest(config), sort_keys=False))
        return config

    async def delete(self) -> None:
        """Remove the configuration ConfigMap."""
        await self.kubectl.delete("configmap", CONFIGMAP_NAME, self.namespace)
