"""Integration base classes and secret persistence.

Every integration stores its credentials in one Kubernetes secret,
``tssc-<name>-integration``, in the installer namespace. A secret's
presence is what makes an integration "configured".
"""

from __future__ import annotations

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import urlparse

import structlog
import yaml

from ..resolver.errors import ConfiguredIntegrationError

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig
    from ..cluster.kubectl import Kubectl

logger = structlog.get_logger(__name__)

SECRET_TYPE_OPAQUE = "Opaque"
SECRET_TYPE_DOCKERCONFIGJSON = "kubernetes.io/dockerconfigjson"


class IntegrationValidationError(ValueError):
    """Integration input is incomplete or malformed."""


class IntegrationAPIError(Exception):
    """The integration's remote API could not be queried."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def validate_json(name: str, value: str) -> None:
    """Ensure ``value`` is a JSON document."""
    try:
        json.loads(value)
    except (TypeError, json.JSONDecodeError) as e:
        raise IntegrationValidationError(f"{name}: invalid JSON: {e}") from e


def validate_url(value: str) -> None:
    """Ensure ``value`` is an absolute http(s) URL."""
    parsed = urlparse(value or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise IntegrationValidationError(f"invalid URL: {value!r}")


def secret_name(integration: str) -> str:
    """Name of the secret holding an integration's credentials."""
    return f"tssc-{integration}-integration"


class Integration(ABC):
    """An external system whose credentials live in a cluster secret."""

    name: ClassVar[str]
    secret_type: ClassVar[str] = SECRET_TYPE_OPAQUE

    def validate(self) -> None:
        """Check the integration input.

        Raises:
            IntegrationValidationError: If the input is incomplete.
        """

    @abstractmethod
    async def data(self, config: ClusterConfig) -> dict[str, str]:
        """Secret payload for the integration."""

    def log_fields(self) -> dict[str, Any]:
        """Fields safe to log; secret values appear only as lengths."""
        return {}


@dataclass
class SecretRef:
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class IntegrationSecret:
    """Persist an integration as a Kubernetes secret."""

    def __init__(self, kubectl: Kubectl, integration: Integration, force: bool = False):
        """Initialize secret manager.

        Args:
            kubectl: Cluster transport.
            integration: Integration to persist.
            force: Replace an existing secret instead of failing.
        """
        self.kubectl = kubectl
        self.integration = integration
        self.force = force

    def _log(self) -> structlog.stdlib.BoundLogger:
        return logger.bind(
            integration=self.integration.name,
            force=self.force,
            **self.integration.log_fields(),
        )

    def secret_ref(self, config: ClusterConfig) -> SecretRef:
        return SecretRef(namespace=config.namespace, name=secret_name(self.integration.name))

    async def exists(self, config: ClusterConfig) -> bool:
        ref = self.secret_ref(config)
        return await self.kubectl.exists("secret", ref.name, ref.namespace)

    async def _prepare(self, config: ClusterConfig) -> None:
        """Clear the way for a new secret, honouring ``force``."""
        log = self._log()
        log.debug("checking if integration secret exists")
        if not await self.exists(config):
            log.debug("integration secret does not exist")
            return
        ref = self.secret_ref(config)
        if not self.force:
            log.debug("integration secret already exists")
            raise ConfiguredIntegrationError(integration=self.integration.name, secret=str(ref))
        log.debug("integration secret already exists, recreating it")
        await self.kubectl.delete("secret", ref.name, ref.namespace)

    def build_manifest(self, config: ClusterConfig, data: dict[str, str]) -> dict[str, Any]:
        """Build the secret manifest with base64 encoded values."""
        ref = self.secret_ref(config)
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {"name": ref.name, "namespace": ref.namespace},
            "type": self.integration.secret_type,
            "data": {
                key: base64.b64encode(value.encode()).decode() for key, value in data.items()
            },
        }

    async def create(self, config: ClusterConfig) -> SecretRef:
        """Validate the integration and store its secret.

        Raises:
            IntegrationValidationError: Invalid input.
            ConfiguredIntegrationError: The secret exists and ``force`` is off.
            IntegrationAPIError: The remote API lookup failed.
            ClusterError: Transport failures.
        """
        self.integration.validate()
        log = self._log()
        log.info("inspecting the cluster for an existing integration secret")
        await self.kubectl.ensure_namespace(config.namespace)
        await self._prepare(config)

        data = await self.integration.data(config)
        ref = self.secret_ref(config)
        log.debug("creating integration secret", secret=str(ref))
        await self.kubectl.apply(yaml.safe_dump(self.build_manifest(config, data)))
        log.info("integration secret created", secret=str(ref))
        return ref

    async def delete(self, config: ClusterConfig) -> None:
        """Remove the integration secret."""
        ref = self.secret_ref(config)
        self._log().info("deleting integration secret", secret=str(ref))
        await self.kubectl.delete("secret", ref.name, ref.namespace)
