"""Container image registry integrations (Quay, Nexus, Artifactory)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import (
    SECRET_TYPE_DOCKERCONFIGJSON,
    Integration,
    IntegrationValidationError,
    validate_json,
    validate_url,
)

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig

DOCKERCONFIG_EXAMPLE = '{ "auths": { "registry.tld": { "auth": "username" } } }'

# Registry flavour -> default API endpoint
REGISTRY_DEFAULT_URLS = {
    "quay": "https://quay.io",
    "nexus": "",
    "artifactory": "",
}


class ImageRegistryIntegration(Integration):
    """Registry credentials shared by every registry flavour."""

    secret_type = SECRET_TYPE_DOCKERCONFIGJSON

    def __init__(
        self,
        name: str,
        dockerconfigjson: str = "",
        dockerconfigjson_readonly: str = "",
        url: str = "",
        token: str = "",
    ):
        if name not in REGISTRY_DEFAULT_URLS:
            raise ValueError(f"Unknown image registry: {name}")
        self.name = name
        self.dockerconfigjson = dockerconfigjson
        self.dockerconfigjson_readonly = dockerconfigjson_readonly
        self.url = url or REGISTRY_DEFAULT_URLS[name]
        self.token = token

    def log_fields(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "dockerconfigjson_len": len(self.dockerconfigjson),
            "dockerconfigjsonreadonly_len": len(self.dockerconfigjson_readonly),
            "token_len": len(self.token),
        }

    def validate(self) -> None:
        if not self.dockerconfigjson:
            raise IntegrationValidationError(
                f"dockerconfigjson is required, e.g.: {DOCKERCONFIG_EXAMPLE}"
            )
        validate_json("dockerconfigjson", self.dockerconfigjson)
        if self.dockerconfigjson_readonly:
            validate_json("dockerconfigjsonreadonly", self.dockerconfigjson_readonly)
        validate_url(self.url)

    async def data(self, config: ClusterConfig) -> dict[str, str]:
        return {
            ".dockerconfigjson": self.dockerconfigjson,
            ".dockerconfigjsonreadonly": self.dockerconfigjson_readonly,
            "url": self.url,
            "token": self.token,
        }
