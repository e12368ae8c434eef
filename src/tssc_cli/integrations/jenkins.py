"""Jenkins integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import Integration, IntegrationValidationError, validate_url

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig


class JenkinsIntegration(Integration):
    name = "jenkins"

    def __init__(self, url: str = "", username: str = "", token: str = ""):
        self.url = url
        self.username = username
        self.token = token

    def log_fields(self) -> dict[str, Any]:
        return {"url": self.url, "username": self.username, "token_len": len(self.token)}

    def validate(self) -> None:
        validate_url(self.url)
        if not self.username:
            raise IntegrationValidationError("username is required")
        if not self.token:
            raise IntegrationValidationError("token is required")

    async def data(self, config: ClusterConfig) -> dict[str, str]:
        return {"baseUrl": self.url, "username": self.username, "token": self.token}
