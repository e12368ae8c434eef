"""GitLab integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from .base import Integration, IntegrationAPIError, IntegrationValidationError

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig

DEFAULT_GITLAB_HOST = "gitlab.com"


class GitLabIntegration(Integration):
    """GitLab host credentials, optionally with an OAuth application."""

    name = "gitlab"

    def __init__(
        self,
        token: str = "",
        group: str = "",
        host: str = DEFAULT_GITLAB_HOST,
        app_id: str = "",
        app_secret: str = "",
        insecure: bool = False,
        timeout: float = 30.0,
    ):
        self.token = token
        self.group = group
        self.host = host or DEFAULT_GITLAB_HOST
        self.app_id = app_id
        self.app_secret = app_secret
        self.insecure = insecure
        self.timeout = timeout

    def log_fields(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "group": self.group,
            "insecure": self.insecure,
            "app_id": self.app_id,
            "app_secret_len": len(self.app_secret),
            "token_len": len(self.token),
        }

    def validate(self) -> None:
        if not self.token:
            raise IntegrationValidationError("token is required")
        if not self.group:
            raise IntegrationValidationError("group is required")
        if self.app_id and not self.app_secret:
            raise IntegrationValidationError("app-secret is required when app-id is specified")
        if self.app_secret and not self.app_id:
            raise IntegrationValidationError("app-id is required when app-secret is specified")

    async def current_user(self) -> str:
        """Username the token authenticates as."""
        url = f"https://{self.host}/api/v4/user"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, verify=not self.insecure) as client:
                response = await client.get(url, headers={"PRIVATE-TOKEN": self.token})
                response.raise_for_status()
                return response.json()["username"]
        except httpx.HTTPStatusError as e:
            raise IntegrationAPIError(
                f"GitLab API returned {e.response.status_code} for {url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise IntegrationAPIError(f"Cannot reach GitLab at {self.host}: {e}") from e
        except (KeyError, ValueError) as e:
            raise IntegrationAPIError(f"Unexpected GitLab API response from {url}") from e

    async def data(self, config: ClusterConfig) -> dict[str, str]:
        username = await self.current_user()
        return {
            "clientId": self.app_id,
            "clientSecret": self.app_secret,
            "host": self.host,
            "token": self.token,
            "group": self.group,
            "username": username,
        }
