"""GitHub integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from .base import Integration, IntegrationAPIError, IntegrationValidationError

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig

DEFAULT_GITHUB_HOST = "github.com"


class GitHubIntegration(Integration):
    """GitHub (or GitHub Enterprise) personal access token."""

    name = "github"

    def __init__(
        self,
        token: str = "",
        organization: str = "",
        host: str = DEFAULT_GITHUB_HOST,
        insecure: bool = False,
        timeout: float = 30.0,
    ):
        self.token = token
        self.organization = organization
        self.host = host or DEFAULT_GITHUB_HOST
        self.insecure = insecure
        self.timeout = timeout

    @property
    def api_url(self) -> str:
        """REST API base URL for the host."""
        if self.host == DEFAULT_GITHUB_HOST:
            return "https://api.github.com"
        return f"https://{self.host}/api/v3"

    def log_fields(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "organization": self.organization,
            "insecure": self.insecure,
            "token_len": len(self.token),
        }

    def validate(self) -> None:
        if not self.token:
            raise IntegrationValidationError("token is required")

    async def current_user(self) -> str:
        """Login the token authenticates as."""
        url = f"{self.api_url}/user"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, verify=not self.insecure) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                return response.json()["login"]
        except httpx.HTTPStatusError as e:
            raise IntegrationAPIError(
                f"GitHub API returned {e.response.status_code} for {url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise IntegrationAPIError(f"Cannot reach GitHub at {self.host}: {e}") from e
        except (KeyError, ValueError) as e:
            raise IntegrationAPIError(f"Unexpected GitHub API response from {url}") from e

    async def data(self, config: ClusterConfig) -> dict[str, str]:
        username = await self.current_user()
        return {
            "host": self.host,
            "token": self.token,
            "organization": self.organization,
            "username": username,
        }
