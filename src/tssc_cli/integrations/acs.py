"""Advanced Cluster Security (ACS) integration."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from .base import Integration, IntegrationValidationError

if TYPE_CHECKING:
    from ..cluster.config import ClusterConfig

# Central endpoint is "host:port", without a scheme
_ENDPOINT_RE = re.compile(r"^[A-Za-z0-9.\-]+:\d{1,5}$")


class ACSIntegration(Integration):
    name = "acs"

    def __init__(self, endpoint: str = "", token: str = ""):
        self.endpoint = endpoint
        self.token = token

    def log_fields(self) -> dict[str, Any]:
        return {"endpoint": self.endpoint, "token_len": len(self.token)}

    def validate(self) -> None:
        if not _ENDPOINT_RE.match(self.endpoint or ""):
            raise IntegrationValidationError(
                f"endpoint must be 'host:port' without a scheme, got {self.endpoint!r}"
            )
        if not self.token:
            raise IntegrationValidationError("token is required")

    async def data(self, config: ClusterConfig) -> dict[str, str]:
        return {"endpoint": self.endpoint, "token": self.token}
