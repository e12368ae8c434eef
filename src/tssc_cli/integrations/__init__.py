"""Integrations: external systems whose credentials live in cluster secrets.

Each integration validates its input, builds its secret payload and is
persisted through IntegrationSecret. IntegrationManager reports which
integrations are configured for the topology resolver.
"""

from .acs import ACSIntegration
from .base import (
    Integration,
    IntegrationAPIError,
    IntegrationSecret,
    IntegrationValidationError,
    SecretRef,
    secret_name,
    validate_json,
    validate_url,
)
from .github import GitHubIntegration
from .gitlab import GitLabIntegration
from .image_registry import ImageRegistryIntegration
from .jenkins import JenkinsIntegration
from .manager import INTEGRATIONS, IntegrationInfo, IntegrationManager

__all__ = [
    # Base
    "Integration",
    "IntegrationSecret",
    "SecretRef",
    "secret_name",
    "validate_json",
    "validate_url",
    # Errors
    "IntegrationAPIError",
    "IntegrationValidationError",
    # Integrations
    "ACSIntegration",
    "GitHubIntegration",
    "GitLabIntegration",
    "ImageRegistryIntegration",
    "JenkinsIntegration",
    # State
    "INTEGRATIONS",
    "IntegrationInfo",
    "IntegrationManager",
]
