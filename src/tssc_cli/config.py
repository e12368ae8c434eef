"""CLI configuration management.

Handles persistent CLI configuration stored in ~/.tssc/config.yaml.
Supports environment variable overrides; command line flags take precedence
over both.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .cluster.config import DEFAULT_NAMESPACE
from .cluster.job import DEFAULT_IMAGE
from .cluster.kubectl import DEFAULT_TIMEOUT
from .shared.paths import CONFIG_FILE

# Environment variable mappings
ENV_VARS = {
    "kubeconfig": "TSSC_KUBECONFIG",
    "namespace": "TSSC_NAMESPACE",
    "timeout": "TSSC_TIMEOUT",
    "image": "TSSC_IMAGE",
    "collection": "TSSC_COLLECTION",
}

CONFIG_KEYS = tuple(ENV_VARS)


@dataclass
class CLIConfig:
    """CLI configuration."""

    kubeconfig: str | None = None
    namespace: str = DEFAULT_NAMESPACE
    timeout: float = DEFAULT_TIMEOUT
    image: str = DEFAULT_IMAGE
    collection: str | None = None

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def values(self) -> dict[str, Any]:
        """Config values keyed by name."""
        return {key: getattr(self, key) for key in CONFIG_KEYS}


def get_config_path() -> Path:
    """Get the CLI config file path.

    Returns:
        Path to ~/.tssc/config.yaml
    """
    return CONFIG_FILE


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw config value to the field's type."""
    if key == "timeout":
        timeout = float(value)
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {value!r}")
        return timeout
    return str(value)


def _read_file(config_path: Path) -> dict[str, Any]:
    """Read the config file; a missing file is an empty config."""
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping")
    return data


def load_config() -> CLIConfig:
    """Load CLI configuration.

    Precedence (highest to lowest):
    1. Environment variables
    2. Config file (~/.tssc/config.yaml)
    3. Defaults

    Raises:
        ValueError: If the config file or an environment value is invalid.

    Returns:
        CLIConfig with values and sources
    """
    config = CLIConfig()
    sources: dict[str, str] = {key: "default" for key in CONFIG_KEYS}

    config_path = get_config_path()
    try:
        file_config = _read_file(config_path)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    for key in CONFIG_KEYS:
        if file_config.get(key) is not None:
            setattr(config, key, _coerce(key, file_config[key]))
            sources[key] = "config file"

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            try:
                setattr(config, key, _coerce(key, os.environ[env_var]))
            except ValueError as e:
                raise ValueError(f"Invalid {env_var}: {e}") from e
            sources[key] = "environment"

    config._sources = sources
    return config


def save_config(key: str, value: Any) -> None:
    """Save a config value to the config file.

    Args:
        key: Config key (kubeconfig, namespace, timeout, image, collection)
        value: Value to save

    Raises:
        ValueError: Unknown key or invalid value.
    """
    if key not in CONFIG_KEYS:
        raise ValueError(f"Unknown config key: {key}")

    config_path = get_config_path()
    existing = _read_file(config_path)
    existing[key] = _coerce(key, value)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)


def unset_config(key: str) -> bool:
    """Remove a config value from the config file.

    Args:
        key: Config key to remove

    Returns:
        True if key was removed, False if not found
    """
    config_path = get_config_path()
    existing = _read_file(config_path)
    if key not in existing:
        return False

    del existing[key]

    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)

    return True
