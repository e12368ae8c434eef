"""Unit tests for tssc_cli.config (local CLI settings)."""

from unittest.mock import patch

import pytest
import yaml

from tssc_cli.cluster.config import DEFAULT_NAMESPACE
from tssc_cli.cluster.job import DEFAULT_IMAGE
from tssc_cli.cluster.kubectl import DEFAULT_TIMEOUT
from tssc_cli.config import (
    CONFIG_KEYS,
    ENV_VARS,
    CLIConfig,
    load_config,
    save_config,
    unset_config,
)


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Isolated config file path with TSSC_* variables cleared."""
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    path = tmp_path / ".tssc" / "config.yaml"
    with patch("tssc_cli.config.get_config_path", return_value=path):
        yield path


@pytest.mark.cli_unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, config_path):
        """Without file or environment the defaults apply."""
        config = load_config()

        assert config.values() == {
            "kubeconfig": None,
            "namespace": DEFAULT_NAMESPACE,
            "timeout": DEFAULT_TIMEOUT,
            "image": DEFAULT_IMAGE,
            "collection": None,
        }
        assert all(config.get_source(key) == "default" for key in CONFIG_KEYS)

    def test_file_values(self, config_path):
        """File values override defaults."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("namespace: rhtap\ntimeout: 5\ncollection: /c.yaml\n")

        config = load_config()

        assert config.namespace == "rhtap"
        assert config.timeout == 5.0
        assert config.collection == "/c.yaml"
        assert config.get_source("namespace") == "config file"
        assert config.get_source("image") == "default"

    def test_environment_overrides_file(self, config_path, monkeypatch):
        """Environment variables override the file."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("namespace: rhtap\n")
        monkeypatch.setenv("TSSC_NAMESPACE", "from-env")
        monkeypatch.setenv("TSSC_TIMEOUT", "2.5")

        config = load_config()

        assert config.namespace == "from-env"
        assert config.timeout == 2.5
        assert config.get_source("namespace") == "environment"

    def test_invalid_environment_timeout(self, config_path, monkeypatch):
        """Invalid environment values name the variable."""
        monkeypatch.setenv("TSSC_TIMEOUT", "soon")

        with pytest.raises(ValueError) as exc_info:
            load_config()

        assert "TSSC_TIMEOUT" in str(exc_info.value)

    def test_invalid_yaml(self, config_path):
        """Undecodable files raise ValueError."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("namespace: [unclosed\n")

        with pytest.raises(ValueError) as exc_info:
            load_config()

        assert "Invalid config file" in str(exc_info.value)

    def test_unknown_keys_are_ignored(self, config_path):
        """Keys outside the known set are ignored."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("server: http://x\n")

        assert load_config().values() == CLIConfig().values()


@pytest.mark.cli_unit
class TestSaveConfig:
    """Tests for save_config and unset_config."""

    def test_save_creates_file(self, config_path):
        """save_config creates the file and directory."""
        save_config("timeout", "10")

        assert yaml.safe_load(config_path.read_text()) == {"timeout": 10.0}

    def test_save_preserves_other_keys(self, config_path):
        """Existing keys are kept."""
        save_config("namespace", "rhtap")
        save_config("image", "quay.io/x/cli:1")

        assert yaml.safe_load(config_path.read_text()) == {
            "namespace": "rhtap",
            "image": "quay.io/x/cli:1",
        }

    def test_save_unknown_key(self, config_path):
        """Unknown keys are rejected."""
        with pytest.raises(ValueError):
            save_config("server", "x")

    def test_unset(self, config_path):
        """unset_config removes a key and reports it."""
        save_config("namespace", "rhtap")

        assert unset_config("namespace") is True
        assert unset_config("namespace") is False
        assert yaml.safe_load(config_path.read_text()) == {}
