"""Unit tests for tssc config commands."""

import json

import pytest
import yaml
from click.testing import CliRunner

from tssc_cli.cluster.config import CONFIGMAP_KEY
from tssc_cli.main import cli

pytestmark = pytest.mark.cli_unit

CLUSTER_DOCUMENT = """\
tssc:
  namespace: tssc
  products:
    - name: Developer Hub
      enabled: true
    - name: Trusted Artifact Signer
      enabled: false
"""


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture
def config_path(cli_env, tmp_path):
    """Path of the isolated local config file."""
    return tmp_path / ".tssc" / "config.yaml"


class TestConfigShow:
    """Tests for tssc config show."""

    def test_defaults(self, runner, config_path):
        """Defaults are shown with their source."""
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "tssc CLI Configuration" in result.output
        assert f"Config file: {config_path}" in result.output
        assert "namespace   tssc  [default]" in result.output
        assert "kubeconfig  (not set)  [default]" in result.output

    def test_sources_json(self, runner, config_path, monkeypatch):
        """File, environment and flag values report their source."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("namespace: from-file\ntimeout: 12\n")
        monkeypatch.setenv("TSSC_IMAGE", "quay.io/x/cli:env")

        result = runner.invoke(cli, ["--json", "--kubeconfig", "/k", "config", "show"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["values"]["namespace"] == "from-file"
        assert data["values"]["timeout"] == 12.0
        assert data["values"]["image"] == "quay.io/x/cli:env"
        assert data["values"]["kubeconfig"] == "/k"
        assert data["sources"] == {
            "kubeconfig": "flag",
            "namespace": "config file",
            "timeout": "config file",
            "image": "environment",
            "collection": "default",
        }

    def test_invalid_config_file(self, runner, config_path):
        """An unreadable config file is reported."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("- a\n- b\n")

        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 1
        assert "must contain a mapping" in result.output


class TestConfigSetUnset:
    """Tests for tssc config set and unset."""

    def test_set(self, runner, config_path):
        """set writes the config file."""
        result = runner.invoke(cli, ["config", "set", "namespace", "rhtap"])

        assert result.exit_code == 0
        assert "✓ Set namespace = rhtap" in result.output
        assert yaml.safe_load(config_path.read_text()) == {"namespace": "rhtap"}

    def test_set_invalid_timeout(self, runner, config_path):
        """Invalid values are rejected."""
        result = runner.invoke(cli, ["config", "set", "timeout", "0"])

        assert result.exit_code == 1
        assert "timeout must be positive" in result.output
        assert not config_path.exists()

    def test_set_unknown_key(self, runner, config_path):
        """Unknown keys are usage errors."""
        result = runner.invoke(cli, ["config", "set", "server", "x"])

        assert result.exit_code == 2

    def test_unset(self, runner, config_path):
        """unset removes a key."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("namespace: rhtap\nimage: x\n")

        result = runner.invoke(cli, ["config", "unset", "namespace"])

        assert result.exit_code == 0
        assert "✓ Unset namespace" in result.output
        assert yaml.safe_load(config_path.read_text()) == {"image": "x"}

    def test_unset_missing(self, runner, config_path):
        """Unsetting an absent key is not an error."""
        result = runner.invoke(cli, ["config", "unset", "image"])

        assert result.exit_code == 0
        assert "image is not set" in result.output


class TestClusterConfig:
    """Tests for tssc config get, create and delete."""

    def test_get(self, runner, cli_env):
        """get prints the stored document."""
        result = runner.invoke(cli, ["config", "get"])

        assert result.exit_code == 0
        assert result.output == cli_env.config_document

    def test_get_json(self, runner, cli_env):
        """JSON output carries the parsed sections."""
        result = runner.invoke(cli, ["--json", "config", "get"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["namespace"] == "tssc"
        assert data["settings"] == {"crc": False}

    def test_get_not_configured(self, runner, cli_env):
        """A missing configuration exits with status 1."""
        cli_env.config_document = None

        result = runner.invoke(cli, ["config", "get"])

        assert result.exit_code == 1
        assert "The cluster is not configured yet" in result.output

    def test_create(self, runner, cli_env, tmp_path):
        """create stores the document and lists enabled products."""
        path = tmp_path / "config.yaml"
        path.write_text(CLUSTER_DOCUMENT)

        result = runner.invoke(cli, ["config", "create", str(path)])

        assert result.exit_code == 0, result.output
        assert "✓ Configuration stored in namespace 'tssc'" in result.output
        assert "Enabled products:\n  - Developer Hub" in result.output
        applied = yaml.safe_load(cli_env.apply.await_args.args[0])
        assert applied["data"][CONFIGMAP_KEY] == CLUSTER_DOCUMENT

    def test_create_existing(self, runner, cli_env, tmp_path):
        """An existing configuration needs --force."""
        cli_env.exists.return_value = True
        path = tmp_path / "config.yaml"
        path.write_text(CLUSTER_DOCUMENT)

        result = runner.invoke(cli, ["config", "create", str(path)])

        assert result.exit_code == 1
        assert "--force" in result.output

        result = runner.invoke(cli, ["config", "create", "--force", str(path)])
        assert result.exit_code == 0, result.output

    def test_create_invalid(self, runner, cli_env, tmp_path):
        """An invalid document exits with status 1."""
        path = tmp_path / "config.yaml"
        path.write_text("nope: 1\n")

        result = runner.invoke(cli, ["config", "create", str(path)])

        assert result.exit_code == 1
        assert "must contain a 'tssc' mapping" in result.output
        cli_env.apply.assert_not_awaited()

    def test_delete(self, runner, cli_env):
        """delete removes the ConfigMap after confirmation."""
        result = runner.invoke(cli, ["config", "delete", "--yes"])

        assert result.exit_code == 0
        assert "✓ Cluster configuration deleted." in result.output
        cli_env.delete.assert_awaited_once_with("configmap", "tssc-config", "tssc")

    def test_delete_aborted(self, runner, cli_env):
        """Declining the prompt leaves the configuration alone."""
        result = runner.invoke(cli, ["config", "delete"], input="n\n")

        assert result.exit_code == 1
        cli_env.delete.assert_not_awaited()
