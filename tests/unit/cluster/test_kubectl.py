"""Unit tests for the async kubectl wrapper."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tssc_cli.cluster.errors import (
    ClusterError,
    ClusterTimeoutError,
    KubectlError,
    KubectlNotFoundError,
)
from tssc_cli.cluster.kubectl import Kubectl

pytestmark = pytest.mark.cluster


def _process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    """Fake asyncio subprocess."""
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


class TestKubectlCommand:
    """Tests for command construction."""

    def test_base_command(self):
        """Without options only the binary is used."""
        assert Kubectl()._kubectl_cmd() == ["kubectl"]

    def test_kubeconfig_and_context(self):
        """Kubeconfig and context are passed through."""
        kubectl = Kubectl(kubeconfig="/tmp/kube", context="dev")
        assert kubectl._kubectl_cmd() == [
            "kubectl",
            "--kubeconfig",
            "/tmp/kube",
            "--context",
            "dev",
        ]


class TestKubectlRun:
    """Tests for Kubectl.run."""

    @pytest.mark.asyncio
    async def test_success(self):
        """stdout and stderr are decoded."""
        proc = _process(stdout=b"ok\n")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as exec_mock:
            result = await Kubectl(kubeconfig="/k").run("get", "pods")

        assert result.returncode == 0
        assert result.stdout == "ok\n"
        args = exec_mock.call_args.args
        assert args == ("kubectl", "--kubeconfig", "/k", "get", "pods")

    @pytest.mark.asyncio
    async def test_input_is_written_to_stdin(self):
        """Input text is encoded and passed to communicate."""
        proc = _process()
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            await Kubectl().run("apply", "-f", "-", input="kind: Namespace\n")

        proc.communicate.assert_awaited_once_with(b"kind: Namespace\n")

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        """A missing kubectl binary raises KubectlNotFoundError."""
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError())):
            with pytest.raises(KubectlNotFoundError):
                await Kubectl().run("version")

    @pytest.mark.asyncio
    async def test_os_error(self):
        """Other spawn failures raise ClusterError."""
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=PermissionError("no"))):
            with pytest.raises(ClusterError) as exc_info:
                await Kubectl().run("version")

        assert "Failed to run kubectl" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_nonzero_exit(self):
        """A failing command raises KubectlError with stderr."""
        proc = _process(stderr=b"forbidden\n", returncode=1)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(KubectlError) as exc_info:
                await Kubectl().run("get", "secrets")

        error = exc_info.value
        assert error.returncode == 1
        assert error.stderr == "forbidden\n"
        assert "kubectl get secrets failed: forbidden" == error.message
        assert not error.not_found

    @pytest.mark.asyncio
    async def test_nonzero_exit_without_check(self):
        """check=False returns the failing result."""
        proc = _process(returncode=3)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            result = await Kubectl().run("get", "secrets", check=False)

        assert result.returncode == 3

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        """A slow command is killed and raises ClusterTimeoutError."""

        async def slow_communicate(_input=None):
            await asyncio.sleep(10)

        proc = MagicMock()
        proc.returncode = None
        proc.communicate = slow_communicate
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with pytest.raises(ClusterTimeoutError) as exc_info:
                await Kubectl(timeout=0.01).run("get", "pods")

        proc.kill.assert_called_once()
        assert exc_info.value.retryable
        assert exc_info.value.data["timeout"] == 0.01

    @pytest.mark.asyncio
    async def test_cancellation_kills_process(self):
        """Cancelling a running command kills the child."""
        started = asyncio.Event()

        async def slow_communicate(_input=None):
            started.set()
            await asyncio.sleep(10)

        proc = MagicMock()
        proc.returncode = None
        proc.communicate = slow_communicate
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            task = asyncio.create_task(Kubectl().run("get", "pods"))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        proc.kill.assert_called_once()


class TestKubectlHelpers:
    """Tests for get_json, exists and friends."""

    @pytest.mark.asyncio
    async def test_get_json(self):
        """get_json appends -o json and decodes."""
        kubectl = Kubectl()
        with patch.object(kubectl, "run", AsyncMock()) as run:
            run.return_value = MagicMock(stdout='{"items": []}')
            data = await kubectl.get_json("secrets", "-n", "tssc")

        assert data == {"items": []}
        run.assert_awaited_once_with("get", "secrets", "-n", "tssc", "-o", "json", timeout=None)

    @pytest.mark.asyncio
    async def test_get_json_invalid(self):
        """Undecodable output is a ClusterError."""
        kubectl = Kubectl()
        with patch.object(kubectl, "run", AsyncMock(return_value=MagicMock(stdout="nope"))):
            with pytest.raises(ClusterError) as exc_info:
                await kubectl.get_json("secrets")

        assert "Invalid JSON" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_exists(self):
        """exists maps NotFound to False."""
        kubectl = Kubectl()
        not_found = KubectlError(stderr='Error from server (NotFound): secrets "x" not found')
        with patch.object(kubectl, "run", AsyncMock(side_effect=not_found)):
            assert await kubectl.exists("secret", "x", "tssc") is False
        with patch.object(kubectl, "run", AsyncMock()):
            assert await kubectl.exists("secret", "x", "tssc") is True

    @pytest.mark.asyncio
    async def test_exists_propagates_other_errors(self):
        """Errors other than NotFound propagate."""
        kubectl = Kubectl()
        error = KubectlError(stderr="Unable to connect to the server")
        with patch.object(kubectl, "run", AsyncMock(side_effect=error)):
            with pytest.raises(KubectlError):
                await kubectl.exists("secret", "x", "tssc")

    @pytest.mark.asyncio
    async def test_delete_ignores_absence(self):
        """delete passes --ignore-not-found."""
        kubectl = Kubectl()
        with patch.object(kubectl, "run", AsyncMock()) as run:
            await kubectl.delete("job", "tssc-installer", "tssc")

        run.assert_awaited_once_with(
            "delete", "job", "tssc-installer", "-n", "tssc", "--ignore-not-found"
        )

    @pytest.mark.asyncio
    async def test_ensure_namespace(self):
        """ensure_namespace applies a Namespace manifest."""
        kubectl = Kubectl()
        with patch.object(kubectl, "apply", AsyncMock()) as apply:
            await kubectl.ensure_namespace("tssc")

        manifest = apply.await_args.args[0]
        assert "kind: Namespace" in manifest
        assert "name: tssc" in manifest
