"""Async kubectl wrapper.

All cluster access goes through ``Kubectl.run`` so timeouts, cancellation
and error classification are handled in one place.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import yaml

from .errors import ClusterError, ClusterTimeoutError, KubectlError, KubectlNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class KubectlResult:
    """Completed kubectl invocation."""

    returncode: int
    stdout: str
    stderr: str


class Kubectl:
    """Run kubectl commands against the active cluster."""

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize kubectl wrapper.

        Args:
            kubeconfig: Path to kubeconfig file.
            context: Kubeconfig context to use.
            timeout: Default per-command timeout in seconds.
        """
        self.kubeconfig = kubeconfig
        self.context = context
        self.timeout = timeout

    def _kubectl_cmd(self) -> list[str]:
        """Build base kubectl command."""
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        if self.context:
            cmd.extend(["--context", self.context])
        return cmd

    async def run(
        self,
        *args: str,
        input: str | None = None,
        timeout: float | None = None,
        check: bool = True,
    ) -> KubectlResult:
        """Run a kubectl command.

        Args:
            *args: kubectl arguments, e.g. ("get", "secrets", "-n", "tssc").
            input: Optional text written to stdin.
            timeout: Override of the default timeout.
            check: Raise KubectlError on non-zero exit.

        Raises:
            KubectlNotFoundError: kubectl is not installed.
            ClusterTimeoutError: The command did not finish in time.
            KubectlError: Non-zero exit status with ``check``.
        """
        cmd = self._kubectl_cmd() + list(args)
        timeout = self.timeout if timeout is None else timeout
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise KubectlNotFoundError() from e
        except OSError as e:
            raise ClusterError(message=f"Failed to run kubectl: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(input.encode() if input is not None else None),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            _kill(proc)
            raise ClusterTimeoutError(
                message=f"kubectl {' '.join(args[:2])} timed out after {timeout:g}s",
                data={"command": cmd, "timeout": timeout},
            ) from e
        except asyncio.CancelledError:
            _kill(proc)
            raise

        result = KubectlResult(
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
        if check and result.returncode != 0:
            raise KubectlError(
                message=f"kubectl {' '.join(args[:2])} failed: {result.stderr.strip()}",
                returncode=result.returncode,
                stderr=result.stderr,
                data={"command": cmd},
            )
        return result

    async def get_json(self, *args: str, timeout: float | None = None) -> dict[str, Any]:
        """Run ``kubectl get ... -o json`` and decode the output."""
        result = await self.run("get", *args, "-o", "json", timeout=timeout)
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ClusterError(message=f"Invalid JSON from kubectl: {e}") from e

    async def apply(self, manifest: str, timeout: float | None = None) -> KubectlResult:
        """Apply a manifest passed on stdin."""
        return await self.run("apply", "-f", "-", input=manifest, timeout=timeout)

    async def ensure_namespace(self, namespace: str) -> None:
        """Create the namespace when it does not exist yet."""
        manifest = {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": namespace}}
        await self.apply(yaml.safe_dump(manifest))

    async def delete(self, kind: str, name: str, namespace: str) -> KubectlResult:
        """Delete a namespaced resource, ignoring absence."""
        return await self.run("delete", kind, name, "-n", namespace, "--ignore-not-found")

    async def exists(self, kind: str, name: str, namespace: str) -> bool:
        """Whether a namespaced resource exists."""
        try:
            await self.run("get", kind, name, "-n", namespace, "-o", "name")
        except KubectlError as e:
            if e.not_found:
                return False
            raise
        return True


def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill a child process that is still running."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
