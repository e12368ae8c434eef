"""Unit tests for the installer Job."""

import pytest
import yaml

from tssc_cli.cluster.errors import InstallerJobError, KubectlError
from tssc_cli.cluster.job import (
    DEFAULT_IMAGE,
    INSTALLER_COMMAND,
    JOB_NAME,
    InstallerJob,
    JobState,
    job_state_from_status,
)

pytestmark = pytest.mark.cluster

NOT_FOUND = KubectlError(stderr=f'jobs.batch "{JOB_NAME}" not found')


class TestJobState:
    """Tests for job_state_from_status."""

    @pytest.mark.parametrize(
        "status, state",
        [
            ({}, JobState.DEPLOYING),
            ({"active": 1}, JobState.DEPLOYING),
            ({"succeeded": 1}, JobState.DONE),
            ({"failed": 1}, JobState.FAILED),
            ({"failed": 1, "active": 1}, JobState.DEPLOYING),
        ],
    )
    def test_states(self, status, state):
        """Job status blocks map to states."""
        assert job_state_from_status(status) == state


class TestInstallerJob:
    """Tests for InstallerJob."""

    @pytest.mark.asyncio
    async def test_get_state_not_found(self, mock_kubectl):
        """An absent job is NOT_FOUND."""
        mock_kubectl.get_json.side_effect = NOT_FOUND

        assert await InstallerJob(mock_kubectl).get_state("tssc") == JobState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_state(self, mock_kubectl):
        """The job status is classified."""
        mock_kubectl.get_json.return_value = {"status": {"succeeded": 1}}

        assert await InstallerJob(mock_kubectl).get_state("tssc") == JobState.DONE
        mock_kubectl.get_json.assert_awaited_once_with("job", JOB_NAME, "-n", "tssc")

    @pytest.mark.asyncio
    async def test_get_state_transport_error(self, mock_kubectl):
        """Transport errors propagate."""
        mock_kubectl.get_json.side_effect = KubectlError(stderr="connection refused")

        with pytest.raises(KubectlError):
            await InstallerJob(mock_kubectl).get_state("tssc")

    def test_log_follow_cmd(self, mock_kubectl):
        """The logs command follows the job."""
        assert InstallerJob(mock_kubectl).log_follow_cmd("tssc") == (
            f"kubectl --namespace=tssc logs --follow job/{JOB_NAME}"
        )

    def test_build_manifests(self, mock_kubectl):
        """ServiceAccount, binding and Job are generated."""
        manifests = InstallerJob(mock_kubectl, backoff_limit=2).build_manifests("tssc", "img:1")

        assert [m["kind"] for m in manifests] == [
            "ServiceAccount",
            "ClusterRoleBinding",
            "Job",
        ]
        job = manifests[2]
        assert job["spec"]["backoffLimit"] == 2
        container = job["spec"]["template"]["spec"]["containers"][0]
        assert container["image"] == "img:1"
        assert container["command"] == list(INSTALLER_COMMAND)
        assert {"name": "TSSC_NAMESPACE", "value": "tssc"} in container["env"]

    def test_custom_command(self, mock_kubectl):
        """The container command can follow a different installer image."""
        job = InstallerJob(mock_kubectl, command=("installer", "run")).build_manifests(
            "tssc", "img:1"
        )[2]

        container = job["spec"]["template"]["spec"]["containers"][0]
        assert container["command"] == ["installer", "run"]

    @pytest.mark.asyncio
    async def test_create(self, mock_kubectl):
        """A new job is applied with the default image."""
        mock_kubectl.get_json.side_effect = NOT_FOUND

        await InstallerJob(mock_kubectl).create("tssc")

        mock_kubectl.delete.assert_not_awaited()
        docs = list(yaml.safe_load_all(mock_kubectl.apply.await_args.args[0]))
        assert docs[2]["spec"]["template"]["spec"]["containers"][0]["image"] == DEFAULT_IMAGE

    @pytest.mark.asyncio
    async def test_create_replaces_finished_job(self, mock_kubectl):
        """A finished job is deleted first."""
        mock_kubectl.get_json.return_value = {"status": {"failed": 1}}

        await InstallerJob(mock_kubectl).create("tssc", image="img:2")

        mock_kubectl.delete.assert_awaited_once_with("job", JOB_NAME, "tssc")
        mock_kubectl.apply.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_running_job(self, mock_kubectl):
        """A running job blocks a new deployment."""
        mock_kubectl.get_json.return_value = {"status": {"active": 1}}

        with pytest.raises(InstallerJobError):
            await InstallerJob(mock_kubectl).create("tssc")

        mock_kubectl.apply.assert_not_awaited()
