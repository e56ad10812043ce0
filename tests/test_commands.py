"""Tests for the subprocess wrapper."""
import subprocess
from unittest.mock import patch

import pytest

from autostack.core.errors import MissingDependencyError, ProvisioningError
from autostack.services.commands import CommandRunner


class TestCommandRunner:

    @patch("autostack.services.commands.subprocess.run")
    def test_run_passes_options(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["docker"], 0, stdout="ok", stderr="")

        result = CommandRunner(timeout=42).run(["docker", "compose", "up", "-d"], cwd="/srv/stack")

        assert result.stdout == "ok"
        mock_run.assert_called_once_with(
            ["docker", "compose", "up", "-d"],
            capture_output=True,
            text=True,
            check=True,
            cwd="/srv/stack",
            input=None,
            timeout=42,
        )

    @patch("autostack.services.commands.subprocess.run")
    def test_mock_mode_does_not_execute(self, mock_run):
        result = CommandRunner(mock=True).run(["apt-get", "update"])

        assert result.returncode == 0
        mock_run.assert_not_called()

    @patch("autostack.services.commands.subprocess.run")
    def test_failure_raises_provisioning_error(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(100, ["apt-get"], stderr="E: locked")

        with pytest.raises(ProvisioningError, match="apt-get update"):
            CommandRunner().run(["apt-get", "update"])

    @patch("autostack.services.commands.subprocess.run")
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError()

        with pytest.raises(MissingDependencyError, match="docker is required"):
            CommandRunner().run(["docker", "ps"])

    @patch("autostack.services.commands.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["apt-get"], 5)

        with pytest.raises(ProvisioningError, match="Timed out"):
            CommandRunner(timeout=5).run(["apt-get", "install", "-y", "docker-ce"])

    @patch("autostack.services.commands.subprocess.run")
    def test_try_run_reports_failure(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["docker"], 1, stdout="", stderr="boom")

        assert CommandRunner().try_run(["docker", "system", "prune", "-af"]) is False
        assert mock_run.call_args[1]["check"] is False

    @patch("autostack.services.commands.subprocess.run")
    def test_try_run_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError()

        assert CommandRunner().try_run(["docker", "ps"]) is False

    @patch("autostack.services.commands.subprocess.run")
    def test_output_lines(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["docker"], 0, stdout="abc\n\ndef\n", stderr="")

        assert CommandRunner().output_lines(["docker", "ps", "-aq"]) == ["abc", "def"]
