"""Tests for Docker installation."""
import subprocess
from unittest.mock import Mock, patch

import pytest

from autostack.core.errors import ProvisioningError
from autostack.services.docker_installer import DOCKER_PACKAGES, DockerInstaller


def fake_runner(arch="amd64", codename="jammy"):
    """Runner mock answering the arch/codename probes."""
    runner = Mock()

    def run(cmd, **kwargs):
        stdout = b"" if kwargs.get("text") is False else ""
        if cmd == ["dpkg", "--print-architecture"]:
            stdout = f"{arch}\n"
        elif cmd == ["lsb_release", "-cs"]:
            stdout = f"{codename}\n"
        elif cmd[0] == "curl":
            stdout = b"-----BEGIN PGP PUBLIC KEY BLOCK-----"
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")

    runner.run.side_effect = run
    return runner


@pytest.fixture
def installer(tmp_path, monkeypatch):
    """Installer writing its apt files below tmp_path."""
    monkeypatch.setattr(DockerInstaller, "KEYRING_DIR", tmp_path / "keyrings")
    monkeypatch.setattr(DockerInstaller, "KEYRING", tmp_path / "keyrings" / "docker.gpg")
    monkeypatch.setattr(DockerInstaller, "SOURCE_LIST", tmp_path / "sources" / "docker.list")
    return DockerInstaller(runner=fake_runner())


class TestDockerInstaller:

    def test_install_sequence(self, installer, tmp_path):
        installer.install()

        commands = [call.args[0] for call in installer.runner.run.call_args_list]
        assert commands[0] == ["apt-get", "update"]
        assert commands[1] == ["apt-get", "install", "-y", "ca-certificates", "curl", "gnupg", "lsb-release"]
        assert commands[-1] == ["apt-get", "install", "-y", *DOCKER_PACKAGES]
        assert ["gpg", "--dearmor", "--yes", "-o", str(tmp_path / "keyrings" / "docker.gpg")] in commands

    def test_gpg_key_piped_into_gpg(self, installer):
        installer.install()

        gpg_call = next(
            call for call in installer.runner.run.call_args_list if call.args[0][0] == "gpg"
        )
        assert gpg_call.kwargs["input"] == b"-----BEGIN PGP PUBLIC KEY BLOCK-----"

    def test_source_list_written(self, installer, tmp_path):
        installer.install()

        content = (tmp_path / "sources" / "docker.list").read_text()
        assert content.startswith("deb [arch=amd64 signed-by=")
        assert "https://download.docker.com/linux/ubuntu jammy stable" in content

    @patch("autostack.services.docker_installer.shutil.which", return_value="/usr/bin/docker")
    def test_ensure_installed_skips_when_present(self, _which, installer):
        assert installer.ensure_installed() is False
        installer.runner.run.assert_not_called()

    @patch("autostack.services.docker_installer.shutil.which", return_value=None)
    def test_ensure_installed_installs_when_missing(self, _which, installer):
        assert installer.ensure_installed() is True
        installer.runner.run.assert_called()

    def test_failure_propagates(self, installer):
        installer.runner.run.side_effect = ProvisioningError("Command failed: apt-get update")

        with pytest.raises(ProvisioningError):
            installer.install()

    def test_mock_mode_writes_nothing(self, tmp_path, monkeypatch):
        monkeypatch.setattr(DockerInstaller, "KEYRING_DIR", tmp_path / "keyrings")
        monkeypatch.setattr(DockerInstaller, "SOURCE_LIST", tmp_path / "docker.list")

        DockerInstaller(mock=True).install()

        assert not (tmp_path / "keyrings").exists()
        assert not (tmp_path / "docker.list").exists()


class TestComposeAlias:

    @patch("autostack.services.docker_installer.shutil.which", return_value="/usr/bin/docker-compose")
    def test_existing_alias(self, _which):
        assert DockerInstaller(runner=Mock()).ensure_compose_alias() is True

    @patch("autostack.services.docker_installer.shutil.which", return_value=None)
    def test_creates_symlink(self, _which, tmp_path, monkeypatch):
        plugin = tmp_path / "docker-compose-plugin"
        plugin.write_text("")
        alias = tmp_path / "docker-compose"
        monkeypatch.setattr(DockerInstaller, "COMPOSE_PLUGIN", plugin)
        monkeypatch.setattr(DockerInstaller, "COMPOSE_ALIAS", alias)

        assert DockerInstaller(runner=Mock()).ensure_compose_alias() is True
        assert alias.is_symlink()

    @patch("autostack.services.docker_installer.shutil.which", return_value=None)
    def test_link_failure_not_fatal(self, _which, tmp_path, monkeypatch):
        monkeypatch.setattr(DockerInstaller, "COMPOSE_ALIAS", tmp_path / "missing-dir" / "docker-compose")

        assert DockerInstaller(runner=Mock()).ensure_compose_alias() is False
