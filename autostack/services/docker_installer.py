"""Docker Engine and Compose plugin installation for Ubuntu hosts.

Mirrors Docker's documented apt setup:
1. Install apt prerequisites
2. Add Docker's GPG key to /etc/apt/keyrings
3. Add the stable repository for this architecture and release
4. Install docker-ce, the CLI, containerd and the buildx/compose plugins
"""
import os
import shutil
from pathlib import Path

from autostack.core.logger import get_logger
from autostack.services.commands import CommandRunner

logger = get_logger(__name__)

PREREQUISITE_PACKAGES = ["ca-certificates", "curl", "gnupg", "lsb-release"]
DOCKER_PACKAGES = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]


class DockerInstaller:
    """Installs Docker when the host does not have it yet."""

    GPG_URL = "https://download.docker.com/linux/ubuntu/gpg"
    REPO_URL = "https://download.docker.com/linux/ubuntu"
    KEYRING_DIR = Path("/etc/apt/keyrings")
    KEYRING = KEYRING_DIR / "docker.gpg"
    SOURCE_LIST = Path("/etc/apt/sources.list.d/docker.list")
    COMPOSE_PLUGIN = Path("/usr/libexec/docker/cli-plugins/docker-compose")
    COMPOSE_ALIAS = Path("/usr/local/bin/docker-compose")

    def __init__(self, mock: bool = False, runner: CommandRunner = None):
        self.mock = mock
        self.runner = runner or CommandRunner(mock=mock)

    def is_installed(self) -> bool:
        return shutil.which("docker") is not None

    def ensure_installed(self) -> bool:
        """Install Docker if missing.

        Returns:
            True if an installation was performed
        """
        if self.is_installed():
            logger.debug("Docker already installed")
            return False
        self.install()
        return True

    def install(self) -> None:
        """Install Docker Engine and the Compose plugin.

        Raises:
            ProvisioningError: If any apt or key setup command fails
        """
        logger.info("Docker not found. Installing Docker & Docker Compose...")

        self.runner.run(["apt-get", "update"])
        self.runner.run(["apt-get", "install", "-y", *PREREQUISITE_PACKAGES])

        self._install_gpg_key()
        self._write_source_list()

        self.runner.run(["apt-get", "update"])
        self.runner.run(["apt-get", "install", "-y", *DOCKER_PACKAGES])

        logger.info("✓ Docker and Docker Compose installed")

    def _install_gpg_key(self) -> None:
        if not self.mock:
            self.KEYRING_DIR.mkdir(parents=True, exist_ok=True)
        key = self.runner.run(["curl", "-fsSL", self.GPG_URL], text=False).stdout
        self.runner.run(
            ["gpg", "--dearmor", "--yes", "-o", str(self.KEYRING)],
            input=key,
            text=False,
        )

    def source_line(self, arch: str, codename: str) -> str:
        """Return the apt source entry for Docker's stable channel."""
        return (
            f"deb [arch={arch} signed-by={self.KEYRING}] "
            f"{self.REPO_URL} {codename} stable\n"
        )

    def _write_source_list(self) -> None:
        arch = self.runner.run(["dpkg", "--print-architecture"]).stdout.strip()
        codename = self.runner.run(["lsb_release", "-cs"]).stdout.strip()
        line = self.source_line(arch, codename)

        if self.mock:
            logger.info(f"MOCK: Would write {self.SOURCE_LIST}: {line.strip()}")
            return
        self.SOURCE_LIST.parent.mkdir(parents=True, exist_ok=True)
        self.SOURCE_LIST.write_text(line)

    def ensure_compose_alias(self) -> bool:
        """Expose the compose plugin as docker-compose for legacy scripts.

        Returns:
            True if docker-compose is available afterwards
        """
        if shutil.which("docker-compose"):
            return True

        if self.mock:
            logger.info(f"MOCK: Would link {self.COMPOSE_ALIAS} -> {self.COMPOSE_PLUGIN}")
            return True

        logger.info("Linking docker-compose plugin for compatibility...")
        try:
            os.symlink(self.COMPOSE_PLUGIN, self.COMPOSE_ALIAS)
        except OSError as e:
            logger.warning(f"Could not link docker-compose: {e}")
            return False
        return True
