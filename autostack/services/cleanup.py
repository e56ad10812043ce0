"""Teardown of the stack, Docker resources and Docker itself.

Every step is best-effort: a failing step is logged and reported, and the
remaining steps still run so the host ends up as clean as possible.
"""
import shutil
from pathlib import Path
from typing import List, Optional

from autostack.core.errors import AutostackError
from autostack.core.logger import get_logger
from autostack.services.commands import CommandRunner
from autostack.services.compose_stack import ComposeStack
from autostack.services.docker_installer import DOCKER_PACKAGES, DockerInstaller

logger = get_logger(__name__)

DOCKER_DATA_DIRS = [Path("/var/lib/docker"), Path("/var/lib/containerd")]


class StackCleaner:
    """Removes everything the installer created."""

    def __init__(
        self,
        project_dir: Optional[Path] = None,
        mock: bool = False,
        runner: Optional[CommandRunner] = None,
    ):
        self.project_dir = Path(project_dir) if project_dir else None
        self.mock = mock
        self.runner = runner or CommandRunner(mock=mock)
        self.failed_steps: List[str] = []

    def _step(self, name: str, cmd: List[str]) -> None:
        if not self.runner.try_run(cmd):
            self.failed_steps.append(name)

    def _compose_down(self) -> None:
        stack = ComposeStack(self.project_dir, mock=self.mock, runner=self.runner)
        if not stack.compose_file.exists():
            return
        try:
            stack.down(volumes=True)
        except AutostackError as e:
            logger.warning(f"compose down failed: {e}")
            self.failed_steps.append("compose down")

    def teardown_stack(self) -> None:
        """Stop the stack and remove all containers, volumes and networks."""
        logger.info("Cleaning up Docker stack and related resources...")

        if self.project_dir:
            self._compose_down()

        self._step("system prune", ["docker", "system", "prune", "-af", "--volumes"])

        containers = self.runner.output_lines(["docker", "ps", "-aq"])
        if containers:
            self._step("remove containers", ["docker", "rm", "-f", *containers])

        volumes = self.runner.output_lines(["docker", "volume", "ls", "-q"])
        if volumes:
            self._step("remove volumes", ["docker", "volume", "rm", *volumes])

        # Built-in networks (bridge, host, none) refuse removal; that is expected.
        networks = self.runner.output_lines(["docker", "network", "ls", "-q"])
        if networks:
            self.runner.try_run(["docker", "network", "rm", *networks])

    def purge_docker(self) -> None:
        """Uninstall Docker packages and delete their data and apt configuration."""
        logger.info("Removing Docker packages...")
        self._step("purge packages", ["apt-get", "purge", "-y", *DOCKER_PACKAGES])
        self._step("autoremove", ["apt-get", "autoremove", "-y"])

        logger.info("Deleting Docker folders...")
        paths = DOCKER_DATA_DIRS + [DockerInstaller.KEYRING, DockerInstaller.SOURCE_LIST]
        for path in paths:
            self._remove_path(path)

    def _remove_path(self, path: Path) -> None:
        if self.mock:
            logger.info(f"MOCK: Would remove {path}")
            return
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
            self.failed_steps.append(f"remove {path}")

    def run(self, purge: bool = True) -> List[str]:
        """Run the full teardown.

        Args:
            purge: Also uninstall Docker and delete its data

        Returns:
            Names of steps that failed (empty when everything succeeded)
        """
        self.failed_steps = []
        self.teardown_stack()
        if purge:
            self.purge_docker()
        return list(self.failed_steps)
