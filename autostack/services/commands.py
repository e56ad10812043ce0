"""Thin subprocess wrapper shared by the provisioning services."""
import shlex
import subprocess
from typing import List, Optional, Union

from autostack.core.config import get_config
from autostack.core.errors import MissingDependencyError, ProvisioningError
from autostack.core.logger import get_logger

logger = get_logger(__name__)


class CommandRunner:
    """Runs host commands, or only logs them in mock mode."""

    def __init__(self, mock: bool = False, timeout: Optional[int] = None):
        self.mock = mock
        self.timeout = timeout if timeout is not None else get_config().command_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        cwd: Optional[str] = None,
        input: Optional[Union[str, bytes]] = None,
        text: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a command and return the completed process.

        Args:
            cmd: Command and arguments
            check: Raise ProvisioningError on non-zero exit
            cwd: Working directory
            input: Data written to stdin
            text: Decode stdout/stderr as text

        Raises:
            MissingDependencyError: If the executable is not installed
            ProvisioningError: If check is set and the command fails
        """
        printable = shlex.join(cmd)
        if self.mock:
            logger.info(f"MOCK: Would run: {printable}")
            empty = "" if text else b""
            return subprocess.CompletedProcess(cmd, 0, stdout=empty, stderr=empty)

        logger.debug(f"Running: {printable}")
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=text,
                check=check,
                cwd=cwd,
                input=input,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise MissingDependencyError(cmd[0]) from e
        except subprocess.TimeoutExpired as e:
            raise ProvisioningError(f"Timed out after {self.timeout}s: {printable}") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else e.stderr
            logger.error(f"Command failed ({e.returncode}): {printable}")
            if stderr:
                logger.error(f"Error output: {stderr.strip()}")
            raise ProvisioningError(f"Command failed: {printable}") from e

    def try_run(self, cmd: List[str], cwd: Optional[str] = None) -> bool:
        """Run a best-effort command; failures are logged, not raised."""
        try:
            result = self.run(cmd, check=False, cwd=cwd)
        except (MissingDependencyError, ProvisioningError) as e:
            logger.warning(str(e))
            return False
        if result.returncode != 0:
            logger.debug(f"Ignored failure ({result.returncode}): {shlex.join(cmd)}")
            return False
        return True

    def output_lines(self, cmd: List[str]) -> List[str]:
        """Return non-empty stdout lines of a best-effort command."""
        try:
            result = self.run(cmd, check=False)
        except (MissingDependencyError, ProvisioningError) as e:
            logger.warning(str(e))
            return []
        if result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
