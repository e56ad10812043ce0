"""Exception types raised by autostack services."""


class AutostackError(Exception):
    """Base class for provisioning failures the CLI reports to the operator."""
    pass


class ProvisioningError(AutostackError):
    """Raised when an external command (apt-get, docker) fails."""
    pass


class MissingDependencyError(AutostackError):
    """Raised when a required binary is not installed on the host."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"{command} is required but not installed.")


class PublicIPError(AutostackError):
    """Raised when the host's public IP cannot be discovered."""
    pass
