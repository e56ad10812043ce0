"""autostack runtime configuration and settings."""
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class AutostackConfig:
    """Runtime configuration for provisioning runs.

    Attributes:
        dns_resolver: Resolver queried during the propagation wait (default: 8.8.8.8)
        dns_max_attempts: Rounds before giving up on DNS (default: 20)
        dns_interval: Seconds between DNS rounds (default: 30)
        dns_lookup_timeout: Timeout in seconds for a single dig call (default: 10)
        public_ip_url: Service returning the caller's public IPv4 as plain text
        public_ip_timeout: Timeout in seconds for the public IP request (default: 10)
        command_timeout: Timeout in seconds for apt/docker commands (default: 600)
        stack_dir: Directory holding docker-compose.yml and .env
    """

    # DNS propagation wait
    dns_resolver: str = "8.8.8.8"
    dns_max_attempts: int = 20
    dns_interval: int = 30  # seconds between rounds
    dns_lookup_timeout: int = 10

    # Public IP discovery
    public_ip_url: str = "https://api.ipify.org"
    public_ip_timeout: int = 10

    # External commands
    command_timeout: int = 600  # 10 minutes for apt-get / image pulls

    stack_dir: str = "mautic-n8n-stack"

    @classmethod
    def from_env(cls) -> "AutostackConfig":
        """Create config from environment variables.

        Environment variables:
            AUTOSTACK_DNS_RESOLVER: Resolver address ("system" for the host default)
            AUTOSTACK_DNS_MAX_ATTEMPTS: Number of DNS rounds
            AUTOSTACK_DNS_INTERVAL: Seconds between DNS rounds
            AUTOSTACK_PUBLIC_IP_URL: Public IP discovery endpoint
            AUTOSTACK_STACK_DIR: Stack directory

        Returns:
            AutostackConfig instance with values from environment or defaults
        """
        return cls(
            dns_resolver=os.getenv("AUTOSTACK_DNS_RESOLVER", cls.dns_resolver),
            dns_max_attempts=int(
                os.getenv("AUTOSTACK_DNS_MAX_ATTEMPTS", cls.dns_max_attempts)
            ),
            dns_interval=int(
                os.getenv("AUTOSTACK_DNS_INTERVAL", cls.dns_interval)
            ),
            dns_lookup_timeout=int(
                os.getenv("AUTOSTACK_DNS_LOOKUP_TIMEOUT", cls.dns_lookup_timeout)
            ),
            public_ip_url=os.getenv("AUTOSTACK_PUBLIC_IP_URL", cls.public_ip_url),
            public_ip_timeout=int(
                os.getenv("AUTOSTACK_PUBLIC_IP_TIMEOUT", cls.public_ip_timeout)
            ),
            command_timeout=int(
                os.getenv("AUTOSTACK_COMMAND_TIMEOUT", cls.command_timeout)
            ),
            stack_dir=os.getenv("AUTOSTACK_STACK_DIR", cls.stack_dir),
        )


# Global config instance (can be overridden)
_config: Optional[AutostackConfig] = None


def get_config() -> AutostackConfig:
    """Get the global autostack configuration.

    Returns:
        AutostackConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = AutostackConfig.from_env()
    return _config


def set_config(config: Optional[AutostackConfig]):
    """Set the global autostack configuration (None resets to environment)."""
    global _config
    _config = config
