"""Public IP discovery for the provisioning host."""
from typing import Optional

import requests

from autostack.core.config import get_config
from autostack.core.errors import PublicIPError
from autostack.core.logger import get_logger
from autostack.core.retry import retry
from autostack.dns.lookup import looks_like_ipv4

logger = get_logger(__name__)


@retry(max_attempts=3, delay=2.0, exceptions=(requests.RequestException,))
def _fetch_public_ip(url: str, timeout: int) -> str:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.text.strip()


def discover_public_ip(url: Optional[str] = None, timeout: Optional[int] = None) -> str:
    """Return the IPv4 address this host is publicly reachable at.

    Args:
        url: Plain-text IP echo service (defaults to config public_ip_url)
        timeout: Request timeout in seconds

    Raises:
        PublicIPError: If the service is unreachable or returns something
            other than an IPv4 address
    """
    config = get_config()
    url = url or config.public_ip_url
    timeout = timeout or config.public_ip_timeout

    try:
        address = _fetch_public_ip(url, timeout)
    except requests.RequestException as exc:
        raise PublicIPError(f"Could not determine public IP from {url}: {exc}") from exc

    if not looks_like_ipv4(address):
        raise PublicIPError(f"Unexpected response from {url}: {address[:60]!r}")

    logger.debug(f"Public IP: {address}")
    return address
