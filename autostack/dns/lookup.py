"""A-record lookups through dig.

Resolution is best-effort: anything other than an IPv4-looking answer is
reported as no answer (None) so callers can keep polling.
"""
import re
import subprocess
from typing import Optional

from autostack.core.config import get_config
from autostack.core.errors import MissingDependencyError
from autostack.core.logger import get_logger

logger = get_logger(__name__)

# Four dot-separated numeric groups; octet ranges are not checked.
IPV4_PATTERN = re.compile(r"^\d+\.\d+\.\d+\.\d+$")

SYSTEM_RESOLVER = "system"


def looks_like_ipv4(value: Optional[str]) -> bool:
    """Return True when value has the shape of a dotted-quad address."""
    return isinstance(value, str) and IPV4_PATTERN.match(value) is not None


def normalize_resolver(resolver: Optional[str]) -> Optional[str]:
    """Map a configured resolver to a dig server argument.

    Empty values and "system" select the host's default resolver (None).
    A leading "@" is accepted for dig-style input.
    """
    if resolver is None:
        return None
    resolver = resolver.strip().lstrip("@")
    if not resolver or resolver.lower() == SYSTEM_RESOLVER:
        return None
    return resolver


def parse_dig_output(output: str) -> Optional[str]:
    """Return the first IPv4-looking line of `dig +short` output.

    CNAME targets and comments printed before the address are skipped.
    """
    for line in (output or "").splitlines():
        token = line.strip()
        if looks_like_ipv4(token):
            return token
    return None


def lookup_a_record(
    hostname: str,
    resolver: Optional[str] = None,
    timeout: Optional[int] = None,
) -> Optional[str]:
    """Resolve hostname's A record via dig.

    Args:
        hostname: Name to resolve
        resolver: Resolver address, or None/"system" for the host default
        timeout: Seconds before the dig process is abandoned

    Returns:
        First IPv4 address in the answer, or None if there is none

    Raises:
        MissingDependencyError: If dig is not installed
    """
    if timeout is None:
        timeout = get_config().dns_lookup_timeout

    cmd = ["dig", "+short"]
    server = normalize_resolver(resolver)
    if server:
        cmd.append(f"@{server}")
    cmd.extend([hostname, "A"])

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as exc:
        raise MissingDependencyError("dig") from exc
    except subprocess.TimeoutExpired:
        logger.debug(f"dig timed out after {timeout}s for {hostname}")
        return None

    if result.returncode != 0:
        logger.debug(
            f"dig exited {result.returncode} for {hostname}: {result.stderr.strip()}"
        )
        return None

    address = parse_dig_output(result.stdout)
    if address is None:
        logger.debug(f"No A record in answer for {hostname}")
    return address
