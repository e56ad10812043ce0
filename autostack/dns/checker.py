"""DNS readiness checker.

Polls a fixed list of hostnames until every one resolves to the host's
public address, or the attempt budget runs out:

    request = DnsCheckRequest(
        hostnames=("m.example.com", "n8n.example.com"),
        expected_address="203.0.113.10",
    )
    outcome = wait_for_dns(request)
    if outcome.timed_out:
        raise typer.Exit(3)

Every round checks all hostnames and is all-or-nothing. Rounds are spaced by
a fixed interval; there is no backoff and no per-host budget.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from autostack.core.config import get_config
from autostack.core.logger import get_logger
from autostack.dns.lookup import looks_like_ipv4, lookup_a_record

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_INTERVAL = 30
DEFAULT_RESOLVER = "8.8.8.8"

LookupFunc = Callable[[str, Optional[str]], Optional[str]]
SleepFunc = Callable[[float], None]

NO_ANSWER = "none"


@dataclass(frozen=True)
class DnsCheckRequest:
    """Immutable inputs for one propagation wait."""

    hostnames: Tuple[str, ...]
    expected_address: str
    resolver: Optional[str] = DEFAULT_RESOLVER
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    interval: int = DEFAULT_INTERVAL

    def __post_init__(self):
        object.__setattr__(self, "hostnames", tuple(self.hostnames))
        if not self.hostnames:
            raise ValueError("At least one hostname is required")
        if any(not host for host in self.hostnames):
            raise ValueError("Hostnames must be non-empty strings")
        if not self.expected_address:
            raise ValueError("Expected address is required")
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")

    @classmethod
    def from_config(
        cls,
        hostnames: Sequence[str],
        expected_address: str,
        resolver: Optional[str] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[int] = None,
    ) -> "DnsCheckRequest":
        """Build a request, filling unset values from the runtime config."""
        config = get_config()
        return cls(
            hostnames=tuple(hostnames),
            expected_address=expected_address,
            resolver=config.dns_resolver if resolver is None else resolver,
            max_attempts=config.dns_max_attempts if max_attempts is None else max_attempts,
            interval=config.dns_interval if interval is None else interval,
        )


@dataclass(frozen=True)
class HostResolution:
    """What one hostname resolved to in one round."""

    hostname: str
    address: Optional[str]
    expected_address: str

    @property
    def matched(self) -> bool:
        return self.address is not None and self.address == self.expected_address

    @property
    def display_address(self) -> str:
        return self.address or NO_ANSWER


@dataclass(frozen=True)
class RoundResult:
    """All hostname resolutions of a single round."""

    attempt: int
    resolutions: Tuple[HostResolution, ...]

    @property
    def ready(self) -> bool:
        return all(r.matched for r in self.resolutions)

    @property
    def mismatched(self) -> List[str]:
        return [r.hostname for r in self.resolutions if not r.matched]


@dataclass
class DnsCheckOutcome:
    """Final result of a propagation wait."""

    ready: bool
    attempts: int
    max_attempts: int
    rounds: List[RoundResult] = field(default_factory=list)

    @property
    def timed_out(self) -> bool:
        return not self.ready

    @property
    def status(self) -> str:
        return "ready" if self.ready else "timed_out"

    @property
    def last_round(self) -> Optional[RoundResult]:
        return self.rounds[-1] if self.rounds else None


class ConsoleReporter:
    """Prints per-round progress for the operator."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def round_checked(self, result: RoundResult, max_attempts: int) -> None:
        width = max(len(r.hostname) for r in result.resolutions)
        self.console.print(
            f"\nChecking records (attempt {result.attempt}/{max_attempts}):",
            highlight=False,
        )
        for resolution in result.resolutions:
            mark = "[green]✓[/green]" if resolution.matched else "[red]✗[/red]"
            host = escape(resolution.hostname.ljust(width))
            self.console.print(
                f"  {host} ➜ {escape(resolution.display_address)} {mark}",
                highlight=False,
            )

    def waiting(self, interval: int) -> None:
        self.console.print(f"Retrying in {interval} seconds…", highlight=False)


def resolve_host(
    hostname: str,
    request: DnsCheckRequest,
    lookup: LookupFunc = lookup_a_record,
) -> HostResolution:
    """Look up one hostname, treating anything non-IPv4 as no answer."""
    answer = lookup(hostname, request.resolver)
    if isinstance(answer, str):
        answer = answer.strip()
    if not looks_like_ipv4(answer):
        if answer:
            logger.debug(f"Ignoring malformed answer for {hostname}: {answer!r}")
        answer = None
    return HostResolution(
        hostname=hostname,
        address=answer,
        expected_address=request.expected_address,
    )


def check_round(
    request: DnsCheckRequest,
    attempt: int,
    lookup: LookupFunc = lookup_a_record,
) -> RoundResult:
    """Resolve every hostname once and collect the results."""
    resolutions = tuple(resolve_host(host, request, lookup) for host in request.hostnames)
    return RoundResult(attempt=attempt, resolutions=resolutions)


def wait_for_dns(
    request: DnsCheckRequest,
    lookup: LookupFunc = lookup_a_record,
    sleep: SleepFunc = time.sleep,
    reporter: Optional[ConsoleReporter] = None,
) -> DnsCheckOutcome:
    """Poll until all hostnames resolve to the expected address.

    Args:
        request: Hostnames, expected address, resolver and retry budget
        lookup: (hostname, resolver) -> first A record or None
        sleep: Blocking sleep between rounds
        reporter: Receives each round's results; defaults to console output

    Returns:
        DnsCheckOutcome with ready=True on success, or timed_out=True after
        max_attempts failed rounds (immediately when max_attempts is 0)
    """
    reporter = reporter or ConsoleReporter()
    rounds: List[RoundResult] = []
    attempt = 0

    logger.debug(
        f"Waiting for {', '.join(request.hostnames)} -> {request.expected_address} "
        f"(resolver={request.resolver or 'system'}, "
        f"max_attempts={request.max_attempts}, interval={request.interval}s)"
    )

    while attempt < request.max_attempts:
        result = check_round(request, attempt + 1, lookup)
        rounds.append(result)
        reporter.round_checked(result, request.max_attempts)

        if result.ready:
            logger.debug(f"DNS ready after {attempt + 1} round(s)")
            return DnsCheckOutcome(
                ready=True,
                attempts=attempt + 1,
                max_attempts=request.max_attempts,
                rounds=rounds,
            )

        attempt += 1
        if attempt < request.max_attempts:
            reporter.waiting(request.interval)
            sleep(request.interval)

    logger.debug(f"DNS not ready after {attempt} round(s)")
    return DnsCheckOutcome(
        ready=False,
        attempts=attempt,
        max_attempts=request.max_attempts,
        rounds=rounds,
    )
