"""DNS propagation commands for the autostack CLI."""
from __future__ import annotations

import time
from typing import List, Optional, Sequence

import typer
from rich.console import Console

from autostack.cli_support import (
    EXIT_DNS_TIMEOUT,
    EXIT_INTERRUPTED,
    handle_cli_error,
    print_error,
    print_header,
    print_info,
    print_warning,
)
from autostack.core.errors import AutostackError
from autostack.dns.checker import (
    ConsoleReporter,
    DnsCheckOutcome,
    DnsCheckRequest,
    wait_for_dns,
)
from autostack.dns.lookup import lookup_a_record
from autostack.dns.public_ip import discover_public_ip

console = Console()


def run_dns_wait(
    console: Console,
    hostnames: Sequence[str],
    expected_address: str,
    resolver: Optional[str] = None,
    max_attempts: Optional[int] = None,
    interval: Optional[int] = None,
) -> DnsCheckOutcome:
    """Wait for propagation and print the final verdict.

    Raises:
        ValueError: If the request is invalid
    """
    request = DnsCheckRequest.from_config(
        hostnames,
        expected_address,
        resolver=resolver,
        max_attempts=max_attempts,
        interval=interval,
    )

    console.print("Waiting for DNS propagation… (CTRL+C to cancel)", highlight=False)
    outcome = wait_for_dns(
        request,
        lookup=lookup_a_record,
        sleep=time.sleep,
        reporter=ConsoleReporter(console),
    )

    if outcome.ready:
        print_header(console, "✅ DNS Propagation Complete")
    else:
        print_error(
            console,
            f"DNS propagation timed out after {outcome.attempts} attempt(s). "
            f"Still not pointing at {expected_address}: "
            + ", ".join(_pending_hosts(outcome, hostnames)),
        )
    return outcome


def _pending_hosts(outcome: DnsCheckOutcome, hostnames: Sequence[str]) -> List[str]:
    if outcome.last_round is None:
        return list(hostnames)
    return outcome.last_round.mismatched


def wait_dns(
    hostnames: List[str] = typer.Argument(..., help="Hostnames that must resolve to this server"),
    expected_ip: Optional[str] = typer.Option(
        None, "--expected-ip", "-e", help="Expected IPv4 address (default: discovered public IP)"
    ),
    resolver: Optional[str] = typer.Option(
        None, "--resolver", "-r", help="DNS resolver to query ('system' for the host default)"
    ),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", "-n", min=0, help="Rounds before giving up (default: 20)"
    ),
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", min=0, help="Seconds between rounds (default: 30)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show tracebacks on errors"),
):
    """Wait until hostnames resolve to this server's public IP.

    Exits 0 when every hostname matches, 3 when the attempt budget runs out.

    Examples:
        autostack wait-dns m.example.com n8n.example.com
        autostack wait-dns app.example.com --expected-ip 203.0.113.10 -n 5
    """
    try:
        if expected_ip is None:
            expected_ip = discover_public_ip()
            print_info(console, f"Public IP: {expected_ip}")

        outcome = run_dns_wait(
            console,
            hostnames,
            expected_ip,
            resolver=resolver,
            max_attempts=max_attempts,
            interval=interval,
        )
    except KeyboardInterrupt:
        print_warning(console, "Cancelled")
        raise typer.Exit(EXIT_INTERRUPTED)
    except (AutostackError, ValueError) as e:
        handle_cli_error(e, console, verbose)

    if outcome.timed_out:
        raise typer.Exit(EXIT_DNS_TIMEOUT)


def register_dns_commands(app: typer.Typer, shared_console: Console) -> None:
    """Attach DNS commands to the main Typer app."""
    global console
    console = shared_console

    app.command("wait-dns")(wait_dns)
