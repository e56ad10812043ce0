"""Stack lifecycle commands - install and cleanup."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from autostack.cli_dns_commands import run_dns_wait
from autostack.cli_support import (
    EXIT_DNS_TIMEOUT,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    confirm_action,
    format_validation_error,
    handle_cli_error,
    is_mock,
    missing_commands,
    print_header,
    print_success,
    print_warning,
    setup_file_logging,
)
from autostack.core.config import get_config
from autostack.core.errors import AutostackError, MissingDependencyError
from autostack.core.logger import get_logger
from autostack.dns.public_ip import discover_public_ip
from autostack.models.stack import StackSettings
from autostack.services.cleanup import StackCleaner
from autostack.services.compose_stack import N8N_ADMIN_USER, ComposeStack, StackSecrets
from autostack.services.docker_installer import DockerInstaller

# Module-level console instance (will be set by register function)
console: Console = Console()
logger = get_logger(__name__)

REQUIRED_COMMANDS = ["docker", "dig"]


def _load_settings(domain: str, email: str, mautic_sub: str, n8n_sub: str) -> StackSettings:
    try:
        return StackSettings(
            domain=domain,
            email=email,
            mautic_subdomain=mautic_sub,
            n8n_subdomain=n8n_sub,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {format_validation_error(e)}")
        raise typer.Exit(EXIT_FAILURE)


def _check_required_commands(mock: bool) -> None:
    if mock:
        return
    missing = missing_commands(REQUIRED_COMMANDS)
    if missing:
        raise MissingDependencyError(", ".join(missing))


def _print_dns_instructions(settings: StackSettings, public_ip: str) -> None:
    print_header(console, "🔧 DNS Configuration Required")
    console.print("Please create the following DNS A records:", highlight=False)
    width = max(len(host) for host in settings.hostnames)
    for host in settings.hostnames:
        console.print(f"  - {host.ljust(width)}  ➜  {public_ip}", highlight=False)
    console.print()


def _print_summary(settings: StackSettings, stack: ComposeStack, stack_secrets: StackSecrets) -> None:
    print_header(console, "✅ Installation Complete")
    console.print("Your marketing automation stack is ready!\n", highlight=False)
    console.print(
        f"  • Mautic:  https://{settings.mautic_host}\n"
        f"     - Admin account is created on first visit\n"
        f"  • n8n:     https://{settings.n8n_host}\n"
        f"     - Username: {N8N_ADMIN_USER}\n"
        f"     - Password: {stack_secrets.n8n_basic_auth_password}\n",
        highlight=False,
    )
    console.print(f"Credentials are stored in {stack.env_file}", highlight=False)
    console.print(
        "\nTo update your stack in future:\n"
        f"  cd {stack.project_dir}\n"
        "  docker compose pull\n"
        "  docker compose up -d\n",
        highlight=False,
    )


def install(
    domain: str = typer.Option(..., "--domain", "-d", help="Base domain, e.g. example.com"),
    email: str = typer.Option(..., "--email", "-m", help="Email for Let's Encrypt certificates"),
    mautic_sub: str = typer.Option("m", "--mautic-sub", help="Subdomain for Mautic"),
    n8n_sub: str = typer.Option("n8n", "--n8n-sub", help="Subdomain for n8n"),
    stack_dir: Optional[Path] = typer.Option(
        None, "--dir", help="Stack directory (default: ./mautic-n8n-stack)"
    ),
    resolver: Optional[str] = typer.Option(
        None, "--resolver", "-r", help="DNS resolver to query ('system' for the host default)"
    ),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", "-n", min=0, help="DNS rounds before giving up (default: 20)"
    ),
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", min=0, help="Seconds between DNS rounds (default: 30)"
    ),
    skip_docker_install: bool = typer.Option(
        False, "--skip-docker-install", help="Do not install Docker when it is missing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging and tracebacks"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write a log file"),
):
    """Install Docker, wait for DNS and launch the Mautic + n8n stack.

    Nothing is written or started until both hostnames resolve to this
    server. Exits 3 if DNS does not propagate within the attempt budget.

    Examples:
        autostack install --domain example.com --email admin@example.com
        autostack install -d example.com -m admin@example.com --resolver 1.1.1.1
    """
    if log_file or verbose:
        setup_file_logging(log_file=log_file, verbose=verbose)

    settings = _load_settings(domain, email, mautic_sub, n8n_sub)
    logger.debug(f"Installing stack for {', '.join(settings.hostnames)}")
    mock = is_mock()
    stack = ComposeStack(stack_dir or Path(get_config().stack_dir), mock=mock)

    try:
        installer = DockerInstaller(mock=mock)
        if not skip_docker_install:
            installer.ensure_installed()
        installer.ensure_compose_alias()
        _check_required_commands(mock)

        public_ip = discover_public_ip()
        _print_dns_instructions(settings, public_ip)

        outcome = run_dns_wait(
            console,
            settings.hostnames,
            public_ip,
            resolver=resolver,
            max_attempts=max_attempts,
            interval=interval,
        )
        if outcome.timed_out:
            console.print("Stack was not installed. Fix the DNS records and re-run.")
            raise typer.Exit(EXIT_DNS_TIMEOUT)

        console.print("Proceeding with stack installation…", highlight=False)
        print_header(console, "⚙️ Creating Docker Compose Stack")
        stack_secrets = stack.write(settings)

        print_header(console, "🚀 Launching Docker Stack")
        stack.up()
    except KeyboardInterrupt:
        print_warning(console, "Cancelled")
        raise typer.Exit(EXIT_INTERRUPTED)
    except (AutostackError, ValueError) as e:
        handle_cli_error(e, console, verbose)

    _print_summary(settings, stack, stack_secrets)


def cleanup(
    stack_dir: Optional[Path] = typer.Option(
        None, "--dir", help="Stack directory (default: ./mautic-n8n-stack)"
    ),
    keep_docker: bool = typer.Option(
        False, "--keep-docker", help="Only remove stack resources; keep Docker installed"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write a log file"),
):
    """Remove the stack, all Docker resources and (by default) Docker itself.

    This deletes every container, volume and network on the host, not only
    the ones belonging to the stack.
    """
    if log_file or verbose:
        setup_file_logging(log_file=log_file, verbose=verbose)

    target = "all Docker containers, volumes and networks"
    if not keep_docker:
        target += " and uninstall Docker"
    if not confirm_action(f"This will remove {target}. Continue?", yes_flag=yes, mock=is_mock()):
        print_warning(console, "Cancelled")
        raise typer.Exit(0)

    cleaner = StackCleaner(stack_dir or Path(get_config().stack_dir), mock=is_mock())
    try:
        failed = cleaner.run(purge=not keep_docker)
    except KeyboardInterrupt:
        print_warning(console, "Cancelled")
        raise typer.Exit(EXIT_INTERRUPTED)

    if failed:
        print_warning(console, f"Cleanup finished with failures: {', '.join(failed)}")
        raise typer.Exit(EXIT_FAILURE)

    print_success(console, "Cleanup complete. Server is now back to a clean state.")


def register_stack_commands(app: typer.Typer, shared_console: Console) -> None:
    """Register install and cleanup with the main Typer app."""
    global console
    console = shared_console

    app.command()(install)
    app.command()(cleanup)
