"""Utility CLI commands - doctor, version."""
import shutil

import typer
from rich.console import Console
from rich.table import Table

from autostack import __version__
from autostack.cli_support import EXIT_FAILURE, print_error, print_success, print_warning
from autostack.core.errors import PublicIPError
from autostack.dns.public_ip import discover_public_ip
from autostack.services.commands import CommandRunner

# Module-level console instance (will be set by register function)
console: Console = Console()


def _compose_available() -> bool:
    """True when `docker compose` (plugin) or docker-compose works."""
    runner = CommandRunner()
    if shutil.which("docker") and runner.try_run(["docker", "compose", "version"]):
        return True
    return shutil.which("docker-compose") is not None


def doctor():
    """Check that this host has what the installer needs.

    Reports docker, docker compose and dig availability plus the public IP
    the DNS records must point at.
    """
    console.print("\n[bold cyan]🔍 Host Check[/bold cyan]\n")

    checks = {
        "docker": shutil.which("docker") is not None,
        "docker compose": _compose_available(),
        "dig": shutil.which("dig") is not None,
    }

    table = Table(show_header=True)
    table.add_column("Requirement", style="cyan")
    table.add_column("Status", style="bold")
    for name, ok in checks.items():
        table.add_row(name, "[green]found[/green]" if ok else "[red]missing[/red]")
    console.print(table)

    try:
        print_success(console, f"Public IP: {discover_public_ip()}")
    except PublicIPError as e:
        print_error(console, str(e))
        raise typer.Exit(EXIT_FAILURE)

    if not checks["dig"]:
        print_error(console, "dig is required (apt-get install -y dnsutils)")
        raise typer.Exit(EXIT_FAILURE)
    if not checks["docker"]:
        print_warning(console, "Docker is missing; 'autostack install' will install it")

    console.print()


def version():
    """Show autostack version."""
    console.print(f"autostack v{__version__} - Mautic + n8n on a single host")


def register_utility_commands(app: typer.Typer, shared_console: Console):
    """Register utility commands with the main Typer app."""
    global console
    console = shared_console

    app.command()(doctor)
    app.command()(version)
