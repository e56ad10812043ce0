#!/usr/bin/env python3
"""autostack CLI - Self-hosted Mautic + n8n stack on a single host."""

import typer
from rich.console import Console

from autostack.cli_dns_commands import register_dns_commands
from autostack.cli_stack_commands import register_stack_commands
from autostack.cli_utility_commands import register_utility_commands

app = typer.Typer(
    name="autostack",
    help="""autostack - Mautic + n8n behind Traefik, on one Docker host

Quick start:
  autostack doctor                                  # Check host prerequisites
  autostack install -d example.com -m me@example.com  # Wait for DNS, launch stack
  autostack cleanup                                 # Remove everything again

More commands: autostack --help
""",
    add_completion=False,
)

console = Console()

register_stack_commands(app, console)
register_dns_commands(app, console)
register_utility_commands(app, console)


def main():
    app()


if __name__ == "__main__":
    main()
