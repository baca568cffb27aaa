"""
List command - show launched services.
"""

import sys

import click
from rich.console import Console

from clbox.commands.config import load_launcher_config
from clbox.commands.errors import ClboxError
from clbox.commands.managers.service import service_manager_from_config

console = Console()


@click.command(name="list")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None)
def list_services(config_file):
    """List launched services."""
    try:
        manager = service_manager_from_config(load_launcher_config(config_file))
    except ClboxError as e:
        console.print(f"[red]✗ {str(e)}[/red]")
        sys.exit(1)
    manager.list_services()
