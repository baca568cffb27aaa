"""
Stop command - stop and remove a launched service.
"""

import sys

import click
from rich.console import Console

from clbox.commands.config import load_launcher_config
from clbox.commands.errors import ClboxError
from clbox.commands.managers.service import service_manager_from_config

console = Console()


@click.command()
@click.argument("service_id")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None)
def stop(service_id, config_file):
    """Stop and remove a launched service."""
    try:
        manager = service_manager_from_config(load_launcher_config(config_file))
    except ClboxError as e:
        console.print(f"[red]✗ {str(e)}[/red]")
        sys.exit(1)
    if not manager.stop_service(service_id):
        sys.exit(1)
