"""
Logs command - print a launched service's container logs.
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
@click.option("--tail", default=100, show_default=True, help="Number of lines to show")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None)
def logs(service_id, tail, config_file):
    """Show logs from a launched service."""
    try:
        manager = service_manager_from_config(load_launcher_config(config_file))
        output = manager.get_service_logs(service_id, tail=tail)
    except ClboxError as e:
        console.print(f"[red]✗ {str(e)}[/red]")
        sys.exit(1)
    console.print(f"\n[bold]Logs for {service_id}:[/bold]")
    console.print(output, markup=False, highlight=False)
