#!/usr/bin/env python3
"""
clbox CLI
A Python CLI tool for launching consensus-layer nodes in Docker containers.
"""

import click

from clbox import __version__
from clbox.commands import launch, list_services, logs, stop


@click.group()
@click.version_option(version=__version__)
def cli():
    """clbox CLI - Launch consensus-layer nodes in Docker containers."""
    pass


cli.add_command(launch)
cli.add_command(list_services)
cli.add_command(logs)
cli.add_command(stop)


def main():
    """Main entry point for the clbox CLI."""
    cli()


if __name__ == "__main__":
    main()
