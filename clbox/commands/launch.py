"""
Launch command - start one Teku node and print its ENR.
"""

import json
import sys

import click
from rich.console import Console

from clbox.commands.config import load_launcher_config
from clbox.commands.errors import ClboxError
from clbox.commands.launcher import TekuLauncher
from clbox.commands.managers.service import service_manager_from_config
from clbox.commands.rest_client import CLClientRESTClient
from clbox.commands.result import fail, ok

console = Console()


def _context_summary(client_context) -> dict:
    service_context = client_context.service_context
    return {
        "service_id": service_context.service_id,
        "private_ip": service_context.private_ip,
        "enr": client_context.enr,
        "http_url": client_context.http_url,
        "ports": {
            port_id: spec.docker_key
            for port_id, spec in sorted(service_context.private_ports.items())
        },
    }


def _parse_ttd(ctx, param, value):
    try:
        ttd = int(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an integer") from None
    if ttd < 0:
        raise click.BadParameter("must not be negative")
    return ttd


def _parse_bootnode_enr(ctx, param, value):
    if value is not None and not value.strip():
        raise click.BadParameter("must not be empty; omit it to launch a boot node")
    return value


@click.command()
@click.argument("service_id")
@click.option(
    "--genesis-config",
    required=True,
    type=click.Path(dir_okay=False),
    help="Genesis config YAML to provision into the node",
)
@click.option(
    "--genesis-state",
    required=True,
    type=click.Path(dir_okay=False),
    help="Genesis state SSZ to provision into the node",
)
@click.option(
    "--el-endpoint",
    "el_endpoints",
    multiple=True,
    required=True,
    help="Execution-layer RPC socket (host:port); repeat for several",
)
@click.option(
    "--ttd",
    required=True,
    callback=_parse_ttd,
    help="Merge total terminal difficulty",
)
@click.option(
    "--bootnode-enr",
    default=None,
    callback=_parse_bootnode_enr,
    help="ENR of the node to bootstrap from; omit (never pass empty) to launch a boot node",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML file with a [launcher] section",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def launch(
    service_id,
    genesis_config,
    genesis_state,
    el_endpoints,
    ttd,
    bootnode_enr,
    config_file,
    as_json,
):
    """Launch a Teku consensus-layer node and wait until it is healthy."""
    try:
        launcher_config = load_launcher_config(config_file)
        launcher = TekuLauncher(
            genesis_config,
            genesis_state,
            service_manager_from_config(launcher_config),
            image=launcher_config.image,
            retry_config=launcher_config.health_retry_config(),
            rest_client_factory=lambda ip, port: CLClientRESTClient(
                ip, port, timeout=launcher_config.rest_timeout
            ),
        )
        if bootnode_enr is None:
            client_context = launcher.launch_boot_node(service_id, el_endpoints, ttd)
        else:
            client_context = launcher.launch_child_node(
                service_id, bootnode_enr, el_endpoints, ttd
            )
    except ClboxError as e:
        if as_json:
            click.echo(json.dumps(fail(f"Failed to launch {service_id}", error=e)))
        else:
            console.print(f"[red]✗ Failed to launch {service_id}: {str(e)}[/red]")
            for key, value in e.details.items():
                if key != "logs":
                    console.print(f"  {key}: {value}")
        sys.exit(1)

    summary = _context_summary(client_context)
    if as_json:
        click.echo(json.dumps(ok(summary)))
    else:
        console.print(f"  - Private IP: {summary['private_ip']}")
        console.print(f"  - HTTP API: {summary['http_url']}")
        console.print(f"  - ENR: {summary['enr']}")
