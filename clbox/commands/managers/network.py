"""
NetworkManager - the isolated bridge network launched services share.
"""

import ipaddress
from typing import Optional

import docker
from rich.console import Console

from clbox.commands.constants import (
    DEFAULT_NETWORK_NAME,
    DEFAULT_NETWORK_SUBNET,
    LABEL_SERVICE,
)
from clbox.commands.errors import LaunchError
from clbox.commands.managers.base import BaseManager

console = Console()


class NetworkManager(BaseManager):
    """Manages the enclave network and hands out fixed service IPs."""

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        network_name: str = DEFAULT_NETWORK_NAME,
        subnet: str = DEFAULT_NETWORK_SUBNET,
    ):
        """Initialize the NetworkManager.

        Args:
            client: Optional Docker client. If not provided, creates one from environment.
            network_name: Name of the bridge network
            subnet: Subnet used when the network has to be created
        """
        super().__init__(client)
        self.network_name = network_name
        self.subnet = subnet

    def ensure_network(self):
        """Return the enclave network, creating it if needed.

        Raises:
            LaunchError: If the network cannot be looked up or created
        """
        try:
            network = self.client.networks.get(self.network_name)
            console.print(f"[cyan]✓ Network {self.network_name} already exists[/cyan]")
            return network
        except docker.errors.NotFound:
            pass
        except docker.errors.APIError as e:
            raise LaunchError(
                f"Could not look up network {self.network_name}: {str(e)}",
                details={"network": self.network_name},
            ) from e

        console.print(f"[yellow]Creating network: {self.network_name} ({self.subnet})[/yellow]")
        try:
            ipam_pool = docker.types.IPAMPool(subnet=self.subnet)
            network = self.client.networks.create(
                name=self.network_name,
                driver="bridge",
                ipam=docker.types.IPAMConfig(pool_configs=[ipam_pool]),
                labels={LABEL_SERVICE: "true"},
            )
        except docker.errors.APIError as e:
            raise LaunchError(
                f"Could not create network {self.network_name}: {str(e)}",
                details={"network": self.network_name, "subnet": self.subnet},
            ) from e
        console.print(f"[green]✓ Created network: {self.network_name}[/green]")
        return network

    def _network_subnet_and_gateway(self, network) -> tuple:
        ipam_configs = (network.attrs.get("IPAM") or {}).get("Config") or []
        for ipam_config in ipam_configs:
            subnet = ipam_config.get("Subnet")
            if subnet and ":" not in subnet:
                return subnet, ipam_config.get("Gateway")
        return self.subnet, None

    def allocate_ip(self, network) -> str:
        """Return the first free host address of the network's subnet.

        The gateway (or, when none is reported, the first host address) and
        addresses of attached containers are skipped.

        Raises:
            LaunchError: If the subnet has no free address
        """
        network.reload()
        subnet, gateway = self._network_subnet_and_gateway(network)
        used = set()
        for endpoint in (network.attrs.get("Containers") or {}).values():
            address = endpoint.get("IPv4Address") or ""
            if address:
                used.add(address.split("/")[0])

        hosts = ipaddress.ip_network(subnet).hosts()
        if gateway:
            used.add(gateway)
        else:
            # Docker assigns the first host address to the gateway by default
            next(hosts, None)

        for host in hosts:
            if str(host) not in used:
                return str(host)

        raise LaunchError(
            f"No free IP address left in {subnet} on network {self.network_name}",
            details={"network": self.network_name, "subnet": subnet},
        )
