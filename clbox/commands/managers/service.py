"""
ServiceManager - start, inspect and stop launched services in Docker.

This is the orchestration substrate the launcher submits container specs to.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Optional

import docker
from rich.console import Console
from rich.table import Table

from clbox.commands.constants import (
    CONTAINER_STOP_TIMEOUT,
    DEFAULT_DATA_ROOT,
    DEFAULT_NETWORK_NAME,
    DEFAULT_NETWORK_SUBNET,
    LABEL_CLIENT_TYPE,
    LABEL_SERVICE,
    SHARED_DIRNAME_ON_HOST,
    SHARED_DIRPATH_ON_SERVICE,
)
from clbox.commands.errors import ClboxError, LaunchError
from clbox.commands.launch_config import ContainerSpec
from clbox.commands.managers.base import BaseManager
from clbox.commands.managers.network import NetworkManager
from clbox.commands.ports import PortSpec
from clbox.commands.provisioner import SharedPath

console = Console()

ConfigSupplier = Callable[[str, SharedPath], ContainerSpec]


@dataclass(frozen=True)
class ServiceContext:
    """Handle to a running service: its private IP and realized ports."""

    service_id: str
    private_ip: str
    private_ports: Mapping[str, PortSpec]
    container_id: str = ""


class ServiceManager(BaseManager):
    """Runs services as containers on the enclave network."""

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        network_name: str = DEFAULT_NETWORK_NAME,
        network_subnet: str = DEFAULT_NETWORK_SUBNET,
        data_root: str = DEFAULT_DATA_ROOT,
    ):
        super().__init__(client)
        self.data_root = data_root
        self.services = {}
        self.network_manager = NetworkManager(
            self.client, network_name=network_name, subnet=network_subnet
        )
        # IP allocation and container start must not interleave across threads
        self._allocation_lock = threading.Lock()

    def _remove_existing(self, service_id: str) -> None:
        container = self._get_container(service_id)
        if container is None:
            return
        console.print(
            f"[yellow]Container {service_id} already exists, removing it...[/yellow]"
        )
        try:
            container.remove(force=True)
            console.print(f"[green]✓ Cleaned up existing container {service_id}[/green]")
        except docker.errors.APIError as e:
            raise LaunchError(
                f"Could not remove existing container {service_id}: {str(e)}",
                service_id=service_id,
            ) from e

    def _create_shared_dir(self, service_id: str) -> SharedPath:
        host_dir = Path(self.data_root, service_id, SHARED_DIRNAME_ON_HOST).absolute()
        try:
            host_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LaunchError(
                f"Could not create shared directory {host_dir}: {str(e)}",
                service_id=service_id,
                details={"shared_dir": str(host_dir)},
            ) from e
        return SharedPath(host_path=str(host_dir), service_path=SHARED_DIRPATH_ON_SERVICE)

    def _realized_ports(
        self, container, used_ports: Mapping[str, PortSpec]
    ) -> Mapping[str, PortSpec]:
        """Catalog entries the running container actually exposes."""
        exposed = set(container.attrs.get("NetworkSettings", {}).get("Ports") or {})
        exposed |= set(container.attrs.get("Config", {}).get("ExposedPorts") or {})
        return MappingProxyType(
            {
                port_id: spec
                for port_id, spec in used_ports.items()
                if spec.docker_key in exposed
            }
        )

    def _container_ip(self, container, fallback: str) -> str:
        networks = container.attrs.get("NetworkSettings", {}).get("Networks") or {}
        network = networks.get(self.network_manager.network_name) or {}
        return network.get("IPAddress") or fallback

    def _start_container(
        self,
        service_id: str,
        container_spec: ContainerSpec,
        network_name: str,
        private_ip: str,
        shared_dir: SharedPath,
    ):
        if not self._ensure_image_pulled(container_spec.image):
            raise LaunchError(
                f"Cannot start {service_id} without image {container_spec.image}",
                service_id=service_id,
                details={"image": container_spec.image},
            )

        api = self.client.api
        create_config = container_spec.to_docker_kwargs()
        create_config.update(
            {
                "name": service_id,
                "detach": True,
                "volumes": [SHARED_DIRPATH_ON_SERVICE],
                # Binds only; catalog ports stay on the enclave network
                "host_config": api.create_host_config(
                    binds={
                        shared_dir.host_path: {
                            "bind": SHARED_DIRPATH_ON_SERVICE,
                            "mode": "rw",
                        }
                    },
                    network_mode=network_name,
                ),
                "networking_config": api.create_networking_config(
                    {network_name: api.create_endpoint_config(ipv4_address=private_ip)}
                ),
            }
        )

        console.print(f"[yellow]Starting service {service_id} at {private_ip}...[/yellow]")
        try:
            created = api.create_container(**create_config)
            api.start(created["Id"])
            return self.client.containers.get(created["Id"])
        except docker.errors.DockerException as e:
            raise LaunchError(
                f"Failed to start service {service_id}: {str(e)}",
                service_id=service_id,
                details={"image": container_spec.image, "private_ip": private_ip},
            ) from e

    def add_service(self, service_id: str, config_supplier: ConfigSupplier) -> ServiceContext:
        """
        Start a service from a config supplier.

        The supplier is called with the service's private IP and shared
        directory once both are assigned.

        Raises:
            LaunchError: If the network, IP allocation or container start fails;
                always carries ``service_id``
            ClboxError: Any clbox error raised by the supplier, unchanged
        """
        self._remove_existing(service_id)
        try:
            network = self.network_manager.ensure_network()
            shared_dir = self._create_shared_dir(service_id)

            with self._allocation_lock:
                private_ip = self.network_manager.allocate_ip(network)
                container_spec = config_supplier(private_ip, shared_dir)
                container = self._start_container(
                    service_id, container_spec, network.name, private_ip, shared_dir
                )
        except LaunchError as e:
            if e.service_id is None:
                e.service_id = service_id
                e.details["service_id"] = service_id
            raise

        if container.status == "exited":
            logs = container.logs(tail=50).decode("utf-8", errors="replace")
            console.print(f"[red]✗ Service {service_id} exited right after start[/red]")
            console.print("[yellow]Container logs:[/yellow]")
            console.print(logs, markup=False, highlight=False)
            try:
                container.remove()
            except docker.errors.APIError:
                console.print(f"[yellow]⚠️  Could not remove container {service_id}[/yellow]")
            raise LaunchError(
                f"Service {service_id} exited right after start",
                service_id=service_id,
                details={"logs": logs},
            )

        self.services[service_id] = container
        console.print(
            f"[green]✓ Started service {service_id} (ID: {container.short_id})[/green]"
        )
        return ServiceContext(
            service_id=service_id,
            private_ip=self._container_ip(container, private_ip),
            private_ports=self._realized_ports(container, container_spec.used_ports),
            container_id=container.id,
        )

    def stop_service(self, service_id: str) -> bool:
        """Stop and remove a service container."""
        container = self.services.pop(service_id, None) or self._get_container(service_id)
        if container is None:
            console.print(f"[yellow]Service {service_id} not found[/yellow]")
            return False
        try:
            container.stop(timeout=CONTAINER_STOP_TIMEOUT)
            container.remove()
        except docker.errors.APIError as e:
            console.print(f"[red]✗ Failed to stop service {service_id}: {str(e)}[/red]")
            return False
        console.print(f"[green]✓ Stopped and removed service {service_id}[/green]")
        return True

    def get_service_logs(self, service_id: str, tail: int = 100) -> str:
        """Return the last ``tail`` log lines of a service."""
        container = self.services.get(service_id) or self._get_container(service_id)
        if container is None:
            raise ClboxError(f"Service {service_id} not found", code="SERVICE_NOT_FOUND")
        return container.logs(tail=tail, timestamps=True).decode("utf-8", errors="replace")

    def list_services(self) -> None:
        """Print a table of launched services."""
        containers = self.client.containers.list(
            all=True, filters={"label": f"{LABEL_SERVICE}=true"}
        )
        if not containers:
            console.print("[yellow]No clbox services are currently running[/yellow]")
            return

        table = Table(title="Launched Services")
        table.add_column("Name", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Client", style="magenta")
        table.add_column("Private IP", style="yellow")
        table.add_column("Image", style="blue")

        for container in containers:
            table.add_row(
                container.name,
                container.status,
                container.labels.get(LABEL_CLIENT_TYPE, "N/A"),
                self._container_ip(container, "N/A"),
                (
                    container.image.tags[0]
                    if container.image.tags
                    else container.image.id[:12]
                ),
            )
        console.print(table)


def service_manager_from_config(launcher_config) -> ServiceManager:
    """Create a ServiceManager using a LauncherConfig's network and data root."""
    return ServiceManager(
        network_name=launcher_config.network_name,
        network_subnet=launcher_config.network_subnet,
        data_root=launcher_config.data_root,
    )
