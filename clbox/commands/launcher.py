"""
Node launcher - bring up one Teku consensus-layer node and return its context.

Steps run strictly in order and the first failure aborts the launch:
provision genesis files, build the container spec, start the container,
resolve the HTTP port, wait for health, fetch the ENR.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from rich.console import Console

from clbox.commands.constants import DEFAULT_IMAGE, HTTP_PORT_ID
from clbox.commands.errors import (
    ClboxError,
    LaunchError,
    PortMismatchError,
    ReadinessTimeoutError,
)
from clbox.commands.identity import resolve_identity
from clbox.commands.launch_config import (
    BootstrapNode,
    ChildNode,
    LaunchParameters,
    NodeRole,
    container_spec_builder,
)
from clbox.commands.ports import ClientType, PortCatalog, get_port_catalog
from clbox.commands.provisioner import SharedPath, provision_genesis_artifacts
from clbox.commands.readiness import wait_for_availability
from clbox.commands.rest_client import CLClientRESTClient
from clbox.commands.retry import HEALTH_RETRY_CONFIG, RetryConfig

console = Console()


@dataclass(frozen=True)
class ConsensusLayerClientContext:
    """A live, healthy consensus-layer node other components can address."""

    service_context: Any
    enr: str
    http_port_id: str

    @property
    def private_ip(self) -> str:
        return self.service_context.private_ip

    @property
    def http_url(self) -> str:
        port = self.service_context.private_ports[self.http_port_id]
        return f"http://{self.private_ip}:{port.number}"


class TekuLauncher:
    """Launches Teku nodes through an orchestration substrate."""

    def __init__(
        self,
        genesis_config_yml_path: str,
        genesis_ssz_path: str,
        substrate,
        catalog: Optional[PortCatalog] = None,
        image: str = DEFAULT_IMAGE,
        retry_config: RetryConfig = HEALTH_RETRY_CONFIG,
        rest_client_factory: Callable[..., Any] = CLClientRESTClient,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        """
        Args:
            genesis_config_yml_path: Local genesis config every node receives
            genesis_ssz_path: Local genesis state every node receives
            substrate: Object with ``add_service(service_id, config_supplier)``
            catalog: Port catalog; defaults to the Teku catalog
            image: Teku image reference
            retry_config: Health polling budget
            rest_client_factory: Called as ``factory(ip, port)``; the client is
                closed once the identity is resolved or the launch fails
            sleep: Timing primitive for health polling
        """
        self.genesis_config_yml_path = genesis_config_yml_path
        self.genesis_ssz_path = genesis_ssz_path
        self.substrate = substrate
        self.catalog = catalog if catalog is not None else get_port_catalog(ClientType.TEKU)
        self.image = image
        self.retry_config = retry_config
        self.rest_client_factory = rest_client_factory
        self.sleep = sleep

    def launch_boot_node(
        self,
        service_id: str,
        el_client_rpc_sockets: Iterable[str],
        total_terminal_difficulty: int,
    ) -> ConsensusLayerClientContext:
        """Launch the first node of a network."""
        return self._launch_node(
            service_id, BootstrapNode(), el_client_rpc_sockets, total_terminal_difficulty
        )

    def launch_child_node(
        self,
        service_id: str,
        bootnode_enr: str,
        el_client_rpc_sockets: Iterable[str],
        total_terminal_difficulty: int,
    ) -> ConsensusLayerClientContext:
        """Launch a node that bootstraps from ``bootnode_enr``."""
        return self._launch_node(
            service_id,
            ChildNode(bootnode_enr),
            el_client_rpc_sockets,
            total_terminal_difficulty,
        )

    def _get_container_config_supplier(self, params: LaunchParameters):
        build_container_spec = container_spec_builder(
            params, self.catalog, image=self.image
        )

        def container_config_supplier(private_ip: str, shared_dir: SharedPath):
            artifacts = provision_genesis_artifacts(params, shared_dir)
            return build_container_spec(private_ip, artifacts)

        return container_config_supplier

    def _launch_node(
        self,
        service_id: str,
        role: NodeRole,
        el_client_rpc_sockets: Iterable[str],
        total_terminal_difficulty: int,
    ) -> ConsensusLayerClientContext:
        if isinstance(el_client_rpc_sockets, str):
            el_client_rpc_sockets = [el_client_rpc_sockets]
        params = LaunchParameters(
            service_id=service_id,
            role=role,
            el_client_rpc_sockets=frozenset(el_client_rpc_sockets),
            total_terminal_difficulty=total_terminal_difficulty,
            genesis_config_yml_path=self.genesis_config_yml_path,
            genesis_ssz_path=self.genesis_ssz_path,
        ).validate()

        kind = "boot node" if isinstance(role, BootstrapNode) else "child node"
        console.print(f"[bold]Launching Teku {kind} {service_id}...[/bold]")

        try:
            service_context = self.substrate.add_service(
                service_id, self._get_container_config_supplier(params)
            )
        except ClboxError:
            raise
        except Exception as e:
            raise LaunchError(
                f"An error occurred launching the Teku CL client with service ID "
                f"'{service_id}': {str(e)}",
                service_id=service_id,
            ) from e

        http_port = service_context.private_ports.get(HTTP_PORT_ID)
        if http_port is None:
            available = sorted(service_context.private_ports)
            raise PortMismatchError(
                f"Expected new Teku service '{service_id}' to have port with ID "
                f"'{HTTP_PORT_ID}', but none was found",
                service_id=service_id,
                port_id=HTTP_PORT_ID,
                available_ports=available,
            )

        rest_client = self.rest_client_factory(service_context.private_ip, http_port.number)

        try:
            wait_for_availability(
                rest_client, service_id, config=self.retry_config, sleep=self.sleep
            )
            node_identity = resolve_identity(rest_client, service_id)
        except ReadinessTimeoutError as e:
            e.details["private_ip"] = service_context.private_ip
            e.details["http_port"] = http_port.number
            raise
        finally:
            rest_client.close()

        console.print(f"[green]✓ Teku {kind} {service_id} is up, ENR: {node_identity.enr}[/green]")
        return ConsensusLayerClientContext(
            service_context=service_context,
            enr=node_identity.enr,
            http_port_id=HTTP_PORT_ID,
        )
