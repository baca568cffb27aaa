"""
Launch configuration - turn launch parameters into a container spec.

Building is two-phase. ``container_spec_builder`` takes everything known
before scheduling and returns a function of the private IP and the
provisioned artifact paths, which the substrate evaluates once it has
assigned both. Both phases are pure.

The control-plane REST API is bound to 0.0.0.0 with a ``*`` host
allowlist. Nodes run on an isolated test network and are not meant to be
reachable from outside it.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Union

from clbox.commands.constants import (
    CONSENSUS_DATA_DIRPATH_ON_SERVICE,
    DEFAULT_IMAGE,
    GENESIS_CONFIG_YML_REL_FILEPATH,
    GENESIS_SSZ_REL_FILEPATH,
    HTTP_PORT_ID,
    LABEL_CLIENT_TYPE,
    LABEL_SERVICE,
    LABEL_SERVICE_ID,
)
from clbox.commands.errors import ValidationError
from clbox.commands.ports import ClientType, PortCatalog

SERVICE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")


@dataclass(frozen=True)
class BootstrapNode:
    """The first node of a network; it has no peer to bootstrap from."""


@dataclass(frozen=True)
class ChildNode:
    """A node that joins the network through an existing node's ENR."""

    peer_enr: str

    def __post_init__(self):
        if not isinstance(self.peer_enr, str) or not self.peer_enr.strip():
            raise ValidationError(
                "A child node needs a non-empty bootnode ENR", field="peer_enr"
            )


NodeRole = Union[BootstrapNode, ChildNode]


@dataclass(frozen=True)
class LaunchParameters:
    """Immutable input to one node launch."""

    service_id: str
    role: NodeRole
    el_client_rpc_sockets: frozenset
    total_terminal_difficulty: int
    genesis_config_yml_path: str
    genesis_ssz_path: str

    def validate(self) -> "LaunchParameters":
        if not isinstance(self.service_id, str) or not SERVICE_ID_PATTERN.match(
            self.service_id
        ):
            raise ValidationError(
                f"Invalid service ID '{self.service_id}': must start with a letter "
                "or digit and contain only letters, digits, '_', '.' or '-'",
                field="service_id",
                value=self.service_id,
            )
        if not isinstance(self.role, (BootstrapNode, ChildNode)):
            raise ValidationError(
                f"Unknown node role {self.role!r}", field="role", value=repr(self.role)
            )
        if not self.el_client_rpc_sockets:
            raise ValidationError(
                "At least one execution-layer RPC endpoint is required",
                field="el_client_rpc_sockets",
            )
        for socket_str in self.el_client_rpc_sockets:
            if not isinstance(socket_str, str) or not socket_str.strip():
                raise ValidationError(
                    "Execution-layer RPC endpoints must be non-empty strings",
                    field="el_client_rpc_sockets",
                    value=repr(socket_str),
                )
        if (
            isinstance(self.total_terminal_difficulty, bool)
            or not isinstance(self.total_terminal_difficulty, int)
            or self.total_terminal_difficulty < 0
        ):
            raise ValidationError(
                "Total terminal difficulty must be a non-negative integer",
                field="total_terminal_difficulty",
                value=repr(self.total_terminal_difficulty),
            )
        return self


@dataclass(frozen=True)
class FileRequest:
    """A local file the service needs, and where it goes in the shared dir."""

    source: str
    rel_path: str


@dataclass(frozen=True)
class ProvisionedArtifacts:
    """Genesis artifact paths as seen from inside the service."""

    genesis_config_yml_path: str
    genesis_ssz_path: str


@dataclass(frozen=True)
class ContainerSpec:
    """Declarative description of the container to start."""

    image: str
    used_ports: PortCatalog
    cmd: tuple
    files: tuple = ()
    labels: Mapping[str, str] = field(default_factory=dict)

    def to_docker_kwargs(self) -> dict:
        """Keyword arguments for the low-level docker ``create_container`` call.

        Catalog ports are declared as exposed ports only. No host port
        bindings are created; callers reach them on the container's private IP.
        """
        ports = sorted(self.used_ports.values(), key=lambda spec: spec.docker_key)
        return {
            "image": self.image,
            "command": list(self.cmd),
            "ports": [(spec.number, spec.protocol.value) for spec in ports],
            "labels": dict(self.labels),
        }


def genesis_file_requests(params: LaunchParameters) -> tuple:
    """The genesis artifacts every node must receive."""
    return (
        FileRequest(params.genesis_config_yml_path, GENESIS_CONFIG_YML_REL_FILEPATH),
        FileRequest(params.genesis_ssz_path, GENESIS_SSZ_REL_FILEPATH),
    )


def build_el_client_rpc_urls(el_client_rpc_sockets: Iterable[str]) -> str:
    """Join ``host:port`` sockets into a sorted, comma-separated URL list."""
    return ",".join(f"http://{socket_str}" for socket_str in sorted(el_client_rpc_sockets))


def build_cmd_args(
    params: LaunchParameters,
    catalog: PortCatalog,
    private_ip: str,
    artifacts: ProvisionedArtifacts,
) -> tuple:
    """Build the Teku command line for one node."""
    el_client_rpc_urls = build_el_client_rpc_urls(params.el_client_rpc_sockets)
    http_port = catalog[HTTP_PORT_ID].number

    cmd_args = [
        "--network=" + artifacts.genesis_config_yml_path,
        "--initial-state=" + artifacts.genesis_ssz_path,
        "--data-path=" + CONSENSUS_DATA_DIRPATH_ON_SERVICE,
        "--data-storage-mode=PRUNE",
        "--p2p-enabled=true",
        # Teku accepts the execution engine under both names
        "--eth1-endpoints=" + el_client_rpc_urls,
        "--Xee-endpoint=" + el_client_rpc_urls,
        "--p2p-advertised-ip=" + private_ip,
        "--rest-api-enabled=true",
        "--rest-api-docs-enabled=true",
        "--rest-api-interface=0.0.0.0",
        f"--rest-api-port={http_port}",
        "--rest-api-host-allowlist=*",
        "--Xdata-storage-non-canonical-blocks-enabled=true",
        f"--Xnetwork-merge-total-terminal-difficulty={params.total_terminal_difficulty}",
        "--log-destination=CONSOLE",
    ]
    if isinstance(params.role, ChildNode):
        cmd_args.append("--p2p-discovery-bootnodes=" + params.role.peer_enr)
    return tuple(cmd_args)


def container_spec_builder(
    params: LaunchParameters,
    catalog: PortCatalog,
    image: str = DEFAULT_IMAGE,
    client_type: ClientType = ClientType.TEKU,
) -> Callable[[str, ProvisionedArtifacts], ContainerSpec]:
    """
    Return the second-phase builder for a launch.

    Args:
        params: Validated launch parameters
        catalog: Port catalog of the client type; must contain ``http``
        image: Container image reference
        client_type: Recorded in the container labels

    Returns:
        A function ``(private_ip, artifacts) -> ContainerSpec``
    """
    if HTTP_PORT_ID not in catalog:
        raise ValidationError(
            f"Port catalog has no '{HTTP_PORT_ID}' port", field="catalog"
        )
    used_ports = MappingProxyType(dict(catalog))
    files = genesis_file_requests(params)
    labels = MappingProxyType(
        {
            LABEL_SERVICE: "true",
            LABEL_SERVICE_ID: params.service_id,
            LABEL_CLIENT_TYPE: ClientType(client_type).value,
        }
    )

    def build(private_ip: str, artifacts: ProvisionedArtifacts) -> ContainerSpec:
        return ContainerSpec(
            image=image,
            used_ports=used_ports,
            cmd=build_cmd_args(params, used_ports, private_ip, artifacts),
            files=files,
            labels=labels,
        )

    return build
