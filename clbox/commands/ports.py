"""
Port catalog - the network ports each consensus client type exposes.

Catalogs are read-only and passed explicitly to the builder and launcher.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from clbox.commands.constants import (
    DISCOVERY_PORT,
    HTTP_PORT,
    HTTP_PORT_ID,
    TCP_DISCOVERY_PORT_ID,
    UDP_DISCOVERY_PORT_ID,
)
from clbox.commands.errors import ConfigurationError


class PortProtocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"


class ClientType(str, Enum):
    TEKU = "teku"


@dataclass(frozen=True)
class PortSpec:
    """A port number plus its transport protocol."""

    number: int
    protocol: PortProtocol = PortProtocol.TCP

    @property
    def docker_key(self) -> str:
        """Port key as used by Docker, e.g. ``9000/udp``."""
        return f"{self.number}/{self.protocol.value}"


PortCatalog = Mapping[str, PortSpec]

# TODO: add the metrics port once the launcher enables --metrics-enabled
TEKU_PORTS: PortCatalog = MappingProxyType(
    {
        TCP_DISCOVERY_PORT_ID: PortSpec(DISCOVERY_PORT, PortProtocol.TCP),
        UDP_DISCOVERY_PORT_ID: PortSpec(DISCOVERY_PORT, PortProtocol.UDP),
        HTTP_PORT_ID: PortSpec(HTTP_PORT, PortProtocol.TCP),
    }
)

PORT_CATALOGS: Mapping[ClientType, PortCatalog] = MappingProxyType(
    {ClientType.TEKU: TEKU_PORTS}
)


def get_port_catalog(client_type) -> PortCatalog:
    """Return the port catalog for a client type, given as a member or its value ("teku")."""
    try:
        return PORT_CATALOGS[ClientType(client_type)]
    except (KeyError, ValueError):
        raise ConfigurationError(
            f"No port catalog for client type '{client_type}'",
            details={"known_client_types": [c.value for c in PORT_CATALOGS]},
        ) from None
