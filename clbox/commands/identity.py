"""
Identity resolution - fetch a healthy node's network record (ENR).
"""

from dataclasses import dataclass, field
from typing import Any

from clbox.commands.constants import (
    FIELD_DATA,
    FIELD_DISCOVERY_ADDRESSES,
    FIELD_ENR,
    FIELD_METADATA,
    FIELD_P2P_ADDRESSES,
    FIELD_PEER_ID,
)
from clbox.commands.errors import ClboxError, IdentityFetchError


@dataclass(frozen=True)
class NodeIdentity:
    """A node's self-description as returned by ``/eth/v1/node/identity``."""

    enr: str
    peer_id: str = ""
    p2p_addresses: tuple = ()
    discovery_addresses: tuple = ()
    metadata: dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_response(cls, payload: Any) -> "NodeIdentity":
        """Parse the ``{"data": {...}}`` envelope of the identity endpoint.

        Raises:
            ValueError: If the payload does not have the expected shape
        """
        if not isinstance(payload, dict) or not isinstance(
            payload.get(FIELD_DATA), dict
        ):
            raise ValueError("identity response has no 'data' object")
        data = payload[FIELD_DATA]
        enr = data.get(FIELD_ENR)
        if not isinstance(enr, str):
            raise ValueError("identity response has no 'enr' string")
        return cls(
            enr=enr,
            peer_id=data.get(FIELD_PEER_ID) or "",
            p2p_addresses=tuple(data.get(FIELD_P2P_ADDRESSES) or ()),
            discovery_addresses=tuple(data.get(FIELD_DISCOVERY_ADDRESSES) or ()),
            metadata=dict(data.get(FIELD_METADATA) or {}),
        )


def resolve_identity(rest_client, service_id: str) -> NodeIdentity:
    """
    Ask an already-healthy node for its identity.

    Args:
        rest_client: Client exposing ``get_node_identity()``
        service_id: Service ID used in error context

    Returns:
        The node's identity; its ENR is never empty

    Raises:
        IdentityFetchError: If the call fails or returns an empty ENR
    """
    url = getattr(rest_client, "base_url", None)
    try:
        identity = rest_client.get_node_identity()
    except ClboxError as e:
        raise IdentityFetchError(
            f"Node '{service_id}' is healthy but fetching its identity failed: {e.message}",
            service_id=service_id,
            url=url,
            details={"cause": e.to_dict()},
        ) from e
    except Exception as e:
        raise IdentityFetchError(
            f"Node '{service_id}' is healthy but fetching its identity failed: {str(e)}",
            service_id=service_id,
            url=url,
        ) from e

    if not identity.enr:
        raise IdentityFetchError(
            f"Node '{service_id}' returned an empty ENR",
            service_id=service_id,
            url=url,
        )
    return identity


__all__ = ["NodeIdentity", "resolve_identity"]
