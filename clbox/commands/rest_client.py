"""
REST client for the consensus client's beacon node API.
"""

from typing import Any

import requests

from clbox.commands.constants import (
    DEFAULT_REST_TIMEOUT,
    NODE_HEALTH_ENDPOINT,
    NODE_IDENTITY_ENDPOINT,
)
from clbox.commands.errors import ClientError
from clbox.commands.identity import NodeIdentity


class CLClientRESTClient:
    """Minimal client for the health and identity endpoints of a beacon node."""

    def __init__(self, ip_address: str, port: int, timeout: float = DEFAULT_REST_TIMEOUT):
        self.base_url = f"http://{ip_address}:{port}"
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, endpoint: str) -> requests.Response:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ClientError(f"Request to {url} failed: {str(e)}", url=url) from e
        if not response.ok:
            raise ClientError(
                f"Request to {url} returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    def get_health(self) -> int:
        """Return the health endpoint's status code (200 ready, 206 syncing).

        Raises:
            ClientError: On transport failure or a non-2xx status such as 503
        """
        return self._get(NODE_HEALTH_ENDPOINT).status_code

    def get_node_identity(self) -> NodeIdentity:
        """Fetch and parse the node's identity."""
        response = self._get(NODE_IDENTITY_ENDPOINT)
        url = f"{self.base_url}{NODE_IDENTITY_ENDPOINT}"
        try:
            payload: Any = response.json()
            return NodeIdentity.from_response(payload)
        except ValueError as e:
            raise ClientError(
                f"Unexpected identity response from {url}: {str(e)}",
                url=url,
                status_code=response.status_code,
            ) from e

    def close(self) -> None:
        self.session.close()
