"""Pytest fixtures shared by the clbox unit tests.

None of the tests need Docker or network access: the substrate and the REST
client are replaced by the in-memory fakes below.
"""

from pathlib import Path
from typing import Optional

import pytest

from clbox.commands.errors import ClientError
from clbox.commands.identity import NodeIdentity
from clbox.commands.managers.service import ServiceContext
from clbox.commands.provisioner import SharedPath


class FakeSubstrate:
    """Evaluates the config supplier the way ServiceManager does, without Docker."""

    def __init__(self, shared_root: Path, private_ip: str = "172.28.0.2", ports=None):
        self.shared_root = shared_root
        self.private_ip = private_ip
        self.ports = ports
        self.container_specs = []
        self.service_ids = []

    def add_service(self, service_id, config_supplier):
        shared_dir = SharedPath(
            host_path=str(self.shared_root / service_id), service_path="/shared"
        )
        container_spec = config_supplier(self.private_ip, shared_dir)
        self.service_ids.append(service_id)
        self.container_specs.append(container_spec)
        return ServiceContext(
            service_id=service_id,
            private_ip=self.private_ip,
            private_ports=(
                self.ports if self.ports is not None else container_spec.used_ports
            ),
            container_id=f"id-{service_id}",
        )


class StubRESTClient:
    """Health fails ``health_failures`` times, then the node reports ``enr``."""

    def __init__(
        self,
        ip_address: str,
        port: int,
        health_failures: int = 0,
        enr: str = "enr:-xyz789",
        identity_error: Optional[Exception] = None,
    ):
        self.base_url = f"http://{ip_address}:{port}"
        self.health_failures = health_failures
        self.enr = enr
        self.identity_error = identity_error
        self.health_calls = 0
        self.identity_calls = 0
        self.closed = False

    def get_health(self):
        self.health_calls += 1
        if self.health_calls <= self.health_failures:
            raise ClientError("connection refused", url=self.base_url)
        return 200

    def get_node_identity(self):
        self.identity_calls += 1
        if self.identity_error is not None:
            raise self.identity_error
        return NodeIdentity(enr=self.enr, peer_id="16Uiu2HAm")

    def close(self):
        self.closed = True


class FakeClock:
    """A sleep replacement that only advances a counter."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def genesis_files(tmp_path):
    """A genesis config YAML and genesis state SSZ on local disk."""
    genesis_dir = tmp_path / "genesis"
    genesis_dir.mkdir()
    config_yml = genesis_dir / "config.yaml"
    config_yml.write_text("PRESET_BASE: minimal\n", encoding="utf-8")
    genesis_ssz = genesis_dir / "genesis.ssz"
    genesis_ssz.write_bytes(b"\x00\x01\x02\x03")
    return str(config_yml), str(genesis_ssz)


@pytest.fixture
def substrate(tmp_path):
    return FakeSubstrate(tmp_path / "shared")


@pytest.fixture
def fake_clock():
    return FakeClock()


class RESTClientRecorder:
    """REST client factory that records every StubRESTClient it creates."""

    def __init__(self):
        self.health_failures = 0
        self.enr = "enr:-xyz789"
        self.identity_error = None
        self.clients = []

    def __call__(self, ip_address: str, port: int) -> StubRESTClient:
        client = StubRESTClient(
            ip_address,
            port,
            health_failures=self.health_failures,
            enr=self.enr,
            identity_error=self.identity_error,
        )
        self.clients.append(client)
        return client


@pytest.fixture
def rest_clients():
    return RESTClientRecorder()
