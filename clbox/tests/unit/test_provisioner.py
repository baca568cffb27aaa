"""
Unit tests for artifact provisioning.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from clbox.commands.errors import LaunchStepError, ProvisioningError
from clbox.commands.launch_config import BootstrapNode, LaunchParameters
from clbox.commands.provisioner import (
    SharedPath,
    copy_file_to_shared_path,
    provision_genesis_artifacts,
)


@pytest.fixture
def shared_dir(tmp_path):
    return SharedPath(host_path=str(tmp_path / "shared"), service_path="/shared")


def make_params(config_path, ssz_path):
    return LaunchParameters(
        service_id="cl-client-0",
        role=BootstrapNode(),
        el_client_rpc_sockets=frozenset({"el:8545"}),
        total_terminal_difficulty=1,
        genesis_config_yml_path=config_path,
        genesis_ssz_path=ssz_path,
    )


def test_shared_path_child():
    child = SharedPath("/host/data/shared", "/shared").get_child_path("genesis.ssz")
    assert child.host_path == str(Path("/host/data/shared") / "genesis.ssz")
    assert child.service_path == "/shared/genesis.ssz"


def test_copy_returns_path_inside_service(genesis_files, shared_dir):
    config_yml, _ = genesis_files

    path_on_service = copy_file_to_shared_path(
        config_yml, shared_dir.get_child_path("genesis-config.yml")
    )

    assert path_on_service == "/shared/genesis-config.yml"
    copied = Path(shared_dir.host_path) / "genesis-config.yml"
    assert copied.read_text(encoding="utf-8") == "PRESET_BASE: minimal\n"


def test_missing_source_names_both_paths(tmp_path, shared_dir):
    missing = str(tmp_path / "nope.yaml")
    destination = shared_dir.get_child_path("genesis-config.yml")

    with pytest.raises(ProvisioningError) as exc_info:
        copy_file_to_shared_path(missing, destination)

    error = exc_info.value
    assert error.source == missing
    assert error.destination == destination.host_path
    assert error.details["source"] == missing
    assert error.code == "PROVISIONING_FAILED"
    assert isinstance(error, LaunchStepError)


def test_copy_failure_is_wrapped(genesis_files, shared_dir):
    config_yml, _ = genesis_files

    with patch("clbox.commands.provisioner.shutil.copy2", side_effect=OSError("disk full")):
        with pytest.raises(ProvisioningError) as exc_info:
            copy_file_to_shared_path(config_yml, shared_dir.get_child_path("x.yml"))

    assert "disk full" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, OSError)


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="root can read files regardless of mode",
)
def test_unreadable_source(genesis_files, shared_dir):
    config_yml, _ = genesis_files
    os.chmod(config_yml, 0)
    try:
        with pytest.raises(ProvisioningError):
            copy_file_to_shared_path(config_yml, shared_dir.get_child_path("x.yml"))
    finally:
        os.chmod(config_yml, 0o644)


def test_provision_genesis_artifacts(genesis_files, shared_dir):
    artifacts = provision_genesis_artifacts(make_params(*genesis_files), shared_dir)

    assert artifacts.genesis_config_yml_path == "/shared/genesis-config.yml"
    assert artifacts.genesis_ssz_path == "/shared/genesis.ssz"
    assert (Path(shared_dir.host_path) / "genesis.ssz").read_bytes() == b"\x00\x01\x02\x03"


def test_provision_failure_carries_service_id(genesis_files, tmp_path, shared_dir):
    config_yml, _ = genesis_files
    params = make_params(config_yml, str(tmp_path / "missing.ssz"))

    with pytest.raises(ProvisioningError) as exc_info:
        provision_genesis_artifacts(params, shared_dir)

    assert exc_info.value.service_id == "cl-client-0"
    assert exc_info.value.details["service_id"] == "cl-client-0"
    assert exc_info.value.source.endswith("missing.ssz")
