"""
Artifact provisioning - copy input files into the directory shared with a service.
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable

from rich.console import Console

from clbox.commands.constants import ERROR_FILE_NOT_FOUND
from clbox.commands.errors import ProvisioningError
from clbox.commands.launch_config import (
    FileRequest,
    LaunchParameters,
    ProvisionedArtifacts,
    genesis_file_requests,
)

console = Console()


@dataclass(frozen=True)
class SharedPath:
    """A directory seen from the orchestrator (host_path) and from the service."""

    host_path: str
    service_path: str

    def get_child_path(self, rel_path: str) -> "SharedPath":
        return SharedPath(
            host_path=str(Path(self.host_path) / rel_path),
            service_path=str(PurePosixPath(self.service_path) / rel_path),
        )


def copy_file_to_shared_path(source: str, shared_path: SharedPath) -> str:
    """
    Copy a local file to a shared path.

    Returns:
        The absolute path of the copy inside the service

    Raises:
        ProvisioningError: If the source is missing or unreadable, or the copy fails
    """
    source_path = Path(source)
    if not source_path.is_file():
        raise ProvisioningError(
            ERROR_FILE_NOT_FOUND.format(path=source),
            source=str(source),
            destination=shared_path.host_path,
        )
    if not os.access(source_path, os.R_OK):
        raise ProvisioningError(
            f"File is not readable: {source}",
            source=str(source),
            destination=shared_path.host_path,
        )

    try:
        Path(shared_path.host_path).parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source_path, shared_path.host_path)
    except OSError as e:
        raise ProvisioningError(
            f"Failed to copy {source} to {shared_path.host_path}: {str(e)}",
            source=str(source),
            destination=shared_path.host_path,
        ) from e

    console.print(
        f"[green]✓ Copied {source} to {shared_path.service_path}[/green]"
    )
    return shared_path.service_path


def provision_files(
    requests: Iterable[FileRequest], shared_dir: SharedPath
) -> dict[str, str]:
    """Copy every requested file; map each rel_path to its path in the service."""
    return {
        request.rel_path: copy_file_to_shared_path(
            request.source, shared_dir.get_child_path(request.rel_path)
        )
        for request in requests
    }


def provision_genesis_artifacts(
    params: LaunchParameters, shared_dir: SharedPath
) -> ProvisionedArtifacts:
    """Copy the genesis config and state into the shared dir."""
    config_request, ssz_request = genesis_file_requests(params)
    try:
        paths = provision_files((config_request, ssz_request), shared_dir)
    except ProvisioningError as e:
        e.service_id = params.service_id
        e.details["service_id"] = params.service_id
        raise
    return ProvisionedArtifacts(
        genesis_config_yml_path=paths[config_request.rel_path],
        genesis_ssz_path=paths[ssz_request.rel_path],
    )
