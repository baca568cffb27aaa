"""
BaseManager - Common Docker client utilities and shared functionality.
"""

from typing import Optional

import docker
from rich.console import Console

from clbox.commands.errors import ClboxError

console = Console()


class BaseManager:
    """Base class with shared Docker client utilities."""

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """Initialize with an optional Docker client.

        Args:
            client: Optional Docker client. If not provided, creates one from environment.

        Raises:
            ClboxError: If the Docker daemon cannot be reached
        """
        if client is not None:
            self.client = client
        else:
            try:
                self.client = docker.from_env()
            except docker.errors.DockerException as e:
                console.print(f"[red]Failed to connect to Docker: {str(e)}[/red]")
                console.print(
                    "[yellow]Make sure Docker is running and you have permission to access it.[/yellow]"
                )
                raise ClboxError(
                    f"Failed to connect to Docker: {str(e)}", code="DOCKER_UNAVAILABLE"
                ) from e

    def _ensure_image_pulled(self, image: str) -> bool:
        """Ensure the specified Docker image is available locally, pulling if needed."""
        try:
            self.client.images.get(image)
            console.print(f"[cyan]✓ Image {image} already available locally[/cyan]")
            return True
        except docker.errors.ImageNotFound:
            pass
        except docker.errors.APIError as e:
            console.print(f"[red]✗ Error checking image {image}: {str(e)}[/red]")
            return False

        console.print(f"[yellow]Pulling image: {image}[/yellow]")
        try:
            self.client.images.pull(image)
            console.print(f"[green]✓ Successfully pulled image: {image}[/green]")
            return True
        except docker.errors.NotFound:
            console.print(f"[red]✗ Image {image} not found in registry[/red]")
            return False
        except docker.errors.APIError as e:
            console.print(f"[red]✗ Docker API error pulling {image}: {str(e)}[/red]")
            return False

    def _get_container(self, container_name: str):
        """Return the named container, or None if it does not exist."""
        try:
            return self.client.containers.get(container_name)
        except docker.errors.NotFound:
            return None
