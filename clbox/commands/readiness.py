"""
Readiness polling - block until a launched node answers its health probe.

A probe that returns without raising counts as ready; the payload is not
inspected further. ``CLClientRESTClient.get_health`` raises on non-2xx
responses, so a 503 (not initialised) keeps polling while 206 (syncing)
is accepted.
"""

import time
from typing import Any, Callable, Optional

from rich.console import Console

from clbox.commands.errors import ReadinessTimeoutError, RetryExhaustedError
from clbox.commands.retry import HEALTH_RETRY_CONFIG, RetryConfig, retry_call

console = Console()


def wait_for_availability(
    rest_client,
    service_id: str,
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> None:
    """
    Probe ``rest_client.get_health()`` until it succeeds.

    Blocks for at most ``(max_attempts - 1) * delay`` seconds plus probe time.

    Raises:
        ReadinessTimeoutError: If every attempt failed; names the attempt
            count and delay used
    """
    retry_config = config or HEALTH_RETRY_CONFIG

    def _log_failed_probe(attempt: int, error: BaseException) -> None:
        console.print(
            f"[yellow]Health check {attempt}/{retry_config.max_attempts} "
            f"for {service_id} failed: {str(error)}[/yellow]"
        )

    try:
        retry_call(
            rest_client.get_health,
            config=retry_config,
            sleep=sleep,
            on_retry=_log_failed_probe,
        )
    except RetryExhaustedError as e:
        raise ReadinessTimeoutError(
            f"Node '{service_id}' didn't become available even after "
            f"{e.attempts} attempts with {e.delay}s between attempts",
            service_id=service_id,
            attempts=e.attempts,
            delay=e.delay,
            details={"last_error": str(e.last_exception)},
        ) from e.last_exception

    console.print(f"[green]✓ Node {service_id} is healthy[/green]")
