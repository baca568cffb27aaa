"""
Typed error classes for clbox.

Every error carries a ``code`` for programmatic handling and a ``details``
dict that the CLI renders as JSON. Failures that abort a node launch derive
from ``LaunchStepError`` and name the service they were launching.
"""

from typing import Any, Optional


class ClboxError(Exception):
    """Base exception class for all clbox errors.

    Keyword context given by subclasses is copied into ``details`` unless it
    is None.
    """

    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        **context: Any,
    ):
        self.message = message
        self.code = code or type(self).code
        self.details = dict(details or {})
        self.details.update(
            {key: value for key, value in context.items() if value is not None}
        )
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            result["code"] = self.code
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ValidationError(ClboxError):
    """A launch parameter failed validation."""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message, field=field, value=value)


class ConfigurationError(ClboxError):
    """Bad launcher configuration, environment override or client type."""

    code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.config_file = config_file
        super().__init__(message, details=details, config_file=config_file)


class ClientError(ClboxError):
    """A node REST API call failed or returned an unusable response."""

    code = "CLIENT_ERROR"

    def __init__(
        self, message: str, url: Optional[str] = None, status_code: Optional[int] = None
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message, url=url, status_code=status_code)


class RetryExhaustedError(ClboxError):
    """Raised by the retry combinator once every attempt has failed."""

    code = "RETRY_EXHAUSTED"

    def __init__(
        self,
        message: str,
        attempts: int,
        delay: float,
        last_exception: Optional[BaseException] = None,
    ):
        self.attempts = attempts
        self.delay = delay
        self.last_exception = last_exception
        super().__init__(
            message,
            attempts=attempts,
            delay_seconds=delay,
            last_error=None if last_exception is None else str(last_exception),
        )


class LaunchStepError(ClboxError):
    """Base class for failures that abort a single node launch.

    None of these are retried by the launcher; callers may retry the whole
    launch.
    """

    def __init__(
        self,
        message: str,
        service_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        **context: Any,
    ):
        self.service_id = service_id
        super().__init__(message, details=details, service_id=service_id, **context)


class ProvisioningError(LaunchStepError):
    """An input artifact could not be copied into the shared directory."""

    code = "PROVISIONING_FAILED"

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        destination: Optional[str] = None,
        service_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.source = source
        self.destination = destination
        super().__init__(
            message,
            service_id=service_id,
            details=details,
            source=source,
            destination=destination,
        )


class LaunchError(LaunchStepError):
    """The substrate rejected or failed to start the container."""

    code = "LAUNCH_FAILED"


class PortMismatchError(LaunchStepError):
    """A started container lacks a port from the declared catalog."""

    code = "PORT_MISMATCH"

    def __init__(
        self,
        message: str,
        service_id: Optional[str] = None,
        port_id: Optional[str] = None,
        available_ports: Optional[list[str]] = None,
    ):
        self.port_id = port_id
        self.available_ports = available_ports or []
        super().__init__(
            message,
            service_id=service_id,
            port_id=port_id,
            available_ports=self.available_ports,
        )


class ReadinessTimeoutError(LaunchStepError):
    """Health polling exhausted its attempt budget."""

    code = "READINESS_TIMEOUT"

    def __init__(
        self,
        message: str,
        service_id: Optional[str] = None,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.attempts = attempts
        self.delay = delay
        super().__init__(
            message,
            service_id=service_id,
            details=details,
            attempts=attempts,
            delay_seconds=delay,
        )


class IdentityFetchError(LaunchStepError):
    """A healthy node failed to return its network identity."""

    code = "IDENTITY_FETCH_FAILED"

    def __init__(
        self,
        message: str,
        service_id: Optional[str] = None,
        url: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.url = url
        super().__init__(message, service_id=service_id, details=details, url=url)


__all__ = [
    "ClboxError",
    "ValidationError",
    "ConfigurationError",
    "ClientError",
    "RetryExhaustedError",
    "LaunchStepError",
    "ProvisioningError",
    "LaunchError",
    "PortMismatchError",
    "ReadinessTimeoutError",
    "IdentityFetchError",
]
