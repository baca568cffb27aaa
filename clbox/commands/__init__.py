"""
Commands module - CLI commands and the node launch API.
"""

from clbox.commands.errors import (
    ClboxError,
    ClientError,
    ConfigurationError,
    IdentityFetchError,
    LaunchError,
    LaunchStepError,
    PortMismatchError,
    ProvisioningError,
    ReadinessTimeoutError,
    RetryExhaustedError,
    ValidationError,
)
from clbox.commands.launch import launch
from clbox.commands.launcher import ConsensusLayerClientContext, TekuLauncher
from clbox.commands.list import list_services
from clbox.commands.logs import logs
from clbox.commands.stop import stop

__all__ = [
    # Commands
    "launch",
    "list_services",
    "logs",
    "stop",
    # Launch API
    "TekuLauncher",
    "ConsensusLayerClientContext",
    # Error classes
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
