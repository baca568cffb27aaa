"""
Managers module - Docker-backed orchestration substrate.

- BaseManager: Common Docker client utilities
- NetworkManager: Enclave network and IP allocation
- ServiceManager: Service container lifecycle
"""

from clbox.commands.managers.base import BaseManager
from clbox.commands.managers.network import NetworkManager
from clbox.commands.managers.service import (
    ServiceContext,
    ServiceManager,
    service_manager_from_config,
)

__all__ = [
    "BaseManager",
    "NetworkManager",
    "ServiceContext",
    "ServiceManager",
    "service_manager_from_config",
]
