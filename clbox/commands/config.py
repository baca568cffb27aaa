"""
Launcher configuration.

Values come from the defaults in ``constants``, then an optional TOML file
(``[launcher]`` section), then ``CLBOX_*`` environment variables.
"""

import ipaddress
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

import toml
from rich.console import Console

from clbox.commands.constants import (
    CONFIG_FILE_SECTION,
    DEFAULT_DATA_ROOT,
    DEFAULT_IMAGE,
    DEFAULT_NETWORK_NAME,
    DEFAULT_NETWORK_SUBNET,
    DEFAULT_REST_TIMEOUT,
    ENV_PREFIX,
    HEALTH_CHECK_ATTEMPTS,
    HEALTH_CHECK_DELAY,
)
from clbox.commands.errors import ConfigurationError
from clbox.commands.retry import RetryConfig

console = Console()


@dataclass(frozen=True)
class LauncherConfig:
    """Settings shared by every launch performed by one CLI invocation."""

    image: str = DEFAULT_IMAGE
    network_name: str = DEFAULT_NETWORK_NAME
    network_subnet: str = DEFAULT_NETWORK_SUBNET
    data_root: str = DEFAULT_DATA_ROOT
    health_check_attempts: int = HEALTH_CHECK_ATTEMPTS
    health_check_delay: float = HEALTH_CHECK_DELAY
    rest_timeout: float = DEFAULT_REST_TIMEOUT

    def validate(self, config_file: Optional[str] = None) -> "LauncherConfig":
        if self.health_check_attempts < 1:
            raise ConfigurationError(
                "health_check_attempts must be at least 1",
                config_file=config_file,
                details={"health_check_attempts": self.health_check_attempts},
            )
        if self.health_check_delay < 0:
            raise ConfigurationError(
                "health_check_delay must not be negative",
                config_file=config_file,
                details={"health_check_delay": self.health_check_delay},
            )
        if self.rest_timeout <= 0:
            raise ConfigurationError(
                "rest_timeout must be positive",
                config_file=config_file,
                details={"rest_timeout": self.rest_timeout},
            )
        try:
            ipaddress.ip_network(self.network_subnet)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid network_subnet '{self.network_subnet}': {e}",
                config_file=config_file,
            ) from e
        return self

    def health_retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.health_check_attempts,
            delay=self.health_check_delay,
        )


def _coerce(name: str, raw, config_file: Optional[str]):
    """Convert a raw file/env value to the type of the matching field."""
    field_types = {f.name: f.type for f in fields(LauncherConfig)}
    target = field_types[name]
    try:
        if target in (int, "int"):
            if isinstance(raw, bool):
                raise ValueError("booleans are not integers")
            return int(raw)
        if target in (float, "float"):
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for '{name}': {raw!r}",
            config_file=config_file,
            details={"field": name},
        ) from e


def _read_config_file(config_path: Path) -> dict:
    if not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}", config_file=str(config_path)
        )
    try:
        with open(config_path, encoding="utf-8") as f:
            data = toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigurationError(
            f"Could not read config file {config_path}: {e}",
            config_file=str(config_path),
        ) from e

    section = data.get(CONFIG_FILE_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"[{CONFIG_FILE_SECTION}] must be a table",
            config_file=str(config_path),
        )
    return section


def load_launcher_config(
    config_file: Optional[Union[Path, str]] = None,
    environ: Optional[dict] = None,
) -> LauncherConfig:
    """
    Build a LauncherConfig from defaults, an optional TOML file and the environment.

    Args:
        config_file: Optional path to a TOML file with a ``[launcher]`` table
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        ConfigurationError: If the file is unreadable, has unknown keys, or a
            value cannot be converted
    """
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(LauncherConfig)}
    config_file_str = str(config_file) if config_file is not None else None
    overrides = {}

    if config_file is not None:
        section = _read_config_file(Path(config_file))
        unknown = sorted(set(section) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown keys in [{CONFIG_FILE_SECTION}]: {', '.join(unknown)}",
                config_file=config_file_str,
            )
        for key, value in section.items():
            overrides[key] = _coerce(key, value, config_file_str)

    for name in sorted(known):
        env_key = f"{ENV_PREFIX}{name.upper()}"
        if env_key in environ:
            overrides[name] = _coerce(name, environ[env_key], config_file_str)
            console.print(f"[cyan]  {name} = {overrides[name]} (from {env_key})[/cyan]")

    return replace(LauncherConfig(), **overrides).validate(config_file_str)
