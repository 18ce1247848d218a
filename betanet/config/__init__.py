"""Layered node configuration: defaults, YAML file, environment overlay."""

from .accessor import get_bool, get_duration, get_int, get_string
from .errors import ConfigError, ConfigIOError, ConfigParseError, ConfigValidationError
from .handle import ConfigHandle, ConfigView
from .loader import initialize_config, load_config, load_from_environment, save_config
from .schema import (
    Config,
    NetworkConfig,
    NodeConfig,
    SecurityConfig,
    StorageConfig,
    WalletConfig,
    default_config,
    validate_config,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConfigHandle",
    "ConfigIOError",
    "ConfigParseError",
    "ConfigValidationError",
    "ConfigView",
    "NetworkConfig",
    "NodeConfig",
    "SecurityConfig",
    "StorageConfig",
    "WalletConfig",
    "default_config",
    "get_bool",
    "get_duration",
    "get_int",
    "get_string",
    "initialize_config",
    "load_config",
    "load_from_environment",
    "save_config",
    "validate_config",
]
