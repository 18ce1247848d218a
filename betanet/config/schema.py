"""Dataclasses, defaults and validation for the node configuration."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from datetime import timedelta
from typing import Any, Callable

from betanet.config.durations import format_duration, parse_duration
from betanet.config.errors import ConfigParseError, ConfigValidationError


KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB
TIB = 1024 * GIB

DEFAULT_LISTEN_ADDR = "/ip4/0.0.0.0/tcp/4001"

VALID_ENVIRONMENTS = ("development", "staging", "production")
VALID_LOG_LEVELS = ("debug", "info", "warn", "error")
SECTION_NAMES = ("network", "security", "storage", "wallet", "node")


@dataclass(slots=True)
class NetworkConfig:
    listen_addr: str = DEFAULT_LISTEN_ADDR
    bootstrap_peers: list[str] = field(default_factory=list)
    max_peers: int = 100
    peer_timeout: timedelta = timedelta(seconds=30)
    enable_mdns: bool = True
    enable_nat: bool = True
    enable_relay: bool = False


@dataclass(slots=True)
class SecurityConfig:
    max_content_size: int = 10 * MIB
    max_file_count: int = 1000
    max_path_length: int = 255
    rate_limit: int = 100
    ban_duration: timedelta = timedelta(minutes=15)
    enable_peer_validation: bool = True
    enable_rate_limiting: bool = True
    require_strong_passphrase: bool = True
    max_login_attempts: int = 5
    session_timeout: timedelta = timedelta(hours=24)


@dataclass(slots=True)
class StorageConfig:
    data_dir: str = "./data"
    max_file_size: int = 100 * MIB
    cleanup_interval: timedelta = timedelta(minutes=5)
    max_retries: int = 3
    retry_delay: timedelta = timedelta(milliseconds=100)
    enable_compression: bool = True
    enable_encryption: bool = True


@dataclass(slots=True)
class WalletConfig:
    default_path: str = "./wallets"
    backup_interval: timedelta = timedelta(hours=24)
    max_sites_per_wallet: int = 1000
    enable_auto_backup: bool = True
    backup_retention: int = 30


@dataclass(slots=True)
class NodeConfig:
    enable_metrics: bool = True
    metrics_port: int = 9090
    enable_profiling: bool = False
    profiling_port: int = 6060
    max_memory_usage: int = 100 * MIB
    garbage_collection: bool = True


@dataclass(slots=True)
class Config:
    environment: str = "development"
    log_level: str = "info"
    network: NetworkConfig = field(default_factory=NetworkConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    wallet: WalletConfig = field(default_factory=WalletConfig)
    node: NodeConfig = field(default_factory=NodeConfig)

    def copy(self) -> Config:
        return copy.deepcopy(self)

    def validate(self) -> None:
        validate_config(self)

    def get_string(self, key: str, fallback: str) -> str:
        from betanet.config.accessor import get_string

        return get_string(self, key, fallback)

    def get_int(self, key: str, fallback: int) -> int:
        from betanet.config.accessor import get_int

        return get_int(self, key, fallback)

    def get_bool(self, key: str, fallback: bool) -> bool:
        from betanet.config.accessor import get_bool

        return get_bool(self, key, fallback)

    def get_duration(self, key: str, fallback: timedelta) -> timedelta:
        from betanet.config.accessor import get_duration

        return get_duration(self, key, fallback)


def default_config() -> Config:
    """Return a fresh aggregate populated with built-in defaults."""
    return Config()


# --- validation ------------------------------------------------------------


def _check_enum(value: str, *, label: str, allowed: tuple[str, ...]) -> None:
    if value not in allowed:
        raise ConfigValidationError(f"invalid {label}: {value} (must be one of: {', '.join(allowed)})")


def validate_network(network: NetworkConfig) -> None:
    if network.max_peers <= 0:
        raise ConfigValidationError("max_peers must be positive")
    if network.max_peers > 1000:
        raise ConfigValidationError("max_peers too high (max 1000)")
    if network.peer_timeout <= timedelta(0):
        raise ConfigValidationError("peer_timeout must be positive")
    if network.peer_timeout > timedelta(minutes=5):
        raise ConfigValidationError("peer_timeout too high (max 5 minutes)")


def validate_security(security: SecurityConfig) -> None:
    if security.max_content_size <= 0:
        raise ConfigValidationError("max_content_size must be positive")
    if security.max_content_size > GIB:
        raise ConfigValidationError("max_content_size too high (max 1GB)")
    if security.max_file_count <= 0:
        raise ConfigValidationError("max_file_count must be positive")
    if security.max_file_count > 10000:
        raise ConfigValidationError("max_file_count too high (max 10000)")
    if security.max_path_length <= 0:
        raise ConfigValidationError("max_path_length must be positive")
    if security.max_path_length > 1024:
        raise ConfigValidationError("max_path_length too high (max 1024)")
    if security.rate_limit <= 0:
        raise ConfigValidationError("rate_limit must be positive")
    if security.rate_limit > 10000:
        raise ConfigValidationError("rate_limit too high (max 10000)")
    if security.ban_duration <= timedelta(0):
        raise ConfigValidationError("ban_duration must be positive")
    if security.ban_duration > timedelta(hours=24):
        raise ConfigValidationError("ban_duration too high (max 24 hours)")
    if security.max_login_attempts <= 0:
        raise ConfigValidationError("max_login_attempts must be positive")
    if security.max_login_attempts > 100:
        raise ConfigValidationError("max_login_attempts too high (max 100)")
    if security.session_timeout <= timedelta(0):
        raise ConfigValidationError("session_timeout must be positive")
    if security.session_timeout > timedelta(days=30):
        raise ConfigValidationError("session_timeout too high (max 30 days)")


def validate_storage(storage: StorageConfig) -> None:
    if not storage.data_dir:
        raise ConfigValidationError("data_dir cannot be empty")
    if storage.max_file_size <= 0:
        raise ConfigValidationError("max_file_size must be positive")
    if storage.max_file_size > GIB:
        raise ConfigValidationError("max_file_size too high (max 1GB)")
    if storage.cleanup_interval <= timedelta(0):
        raise ConfigValidationError("cleanup_interval must be positive")
    if storage.cleanup_interval > timedelta(hours=24):
        raise ConfigValidationError("cleanup_interval too high (max 24 hours)")
    if storage.max_retries < 0:
        raise ConfigValidationError("max_retries cannot be negative")
    if storage.max_retries > 100:
        raise ConfigValidationError("max_retries too high (max 100)")
    if storage.retry_delay < timedelta(0):
        raise ConfigValidationError("retry_delay cannot be negative")
    if storage.retry_delay > timedelta(seconds=10):
        raise ConfigValidationError("retry_delay too high (max 10 seconds)")


def validate_wallet(wallet: WalletConfig) -> None:
    if not wallet.default_path:
        raise ConfigValidationError("default_path cannot be empty")
    if wallet.backup_interval <= timedelta(0):
        raise ConfigValidationError("backup_interval must be positive")
    if wallet.backup_interval > timedelta(days=7):
        raise ConfigValidationError("backup_interval too high (max 1 week)")
    if wallet.max_sites_per_wallet <= 0:
        raise ConfigValidationError("max_sites_per_wallet must be positive")
    if wallet.max_sites_per_wallet > 10000:
        raise ConfigValidationError("max_sites_per_wallet too high (max 10000)")
    if wallet.backup_retention < 0:
        raise ConfigValidationError("backup_retention cannot be negative")
    if wallet.backup_retention > 365:
        raise ConfigValidationError("backup_retention too high (max 365)")


def validate_node(node: NodeConfig) -> None:
    if node.metrics_port < 0 or node.metrics_port > 65535:
        raise ConfigValidationError("metrics_port must be between 0 and 65535")
    if node.profiling_port < 0 or node.profiling_port > 65535:
        raise ConfigValidationError("profiling_port must be between 0 and 65535")
    if node.max_memory_usage <= 0:
        raise ConfigValidationError("max_memory_usage must be positive")
    if node.max_memory_usage > TIB:
        raise ConfigValidationError("max_memory_usage too high (max 1TB)")


SECTION_VALIDATORS: tuple[tuple[str, Callable[[Any], None]], ...] = (
    ("network", validate_network),
    ("security", validate_security),
    ("storage", validate_storage),
    ("wallet", validate_wallet),
    ("node", validate_node),
)


def validate_config(config: Config) -> None:
    """Raise ``ConfigValidationError`` for the first violated rule.

    Enum checks run before the sections, and sections run in a fixed order,
    so the reported failure is deterministic when several fields are invalid.
    """
    _check_enum(config.environment, label="environment", allowed=VALID_ENVIRONMENTS)
    _check_enum(config.log_level, label="log level", allowed=VALID_LOG_LEVELS)
    for section_name, validator in SECTION_VALIDATORS:
        try:
            validator(getattr(config, section_name))
        except ConfigValidationError as exc:
            raise exc.in_section(section_name) from exc


# --- overlay from raw mappings ---------------------------------------------


def _parse_str(raw: Any, *, field_name: str) -> str:
    if not isinstance(raw, str):
        raise ConfigParseError(f"'{field_name}' must be a string")
    return raw


def _parse_int(raw: Any, *, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigParseError(f"'{field_name}' must be an integer")
    return raw


def _parse_bool_value(raw: Any, *, field_name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    raise ConfigParseError(f"'{field_name}' must be a boolean")


def _parse_duration_value(raw: Any, *, field_name: str) -> timedelta:
    try:
        return parse_duration(raw)
    except ValueError as exc:
        raise ConfigParseError(f"'{field_name}' must be a duration such as '30s' or '5m'") from exc


def _parse_string_list(raw: Any, *, field_name: str) -> list[str]:
    if not isinstance(raw, list):
        raise ConfigParseError(f"'{field_name}' must be a list")
    return [_parse_str(item, field_name=field_name) for item in raw]


_FIELD_PARSERS: dict[str, Callable[..., Any]] = {
    "str": _parse_str,
    "int": _parse_int,
    "bool": _parse_bool_value,
    "timedelta": _parse_duration_value,
    "list[str]": _parse_string_list,
}


def _overlay_fields(target: Any, raw: dict[str, Any], *, prefix: str, ignored: list[str]) -> None:
    known = {item.name: item for item in fields(target)}
    for key, value in raw.items():
        name = str(key)
        dotted = f"{prefix}{name}"
        entry = known.get(name)
        if entry is None:
            ignored.append(dotted)
            continue
        if name in SECTION_NAMES and not prefix:
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ConfigParseError(f"'{dotted}' must be an object")
            _overlay_fields(getattr(target, name), value, prefix=f"{dotted}.", ignored=ignored)
            continue
        if value is None:
            continue
        parser = _FIELD_PARSERS[str(entry.type)]
        setattr(target, name, parser(value, field_name=dotted))


def overlay_config(config: Config, data: Any) -> list[str]:
    """Merge a parsed YAML document onto ``config`` in place.

    Absent keys keep their current value and unknown keys are skipped. Returns
    the dotted names of skipped keys. Raises ``ConfigParseError`` when a value
    has the wrong shape; the aggregate may then be partially updated, so callers
    discard it.
    """
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ConfigParseError("config document must be a mapping")
    ignored: list[str] = []
    _overlay_fields(config, data, prefix="", ignored=ignored)
    return ignored


def parse_config(data: Any) -> Config:
    """Build a validated aggregate from a parsed YAML document."""
    config = default_config()
    overlay_config(config, data)
    validate_config(config)
    return config


# --- serialization ---------------------------------------------------------


def _dump_value(value: Any) -> Any:
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, list):
        return [_dump_value(item) for item in value]
    if hasattr(value, "__dataclass_fields__"):
        return {item.name: _dump_value(getattr(value, item.name)) for item in fields(value)}
    return value


def config_to_dict(config: Config) -> dict[str, Any]:
    return _dump_value(config)
