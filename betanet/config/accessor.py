"""Flat key lookups over the nested configuration.

Generic consumers address settings by a short name (``max_peers``) instead of
walking sections. The key namespace is closed: a field becomes reachable only
once it is registered below. Lookups never raise; an unknown key, or a key
registered for a different value kind, yields the caller's fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from betanet.config.schema import Config


KIND_STRING = "string"
KIND_INT = "int"
KIND_BOOL = "bool"
KIND_DURATION = "duration"
VALID_KINDS = (KIND_STRING, KIND_INT, KIND_BOOL, KIND_DURATION)


@dataclass(frozen=True, slots=True)
class ConfigKey:
    name: str
    kind: str
    section: str | None
    field_name: str

    def _owner(self, config: Config) -> Any:
        return config if self.section is None else getattr(config, self.section)

    def get(self, config: Config) -> Any:
        return getattr(self._owner(config), self.field_name)

    def set(self, config: Config, value: Any) -> None:
        setattr(self._owner(config), self.field_name, value)


def _key(kind: str, path: str) -> ConfigKey:
    section, _, field_name = path.rpartition(".")
    return ConfigKey(name=field_name, kind=kind, section=section or None, field_name=field_name)


_REGISTERED_KEYS = (
    _key(KIND_STRING, "environment"),
    _key(KIND_STRING, "log_level"),
    _key(KIND_STRING, "network.listen_addr"),
    _key(KIND_STRING, "storage.data_dir"),
    _key(KIND_INT, "network.max_peers"),
    _key(KIND_INT, "security.max_content_size"),
    _key(KIND_INT, "security.max_file_count"),
    _key(KIND_INT, "security.rate_limit"),
    _key(KIND_INT, "storage.max_retries"),
    _key(KIND_INT, "wallet.max_sites_per_wallet"),
    _key(KIND_INT, "node.metrics_port"),
    _key(KIND_INT, "node.profiling_port"),
    _key(KIND_BOOL, "network.enable_mdns"),
    _key(KIND_BOOL, "network.enable_nat"),
    _key(KIND_BOOL, "security.enable_peer_validation"),
    _key(KIND_BOOL, "security.enable_rate_limiting"),
    _key(KIND_BOOL, "storage.enable_compression"),
    _key(KIND_BOOL, "storage.enable_encryption"),
    _key(KIND_BOOL, "wallet.enable_auto_backup"),
    _key(KIND_BOOL, "node.enable_metrics"),
    _key(KIND_BOOL, "node.enable_profiling"),
    _key(KIND_BOOL, "node.garbage_collection"),
    _key(KIND_DURATION, "network.peer_timeout"),
    _key(KIND_DURATION, "security.ban_duration"),
    _key(KIND_DURATION, "security.session_timeout"),
    _key(KIND_DURATION, "storage.cleanup_interval"),
    _key(KIND_DURATION, "storage.retry_delay"),
    _key(KIND_DURATION, "wallet.backup_interval"),
)

KEY_TABLE: dict[str, ConfigKey] = {entry.name: entry for entry in _REGISTERED_KEYS}
if len(KEY_TABLE) != len(_REGISTERED_KEYS):
    raise RuntimeError("duplicate config key registration")


def lookup(key: str, kind: str) -> ConfigKey | None:
    entry = KEY_TABLE.get(key)
    if entry is None or entry.kind != kind:
        return None
    return entry


def keys(kind: str | None = None) -> list[str]:
    return [entry.name for entry in _REGISTERED_KEYS if kind is None or entry.kind == kind]


def _get(config: Config, key: str, kind: str, fallback: Any) -> Any:
    entry = lookup(key, kind)
    if entry is None:
        return fallback
    return entry.get(config)


def get_string(config: Config, key: str, fallback: str) -> str:
    return _get(config, key, KIND_STRING, fallback)


def get_int(config: Config, key: str, fallback: int) -> int:
    return _get(config, key, KIND_INT, fallback)


def get_bool(config: Config, key: str, fallback: bool) -> bool:
    return _get(config, key, KIND_BOOL, fallback)


def get_duration(config: Config, key: str, fallback: timedelta) -> timedelta:
    return _get(config, key, KIND_DURATION, fallback)


def set_value(config: Config, key: str, value: Any) -> None:
    """Assign ``value`` to the field registered under ``key``.

    Unlike the getters this is strict: unknown keys raise ``KeyError`` and a
    value of the wrong kind raises ``TypeError``.
    """
    entry = KEY_TABLE.get(key)
    if entry is None:
        raise KeyError(f"unknown config key '{key}'")
    if not _matches_kind(entry.kind, value):
        raise TypeError(f"config key '{key}' expects a {entry.kind} value")
    entry.set(config, value)


def _matches_kind(kind: str, value: Any) -> bool:
    if kind == KIND_STRING:
        return isinstance(value, str)
    if kind == KIND_INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind == KIND_BOOL:
        return isinstance(value, bool)
    return isinstance(value, timedelta)
