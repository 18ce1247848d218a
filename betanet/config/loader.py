"""Config loading, environment overlay and persistence."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Mapping

import yaml

from betanet.config import accessor
from betanet.config.errors import ConfigIOError, ConfigParseError, ConfigValidationError
from betanet.config.schema import Config, config_to_dict, default_config, overlay_config, validate_config
from betanet.core.logging import get_logger


DEFAULT_ENV_PREFIX = "BETANET"

# Suffix -> accessor key for the scalar variables read by load_from_environment.
_ENV_STRING_KEYS = {
    "ENV": "environment",
    "LOG_LEVEL": "log_level",
    "LISTEN_ADDR": "listen_addr",
    "DATA_DIR": "data_dir",
}
_ENV_INT_KEYS = {
    "MAX_PEERS": "max_peers",
    "MAX_CONTENT_SIZE": "max_content_size",
}
# Base-10 ASCII digits with an optional sign, within the signed 64-bit range.
_ENV_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

logger = get_logger("betanet.config")


def load_config(path: Path | str) -> Config:
    """Load ``path`` onto the built-in defaults and validate the result.

    Raises ``ConfigIOError`` when the file cannot be read, ``ConfigParseError``
    for malformed YAML or mistyped values and ``ConfigValidationError`` when a
    bound is violated. No aggregate is returned on failure.
    """
    path = Path(path)
    try:
        raw_bytes = path.read_bytes()
    except OSError as exc:
        raise ConfigIOError(f"failed to read config file: {path}: {exc}", path=path) from exc

    try:
        document = yaml.safe_load(raw_bytes)
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"failed to parse config file: {path}: {exc}") from exc

    config = default_config()
    ignored = overlay_config(config, document)
    for dotted in ignored:
        logger.debug(
            "ignoring unknown config key",
            extra={"event_action": "config_key_ignored", "file_path": str(path), "payload": {"key": dotted}},
        )

    try:
        validate_config(config)
    except ConfigValidationError as exc:
        logger.error(
            "invalid configuration",
            extra={
                "event_action": "config_load",
                "event_outcome": "failure",
                "file_path": str(path),
                "payload": {"section": exc.section, "rule": exc.rule},
            },
        )
        raise

    logger.info(
        "configuration loaded",
        extra={
            "event_action": "config_load",
            "event_outcome": "success",
            "file_path": str(path),
            "payload": {"environment": config.environment},
        },
    )
    return config


def load_from_environment(
    environ: Mapping[str, str] | None = None,
    prefix: str = DEFAULT_ENV_PREFIX,
) -> Config:
    """Apply ``<PREFIX>_*`` variables onto the built-in defaults.

    ``environ`` defaults to ``os.environ``, read once at call time. Empty
    variables are skipped and numeric values that do not parse leave the
    default in place. The result is not validated.
    """
    source = os.environ if environ is None else environ
    config = default_config()

    for suffix, key in _ENV_STRING_KEYS.items():
        value = source.get(f"{prefix}_{suffix}")
        if value:
            accessor.set_value(config, key, value)

    peers = source.get(f"{prefix}_BOOTSTRAP_PEERS")
    if peers:
        config.network.bootstrap_peers = [item.strip() for item in peers.split(",") if item.strip()]

    for suffix, key in _ENV_INT_KEYS.items():
        name = f"{prefix}_{suffix}"
        value = source.get(name)
        if not value:
            continue
        parsed = _parse_env_int(value)
        if parsed is None:
            logger.debug(
                "ignoring non-numeric environment value",
                extra={"event_action": "config_env_ignored", "payload": {"variable": name}},
            )
            continue
        accessor.set_value(config, key, parsed)

    return config


def _parse_env_int(value: str) -> int | None:
    if not _ENV_INT_RE.fullmatch(value):
        return None
    parsed = int(value)
    if parsed < _INT64_MIN or parsed > _INT64_MAX:
        return None
    return parsed


def save_config(config: Config, path: Path | str) -> Path:
    """Write every field of ``config`` to ``path`` as YAML, replacing the file."""
    path = Path(path)
    try:
        rendered = yaml.safe_dump(config_to_dict(config), sort_keys=False, default_flow_style=False)
    except yaml.YAMLError as exc:
        raise ConfigIOError(f"failed to serialize config: {exc}", path=path) from exc
    try:
        path.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        raise ConfigIOError(f"failed to write config file: {path}: {exc}", path=path) from exc
    logger.info(
        "configuration saved",
        extra={"event_action": "config_save", "event_outcome": "success", "file_path": str(path)},
    )
    return path


def initialize_config(path: Path | str, force: bool = False) -> Path:
    path = Path(path)
    if path.exists() and not force:
        raise FileExistsError(f"config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    return save_config(default_config(), path)
