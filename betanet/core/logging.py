"""Structured ECS-style JSON logging."""

from __future__ import annotations

from datetime import UTC, datetime
import json
import logging
from pathlib import Path


ROOT_LOGGER_NAME = "betanet"
VALID_LOG_SINKS = {"stdout", "file"}
# Config log levels use "warn"; stdlib logging spells it "WARNING".
_LEVEL_NAMES = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}


def _strip_empty(value: object) -> object | None:
    if isinstance(value, dict):
        cleaned = {key: _strip_empty(item) for key, item in value.items()}
        return {key: item for key, item in cleaned.items() if item is not None} or None
    if isinstance(value, list):
        cleaned_list = [_strip_empty(item) for item in value]
        return [item for item in cleaned_list if item is not None] or None
    if value in ("", None):
        return None
    return value


def stdlib_level(level: str) -> str:
    normalized = level.strip().lower()
    if normalized not in _LEVEL_NAMES:
        raise ValueError(f"invalid log level '{level}'")
    return _LEVEL_NAMES[normalized]


class ECSJsonFormatter(logging.Formatter):
    def __init__(self, service_name: str = ROOT_LOGGER_NAME) -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat(timespec="microseconds")
        payload: dict[str, object] = {
            "@timestamp": timestamp,
            "message": record.getMessage(),
            "log": {
                "level": record.levelname.lower(),
                "logger": record.name,
            },
            "service": {
                "name": getattr(record, "service_name", self.service_name),
            },
            "event": {
                "kind": "event",
                "category": getattr(record, "event_category", "configuration"),
                "action": getattr(record, "event_action", None),
                "outcome": getattr(record, "event_outcome", None),
            },
            "file": {
                "path": getattr(record, "file_path", None),
            },
            "betanet": {
                "payload": getattr(record, "payload", None),
            },
        }
        if record.exc_info:
            payload["error"] = {"message": self.formatException(record.exc_info)}
        cleaned = _strip_empty(payload) or {}
        return json.dumps(cleaned, separators=(",", ":"), default=str)


def _sink_handler(sink: str, file_path: str | None, formatter: logging.Formatter) -> logging.Handler:
    if sink == "file":
        log_file = Path(file_path or "logs/betanet.log")
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: str = "info",
    *,
    sink: str = "stdout",
    file_path: str | None = None,
    service_name: str = ROOT_LOGGER_NAME,
    force: bool = False,
) -> None:
    if sink not in VALID_LOG_SINKS:
        raise ValueError(f"invalid log sink '{sink}'")
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if getattr(root, "_betanet_configured", False) and not force:
        return

    formatter = ECSJsonFormatter(service_name=service_name)
    root.setLevel(stdlib_level(level))
    for existing in list(root.handlers):
        existing.close()
    root.handlers.clear()
    root.addHandler(_sink_handler(sink, file_path, formatter))
    root.propagate = False
    setattr(root, "_betanet_configured", True)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``betanet`` hierarchy.

    Handlers are left to ``configure_logging``; until it runs, records follow
    the stdlib defaults of the process.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
