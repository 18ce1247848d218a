import json
import logging

import pytest

from pathlib import Path

from betanet.config.loader import load_config, load_from_environment, save_config
from betanet.config.schema import default_config
from betanet.core.logging import ROOT_LOGGER_NAME, configure_logging, get_logger, stdlib_level


@pytest.fixture
def log_file(tmp_path: Path):
    path = tmp_path / "betanet.log"
    yield path
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    if hasattr(root, "_betanet_configured"):
        delattr(root, "_betanet_configured")


def _records(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", "DEBUG"), ("info", "INFO"), ("warn", "WARNING"), ("error", "ERROR"), ("INFO", "INFO")],
)
def test_stdlib_level_maps_config_levels(level: str, expected: str) -> None:
    assert stdlib_level(level) == expected


def test_stdlib_level_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="invalid log level"):
        stdlib_level("verbose")


def test_configure_logging_rejects_unknown_sink() -> None:
    with pytest.raises(ValueError, match="invalid log sink"):
        configure_logging("info", sink="syslog", force=True)


def test_get_logger_nests_under_root() -> None:
    assert get_logger("config").name == "betanet.config"
    assert get_logger("betanet.config.loader").name == "betanet.config.loader"


def test_load_and_save_emit_ecs_records(tmp_path: Path, log_file: Path) -> None:
    configure_logging("info", sink="file", file_path=str(log_file), force=True)
    path = save_config(default_config(), tmp_path / "betanet.yml")
    load_config(path)

    records = _records(log_file)
    actions = [(record["event"]["action"], record["event"]["outcome"]) for record in records]
    assert ("config_save", "success") in actions
    assert ("config_load", "success") in actions
    loaded = next(record for record in records if record["event"]["action"] == "config_load")
    assert loaded["@timestamp"]
    assert loaded["service"]["name"] == "betanet"
    assert loaded["event"]["category"] == "configuration"
    assert loaded["file"]["path"] == str(path)
    assert loaded["betanet"]["payload"]["environment"] == "development"


def test_ignored_environment_value_logged_at_debug(log_file: Path) -> None:
    configure_logging("debug", sink="file", file_path=str(log_file), force=True)
    load_from_environment({"BETANET_MAX_PEERS": "notanumber"})

    records = _records(log_file)
    assert records[-1]["event"]["action"] == "config_env_ignored"
    assert records[-1]["log"]["level"] == "debug"
    assert records[-1]["betanet"]["payload"]["variable"] == "BETANET_MAX_PEERS"


def test_warn_level_suppresses_info_records(tmp_path: Path, log_file: Path) -> None:
    configure_logging("warn", sink="file", file_path=str(log_file), force=True)
    save_config(default_config(), tmp_path / "betanet.yml")
    assert not log_file.read_text(encoding="utf-8").strip()
