import pytest

from pathlib import Path

from betanet.config.errors import ConfigValidationError
from betanet.config.handle import ConfigHandle, ConfigView
from betanet.config.loader import load_config, save_config
from betanet.config.schema import default_config


def test_view_blocks_assignment() -> None:
    view = ConfigView(default_config())
    with pytest.raises(AttributeError, match="read-only"):
        view.environment = "production"
    with pytest.raises(AttributeError, match="read-only"):
        view.network.max_peers = 1
    with pytest.raises(AttributeError, match="read-only"):
        del view.log_level


def test_view_exposes_fields_and_accessors() -> None:
    config = default_config()
    config.network.bootstrap_peers = ["/ip4/10.0.0.1/tcp/4001"]
    view = ConfigView(config)
    assert view.environment == "development"
    assert view.network.max_peers == 100
    assert view.network.bootstrap_peers == ("/ip4/10.0.0.1/tcp/4001",)
    assert view.get_int("max_peers", 0) == 100
    assert view == config


def test_handle_reload_swaps_whole_aggregate(tmp_path: Path) -> None:
    path = tmp_path / "betanet.yml"
    save_config(default_config(), path)
    handle = ConfigHandle(lambda: load_config(path))
    before = handle.view
    assert before.network.max_peers == 100

    updated = default_config()
    updated.network.max_peers = 300
    updated.storage.data_dir = "/srv/betanet"
    save_config(updated, path)
    after = handle.reload()

    assert after.network.max_peers == 300
    assert handle.view.storage.data_dir == "/srv/betanet"
    assert before.network.max_peers == 100
    assert before.storage.data_dir == "./data"


def test_failed_reload_keeps_previous_aggregate(tmp_path: Path) -> None:
    path = tmp_path / "betanet.yml"
    save_config(default_config(), path)
    handle = ConfigHandle(lambda: load_config(path))

    path.write_text("network:\n  max_peers: 0\n", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        handle.reload()
    assert handle.view.network.max_peers == 100


def test_snapshot_is_detached() -> None:
    handle = ConfigHandle(default_config)
    snapshot = handle.snapshot()
    snapshot.network.max_peers = 1
    assert handle.view.network.max_peers == 100


def test_view_does_not_expose_wrapped_aggregate() -> None:
    config = default_config()
    view = ConfigView(config)
    with pytest.raises(AttributeError):
        view._target
    with pytest.raises(AttributeError, match="read-only"):
        view._ConfigView__target = default_config()
    assert view.network.max_peers == 100
    assert config.network.max_peers == 100
