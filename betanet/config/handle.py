"""Read-only access to a loaded configuration with whole-aggregate reloads."""

from __future__ import annotations

from dataclasses import is_dataclass
import threading
from typing import Any, Callable

from betanet.config.schema import Config
from betanet.core.logging import get_logger


logger = get_logger("betanet.config.handle")


class ConfigView:
    """Attribute-level read-only proxy over a config aggregate or section.

    Nested sections come back as views and lists as tuples, so nothing reached
    through a view can mutate the wrapped aggregate.
    """

    __slots__ = ("__target",)

    def __init__(self, target: Any) -> None:
        object.__setattr__(self, "_ConfigView__target", target)

    def __getattr__(self, name: str) -> Any:
        if name == "_ConfigView__target":
            raise AttributeError(name)
        value = getattr(self.__target, name)
        if is_dataclass(value) and not isinstance(value, type):
            return ConfigView(value)
        if isinstance(value, list):
            return tuple(value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"config is read-only; cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"config is read-only; cannot delete '{name}'")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ConfigView):
            return self.__target == other.__target
        return self.__target == other

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigView({self.__target!r})"


class ConfigHandle:
    """Holds the active configuration and swaps it atomically on reload.

    ``loader`` must return a new, validated ``Config`` on each call, e.g.
    ``lambda: load_config(path)``. Readers see either the old or the new
    aggregate, never a mix of the two.
    """

    def __init__(self, loader: Callable[[], Config]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._config = loader()

    @property
    def view(self) -> ConfigView:
        return ConfigView(self._config)

    def snapshot(self) -> Config:
        return self._config.copy()

    def reload(self) -> ConfigView:
        with self._lock:
            try:
                fresh = self._loader()
            except Exception:
                logger.warning(
                    "config reload failed; keeping active configuration",
                    exc_info=True,
                    extra={"event_action": "config_reload", "event_outcome": "failure"},
                )
                raise
            self._config = fresh
        logger.info(
            "configuration reloaded",
            extra={"event_action": "config_reload", "event_outcome": "success"},
        )
        return ConfigView(fresh)
