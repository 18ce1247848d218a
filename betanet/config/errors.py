"""Error taxonomy for configuration loading."""

from __future__ import annotations

from pathlib import Path


class ConfigError(Exception):
    """Base class for configuration failures."""


class ConfigIOError(ConfigError, OSError):
    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ConfigParseError(ConfigError, ValueError):
    pass


class ConfigValidationError(ConfigError, ValueError):
    """A field violates its bound or enum.

    ``section`` names the config section (``None`` for top-level fields) and
    ``rule`` holds the unwrapped rule text, e.g. ``max_peers too high (max 1000)``.
    """

    def __init__(self, rule: str, section: str | None = None) -> None:
        self.rule = rule
        self.section = section
        message = f"{section} config: {rule}" if section else rule
        super().__init__(message)

    def in_section(self, section: str) -> ConfigValidationError:
        return ConfigValidationError(self.rule, section=section)
