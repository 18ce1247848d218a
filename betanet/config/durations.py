"""Duration text codec for the YAML schema.

Durations are written as compact unit strings (``30s``, ``15m``, ``1h30m``,
``100ms``) and read back from the same notation. Plain YAML numbers are read
as seconds. Precision is one microsecond: finer parts are rounded, and a
non-zero value that would round to nothing is rejected.
"""

from __future__ import annotations

from datetime import timedelta
import re
from typing import Any


_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}
_FORMAT_UNITS = (
    ("h", 3_600_000_000),
    ("m", 60_000_000),
    ("s", 1_000_000),
    ("ms", 1_000),
    ("us", 1),
)


def parse_duration(raw: Any) -> timedelta:
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, bool):
        raise ValueError(f"invalid duration {raw!r}")
    if isinstance(raw, (int, float)):
        return _to_timedelta(raw * 1_000_000, raw)
    if not isinstance(raw, str):
        raise ValueError(f"invalid duration {raw!r}")

    text = raw.strip()
    sign = 1
    if text[:1] in {"+", "-"}:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {raw!r}")

    total = 0.0
    position = 0
    for match in _DURATION_PART_RE.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_MICROSECONDS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration {raw!r}")
    return _to_timedelta(sign * total, raw)


def _to_timedelta(microseconds: float, raw: Any) -> timedelta:
    if microseconds and abs(microseconds) < 1:
        raise ValueError(f"duration {raw!r} is below microsecond precision")
    try:
        return timedelta(microseconds=microseconds)
    except OverflowError as exc:
        raise ValueError(f"invalid duration {raw!r}") from exc


def format_duration(value: timedelta) -> str:
    remaining = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if remaining == 0:
        return "0s"
    prefix = ""
    if remaining < 0:
        prefix = "-"
        remaining = -remaining
    parts: list[str] = []
    for unit, size in _FORMAT_UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{unit}")
    return prefix + "".join(parts)
