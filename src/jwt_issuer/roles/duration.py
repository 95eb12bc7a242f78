"""Duration parsing for role defaults and configuration.

Accepts integer seconds, digit strings, :class:`datetime.timedelta`, or
unit-suffixed strings such as ``"90s"``, ``"15m"``, ``"1h30m"`` and
``"720h"`` (units: ``ns``, ``us``/``µs``, ``ms``, ``s``, ``m``, ``h``).
"""
from __future__ import annotations

import datetime
import re

from jwt_issuer.errors import InvalidDurationError

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_FULL = re.compile(r"^(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+$")


def parse_duration(value: int | float | str | datetime.timedelta | None) -> datetime.timedelta:
    """Parse *value* into a non-negative :class:`datetime.timedelta`.

    ``None`` and the empty string mean zero.

    Raises
    ------
    InvalidDurationError
        If *value* cannot be parsed or is negative.
    """
    if value is None:
        return datetime.timedelta(0)
    if isinstance(value, bool):
        raise InvalidDurationError(f"Invalid duration {value!r}")
    if isinstance(value, datetime.timedelta):
        result = value
    elif isinstance(value, (int, float)):
        result = datetime.timedelta(seconds=value)
    elif isinstance(value, str):
        result = _parse_string(value.strip())
    else:
        raise InvalidDurationError(f"Invalid duration {value!r}")

    if result < datetime.timedelta(0):
        raise InvalidDurationError(f"Duration must not be negative, got {value!r}")
    return result


def format_seconds(duration: datetime.timedelta) -> int:
    """Return *duration* as whole seconds."""
    return int(duration.total_seconds())


def _parse_string(text: str) -> datetime.timedelta:
    if not text:
        return datetime.timedelta(0)
    if text.lstrip("-").isdigit():
        return datetime.timedelta(seconds=int(text))

    sign = 1
    body = text
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return datetime.timedelta(0)
    if not _FULL.match(body):
        raise InvalidDurationError(f"Invalid duration {text!r}")

    total = sum(float(n) * _UNIT_SECONDS[unit] for n, unit in _COMPONENT.findall(body))
    return datetime.timedelta(seconds=sign * total)
