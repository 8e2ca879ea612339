"""Texto de duraciones (gramática de Go), horas del día y marcas de tiempo."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta

from pump_codec.errors import MalformedTextError

JSON_TIME_LAYOUT = "%Y-%m-%d %H:%M:%S"

_MICROSECOND = timedelta(microseconds=1)
_NS_PER_SECOND = 1_000_000_000
_MAX_DURATION_NS = 2**63 - 1

# Nanoseconds per unit suffix; both micro signs are accepted on input.
_UNITS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": _NS_PER_SECOND,
    "m": 60 * _NS_PER_SECOND,
    "h": 3600 * _NS_PER_SECOND,
}

_DURATION_PART_RE = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")
_TIME_OF_DAY_RE = re.compile(r"(\d{1,2}):(\d{2})")


def _fmt_frac(v: int, prec: int) -> tuple[str, int]:
    """Split off ``prec`` decimal digits of ``v``, trimming trailing zeros."""
    digits: list[str] = []
    printed = False
    for _ in range(prec):
        digit = v % 10
        printed = printed or digit != 0
        if printed:
            digits.append(str(digit))
        v //= 10
    if not printed:
        return "", v
    return "." + "".join(reversed(digits)), v


def format_duration(value: timedelta) -> str:
    """Render a timedelta exactly as Go's ``time.Duration.String`` does.

    Examples: ``0s``, ``45s``, ``1h30m0s``, ``1m0.5s``, ``1.5ms``.
    """
    ns = (value // _MICROSECOND) * 1000
    neg = ns < 0
    u = -ns if neg else ns

    if u < _NS_PER_SECOND:
        if u == 0:
            return "0s"
        if u < 1_000:
            prec, unit = 0, "ns"
        elif u < 1_000_000:
            prec, unit = 3, "µs"
        else:
            prec, unit = 6, "ms"
        frac, u = _fmt_frac(u, prec)
        text = f"{u}{frac}{unit}"
    else:
        frac, u = _fmt_frac(u, 9)
        text = f"{u % 60}{frac}s"
        u //= 60
        if u > 0:
            text = f"{u % 60}m{text}"
            u //= 60
            if u > 0:
                text = f"{u}h{text}"

    return "-" + text if neg else text


def parse_duration(text: str) -> timedelta:
    """Parse Go duration text such as ``1h30m0s``, ``-1.5h`` or ``250ms``.

    Precision below one microsecond is truncated.

    Raises:
        MalformedTextError: If the text does not follow the duration grammar.
    """
    if not isinstance(text, str):
        raise MalformedTextError(f"invalid duration {text!r}")
    s = text
    neg = False
    if s[:1] in ("-", "+"):
        neg = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise MalformedTextError(f"invalid duration {text!r}")

    total = 0
    pos = 0
    while pos < len(s):
        match = _DURATION_PART_RE.match(s, pos)
        # The pattern always matches (possibly empty); guard against no progress.
        if match is None or match.end() == pos:
            raise MalformedTextError(f"invalid duration {text!r}")
        whole, frac, unit = match.groups()
        if not whole and not frac:
            raise MalformedTextError(f"invalid duration {text!r}")
        if not unit:
            raise MalformedTextError(f"missing unit in duration {text!r}")
        scale = _UNITS.get(unit)
        if scale is None:
            raise MalformedTextError(f"unknown unit {unit!r} in duration {text!r}")
        # 20+ integer digits always overflow int64 nanoseconds.
        if len(whole) > 19:
            raise MalformedTextError(f"invalid duration {text!r}")
        part = int(whole or "0") * scale
        if frac:
            # Digits past 18 add well under a nanosecond.
            frac = frac[:18]
            part += int(frac) * scale // 10 ** len(frac)
        total += part
        if total > _MAX_DURATION_NS:
            raise MalformedTextError(f"invalid duration {text!r}")
        pos = match.end()

    result = timedelta(microseconds=total // 1000)
    return -result if neg else result


def format_time_of_day(value: time) -> str:
    """Render a schedule start time as ``HH:MM``."""
    return f"{value.hour:02d}:{value.minute:02d}"


def parse_time_of_day(text: str) -> time:
    """Parse ``HH:MM`` (24-hour, no seconds, no zone).

    Raises:
        MalformedTextError: If the text is not a valid time of day.
    """
    match = _TIME_OF_DAY_RE.fullmatch(text) if isinstance(text, str) else None
    if match is None:
        raise MalformedTextError(f"invalid time of day {text!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise MalformedTextError(f"invalid time of day {text!r}")
    return time(hour, minute)


def format_timestamp(value: datetime) -> str:
    """Render a pump timestamp in its own wall-clock time."""
    # strftime does not pad years below 1000.
    return f"{value.year:04d}-" + value.strftime("%m-%d %H:%M:%S")


def parse_timestamp(text: str) -> datetime:
    """Parse a timestamp written by :func:`format_timestamp`.

    Raises:
        MalformedTextError: If the text does not match the layout.
    """
    if not isinstance(text, str):
        raise MalformedTextError(f"invalid timestamp {text!r}")
    try:
        return datetime.strptime(text, JSON_TIME_LAYOUT)
    except ValueError as exc:
        raise MalformedTextError(f"invalid timestamp {text!r}: {exc}") from exc
