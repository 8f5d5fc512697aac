"""Lenient timestamp parsing for model-generated evidence."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime

LOGGER = logging.getLogger(__name__)

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?P<frac>\.\d+)?"
    r"(?P<zone>[Zz]|[+-]\d{2}:\d{2})"
)

# strptime alone accepts single-digit fields
_DATETIME_T = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_DATETIME_SPACE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")
_TIME = re.compile(r"\d{2}:\d{2}:\d{2}")


def _parse_rfc3339(value: str, *, fractional: bool) -> datetime:
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"not RFC 3339: {value!r}")
    frac = match.group("frac")
    if frac is not None and not fractional:
        raise ValueError("fractional seconds not allowed")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    micros = int(frac[1:7].ljust(6, "0")) if frac else 0
    zone = match.group("zone")
    if zone in ("Z", "z"):
        tz = UTC
    else:
        tz = datetime.strptime(zone.replace(":", ""), "%z").tzinfo
    return datetime(year, month, day, hour, minute, second, micros, tzinfo=tz)


def _parse_naive(layout: str, shape: re.Pattern[str]) -> Callable[[str], datetime]:
    def parse(value: str) -> datetime:
        if shape.fullmatch(value) is None:
            raise ValueError(f"not {layout}: {value!r}")
        return datetime.strptime(value, layout).replace(tzinfo=UTC)

    return parse


def _parse_time_of_day(value: str) -> datetime:
    if _TIME.fullmatch(value) is None:
        raise ValueError(f"not a time of day: {value!r}")
    parsed = datetime.strptime(value, "%H:%M:%S").time()
    # year 0 is not representable; anchor bare times to the earliest date
    return datetime.combine(datetime.min.date(), parsed, tzinfo=UTC)


# Order matters: the first layout that accepts the string wins.
LAYOUTS: tuple[tuple[str, Callable[[str], datetime]], ...] = (
    ("rfc3339", lambda v: _parse_rfc3339(v, fractional=False)),
    ("rfc3339nano", lambda v: _parse_rfc3339(v, fractional=True)),
    ("datetime", _parse_naive("%Y-%m-%dT%H:%M:%S", _DATETIME_T)),
    ("datetime-space", _parse_naive("%Y-%m-%d %H:%M:%S", _DATETIME_SPACE)),
    ("time", _parse_time_of_day),
)


def normalize_timestamp(
    raw: str, *, now: Callable[[], datetime] = lambda: datetime.now(UTC)
) -> datetime:
    """Return the instant ``raw`` describes, or ``now()`` if no layout fits.

    Never raises; model output is not guaranteed to follow any one format.
    """

    for _name, parse in LAYOUTS:
        try:
            return parse(raw)
        except (ValueError, TypeError):
            continue
    LOGGER.debug("unparseable timestamp %r, using current time", raw)
    return now()


__all__ = ["LAYOUTS", "normalize_timestamp"]
