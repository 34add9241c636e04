"""Helpers for the ``HH:MM`` wall-clock strings and ``YYYY-MM-DD`` dates
that appointments are stored with.

Intervals are half-open, ``[start, end)``: an appointment ending at 09:00 and
one starting at 09:00 do not overlap.
"""
import re
from collections.abc import Iterator
from datetime import date

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MINUTES_PER_DAY = 24 * 60


def is_valid_hhmm(value: str) -> bool:
    return bool(_HHMM_RE.match(value))


def is_valid_iso_date(value: str) -> bool:
    if not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_hhmm(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    match = _HHMM_RE.match(value)
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intervals_intersect(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """True if ``[a_start, a_end)`` and ``[b_start, b_end)`` share any instant."""
    return parse_hhmm(a_start) < parse_hhmm(b_end) and parse_hhmm(b_start) < parse_hhmm(a_end)


def contains_instant(start: str, end: str, instant: str) -> bool:
    """True if ``instant`` falls in ``[start, end)``."""
    return parse_hhmm(start) <= parse_hhmm(instant) < parse_hhmm(end)


def iter_slot_times(day_start: str, day_end: str, slot_minutes: int) -> Iterator[str]:
    """Yield every instant from day_start through day_end (inclusive) in slot_minutes steps.

    Nothing is yielded for an empty window or a non-positive step.
    """
    start = parse_hhmm(day_start)
    end = parse_hhmm(day_end)
    if start >= end or slot_minutes <= 0:
        return
    current = start
    while current <= end:
        yield format_hhmm(current)
        current += slot_minutes
