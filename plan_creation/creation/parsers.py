"""Input parsing helpers for creation form values.

Malformed input never raises here: parsers return None and callers keep the
last valid value.
"""

import math
import re
from datetime import date, datetime, timezone

HMS_PATTERN = re.compile(r"^([0-9]+):([0-5][0-9]):([0-5][0-9])$")
MMSS_PATTERN = re.compile(r"^([0-9]+):([0-5][0-9])$")
DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_hms_to_seconds(value: str | None) -> int | None:
    """Parse an h:mm:ss duration into seconds."""
    if value is None:
        return None
    match = HMS_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes, seconds = (int(part) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def parse_mmss_to_seconds(value: str | None) -> int | None:
    """Parse an mm:ss pace into seconds."""
    if value is None:
        return None
    match = MMSS_PATTERN.match(value.strip())
    if not match:
        return None
    minutes, seconds = (int(part) for part in match.groups())
    return minutes * 60 + seconds


def parse_distance_km_to_meters(value: str | None) -> int | None:
    """Parse a kilometre string into whole meters. Non-positive distances are rejected."""
    if value is None or not value.strip():
        return None
    try:
        distance_km = float(value)
    except ValueError:
        return None
    if not math.isfinite(distance_km) or distance_km <= 0:
        return None
    return round(distance_km * 1000)


def parse_date_only(value: str | None) -> date | None:
    """Parse a strictly valid YYYY-MM-DD date.

    Both the shape and the calendar date must be valid: "2026-02-30" is rejected.
    Surrounding whitespace is not trimmed.
    """
    if value is None:
        return None
    if not DATE_ONLY_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def to_utc_midnight(value: date) -> datetime:
    """Anchor a date at UTC midnight so day differences ignore DST shifts."""
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def coerce_number(value: object) -> float | None:
    """Coerce an edit value to a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
