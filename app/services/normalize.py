"""Slug generation and date/time canonicalization for events."""

import re
from datetime import datetime, timezone

from dateutil import parser as dtparse

from app.core.errors import InvalidDateError, InvalidTimeError

_SLUG_STRIP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")

TIME_12H_RE = re.compile(r"^(\d{1,2}):(\d{2})\s?(AM|PM)$", re.IGNORECASE | re.ASCII)
TIME_24H_RE = re.compile(r"^(\d{1,2}):(\d{2})$", re.ASCII)

# Two defaults that differ in year, month and day; a field missing from the
# input takes the default, so the two parses disagree
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def generate_slug(title: str) -> str:
    """Turn a title into a URL-safe identifier ("Py Day 2025!" -> "py-day-2025")."""
    slug = title.lower().strip()
    slug = _SLUG_STRIP_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def normalize_date(value: str) -> str:
    """
    Return the date as YYYY-MM-DD. Aware datetimes are converted to UTC first.

    The input must name a year, month and day; nothing is filled in from today.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"Invalid date format: {value}")
    try:
        parsed = dtparse.parse(value.strip(), default=_DEFAULT_A)
        check = dtparse.parse(value.strip(), default=_DEFAULT_B)
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(f"Invalid date format: {value}") from exc
    if parsed.date() != check.date():
        raise InvalidDateError(f"Invalid date format: {value}. A full year, month and day are required")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def normalize_time(value: str) -> str:
    """
    Return the time as zero-padded 12-hour "HH:MM AM|PM".

    Accepts "9:05am", "09:05 PM" (hour 1-12) or 24-hour "13:30" (hour 0-23).
    """
    if not isinstance(value, str):
        raise InvalidTimeError(f"Invalid time format: {value}")
    trimmed = value.strip()

    match = TIME_12H_RE.match(trimmed)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        period = match.group(3).upper()
        if hours < 1 or hours > 12:
            raise InvalidTimeError(
                f"Invalid hour value: {hours}. Hours must be between 1-12 for 12-hour format"
            )
        if minutes > 59:
            raise InvalidTimeError(f"Invalid minute value: {minutes}. Minutes must be between 0-59")
        return f"{hours:02d}:{match.group(2)} {period}"

    match = TIME_24H_RE.match(trimmed)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        if hours > 23:
            raise InvalidTimeError(
                f"Invalid hour value: {hours}. Hours must be between 0-23 for 24-hour format"
            )
        if minutes > 59:
            raise InvalidTimeError(f"Invalid minute value: {minutes}. Minutes must be between 0-59")

        period = "PM" if hours >= 12 else "AM"
        if hours > 12:
            hours -= 12
        if hours == 0:
            hours = 12
        return f"{hours:02d}:{match.group(2)} {period}"

    raise InvalidTimeError(
        f"Invalid time format: {value}. Expected format: HH:MM AM/PM or HH:MM (24-hour)"
    )
