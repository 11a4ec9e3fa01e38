"""Datetime utilities.

Feeds and article pages publish dates in every format imaginable. Everything
is funnelled through :func:`normalize_date`, which returns an aware UTC
datetime or ``None`` when the value is unknown or implausible, and
:func:`to_iso`, which renders the canonical manifest form.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

from dateutil.parser import parse as parse_date

# Timezone abbreviations for date parsing
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
    "BRT": timezone(timedelta(hours=-3)),
}

PT_MONTHS = {
    "janeiro": 1,
    "fevereiro": 2,
    "março": 3,
    "marco": 3,
    "abril": 4,
    "maio": 5,
    "junho": 6,
    "julho": 7,
    "agosto": 8,
    "setembro": 9,
    "outubro": 10,
    "novembro": 11,
    "dezembro": 12,
}
# "jan", "fev", "mar", ... also show up in bylines
PT_MONTHS.update({name[:3]: number for name, number in list(PT_MONTHS.items())})

MIN_YEAR = 2000
MAX_YEAR_AHEAD = 2

_DEFAULT_A = datetime(1, 1, 1, 0, 0, 0)
_DEFAULT_B = datetime(2, 2, 2, 1, 1, 1)

_ISO_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_PT_NUMERIC = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:[ T,]+(\d{1,2})[:h](\d{2})(?::(\d{2}))?)?$"
)
_PT_LONG = re.compile(
    r"^(\d{1,2})º?\s+de\s+([a-zç]+)\.?\s+de\s+(\d{4})"
    r"(?:\s*(?:,|às|as|-)?\s*(\d{1,2})[:h](\d{2}))?$",
    re.IGNORECASE,
)


def normalize_date(value, now: datetime | None = None) -> datetime | None:
    """Parse a feed or page date into an aware UTC datetime.

    Order of attempts: ISO-8601, RFC-822, Portuguese numeric and long-form
    dates, then a lenient dateutil parse. Dates without a time are placed at
    noon UTC so that timezone conversion never moves them to another day.

    Returns None for empty or unparseable input and for any year outside
    [2000, current year + 2].
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = " ".join(str(value).split())
        if not text:
            return None
        dt = (
            _parse_iso(text)
            or _parse_rfc822(text)
            or _parse_portuguese(text)
            or _parse_lenient(text)
        )
        if dt is None:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)

    current_year = (now or datetime.now(timezone.utc)).year
    if not MIN_YEAR <= dt.year <= current_year + MAX_YEAR_AHEAD:
        return None
    return dt


def to_iso(dt: datetime | None) -> str:
    """Render as YYYY-MM-DDTHH:MM:SSZ so lexical order matches time order."""
    if dt is None:
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _noon(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 12, 0, tzinfo=timezone.utc)


def _parse_iso(text: str) -> datetime | None:
    try:
        if _ISO_DATE_ONLY.match(text):
            d = datetime.strptime(text, "%Y-%m-%d")
            return _noon(d.year, d.month, d.day)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_rfc822(text: str) -> datetime | None:
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


def _parse_portuguese(text: str) -> datetime | None:
    m = _PT_NUMERIC.match(text)
    if m:
        day, month, year, hour, minute, second = m.groups()
        return _build(int(year), int(month), int(day), hour, minute, second)

    m = _PT_LONG.match(text)
    if m:
        day, month_name, year, hour, minute = m.groups()
        month = PT_MONTHS.get(month_name.lower())
        if month is None:
            return None
        return _build(int(year), month, int(day), hour, minute, None)

    return None


def _build(year, month, day, hour, minute, second) -> datetime | None:
    try:
        if hour is None:
            return _noon(year, month, day)
        return datetime(
            year, month, day, int(hour), int(minute), int(second or 0), tzinfo=timezone.utc
        )
    except ValueError:
        return None


def _parse_lenient(text: str) -> datetime | None:
    # Parsed against two different defaults: fields that differ were not in the text
    try:
        first = parse_date(text, default=_DEFAULT_A, tzinfos=TZINFOS)
        second = parse_date(text, default=_DEFAULT_B, tzinfos=TZINFOS)
    except (ValueError, OverflowError):
        return None
    if (first.year, first.month, first.day) != (second.year, second.month, second.day):
        return None
    if first.hour != second.hour:
        return _noon(first.year, first.month, first.day)
    return first
