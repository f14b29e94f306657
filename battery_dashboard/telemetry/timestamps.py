"""Timestamp parsing for the two textual formats written by the battery table."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = {
    "Jan": "01",
    "Feb": "02",
    "Mar": "03",
    "Apr": "04",
    "May": "05",
    "Jun": "06",
    "Jul": "07",
    "Aug": "08",
    "Sep": "09",
    "Oct": "10",
    "Nov": "11",
    "Dec": "12",
}

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTH_NAMES = {int(number): name for name, number in MONTH_ABBREVIATIONS.items()}

_ISO_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")
_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})$")


class ParseError(ValueError):
    """Raised when a timestamp matches none of the supported formats."""


class TimestampFormat(Protocol):
    """One textual timestamp layout."""

    name: str

    def parse(self, raw: str) -> Optional[datetime]:
        """Return the instant, or ``None`` when ``raw`` is not in this format."""
        ...


def _normalise(value: datetime) -> datetime:
    # Offset-aware values are compared against naive local-day selections, so fold them to local time.
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class IsoTimestampFormat:
    """``YYYY-MM-DDTHH:mm:ss`` with optional fraction and offset."""

    name = "iso"

    def parse(self, raw: str) -> Optional[datetime]:
        if not _ISO_PATTERN.match(raw):
            return None
        try:
            return _normalise(datetime.fromisoformat(raw))
        except ValueError:
            return None


class CalendarTextTimestampFormat:
    """``Wed Jan 03 14:05:00 2024``, optionally with a zone token before the year."""

    name = "calendar-text"

    def parse(self, raw: str) -> Optional[datetime]:
        parts = raw.split()
        if len(parts) not in (5, 6):
            return None
        month = MONTH_ABBREVIATIONS.get(parts[1])
        day, clock, year = parts[2], parts[3], parts[-1]
        if month is None or not day.isdigit() or not year.isdigit():
            return None
        match = _CLOCK_PATTERN.match(clock)
        if match is None:
            return None
        hour, minute, second = match.groups()
        # The zone token (``GMT``, ``UTC``...) is not interpreted.
        iso = f"{year}-{month}-{day.zfill(2)}T{hour.zfill(2)}:{minute}:{second}"
        try:
            return datetime.fromisoformat(iso)
        except ValueError:
            return None


DEFAULT_FORMATS: Tuple[TimestampFormat, ...] = (
    IsoTimestampFormat(),
    CalendarTextTimestampFormat(),
)


class TimestampParser:
    """Tries each known format in order; the first match wins.

    ``parse`` raises :class:`ParseError`. ``parse_or_none`` is the recovering
    variant used by the view pipeline: it logs the failure, bumps
    ``failure_count`` and returns ``None`` so the remaining records still render.
    """

    def __init__(self, formats: Optional[Iterable[TimestampFormat]] = None) -> None:
        self.formats: Tuple[TimestampFormat, ...] = tuple(formats) if formats is not None else DEFAULT_FORMATS
        self.failure_count = 0

    def parse(self, raw: str) -> datetime:
        if isinstance(raw, str):
            text = raw.strip()
            for fmt in self.formats:
                value = fmt.parse(text)
                if value is not None:
                    return value
        tried = ", ".join(fmt.name for fmt in self.formats)
        raise ParseError(f"Unrecognised timestamp: {raw!r} (tried {tried})")

    def parse_or_none(self, raw: str) -> Optional[datetime]:
        try:
            return self.parse(raw)
        except ParseError as exc:
            self.failure_count += 1
            logger.warning("Skipping timestamp: %s", exc)
            return None


def parse_timestamp(raw: str) -> datetime:
    """Parse ``raw`` with the default formats."""
    return TimestampParser().parse(raw)


def format_calendar_text(instant: datetime, zone: str = "UTC") -> str:
    """Render ``instant`` as ``Wed Jan 03 14:05:00 UTC 2024`` with English names whatever the locale."""
    month = _MONTH_NAMES[instant.month]
    weekday = WEEKDAY_ABBREVIATIONS[instant.weekday()]
    return f"{weekday} {month} {instant.day:02d} {instant:%H:%M:%S} {zone} {instant.year}"
