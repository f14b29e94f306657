"""Date-range and time-of-day filtering of telemetry records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Tuple

from battery_dashboard.telemetry import TimedRecord, TimestampParser


@dataclass(frozen=True)
class Interval:
    """Inclusive ``[start, end]`` range of instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Interval end {self.end} precedes start {self.start}")

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    @property
    def span_days(self) -> int:
        """Whole days between start and end."""
        return (self.end - self.start).days


def interval_from_dates(start_date: date, end_date: Optional[date] = None) -> Interval:
    """Interval covering the selected calendar days.

    A single selected date spans that whole day; a start/end selection runs to
    the end of the end date so the last day is fully included.
    """
    last = end_date or start_date
    if last < start_date:
        start_date, last = last, start_date
    return Interval(
        start=datetime.combine(start_date, time.min),
        end=datetime.combine(last, time.max),
    )


def _parse_clock(text: str) -> Tuple[int, int]:
    try:
        hours, minutes = (int(part) for part in text.strip().split(":"))
    except ValueError as exc:
        raise ValueError(f"Expected HH:MM, got {text!r}") from exc
    return hours, minutes


@dataclass(frozen=True)
class TimeOfDayBound:
    """Inclusive time-of-day window applied to every day independently.

    Windows crossing midnight (``22:00``-``02:00``) are not supported.
    """

    start_hour: int = 0
    start_minute: int = 0
    end_hour: int = 23
    end_minute: int = 59

    def __post_init__(self) -> None:
        for hour, minute in (self.start, self.end):
            if not (0 <= hour <= 23 and 0 <= minute <= 59):
                raise ValueError(f"Invalid time of day {hour:02d}:{minute:02d}")
        if self.start > self.end:
            raise ValueError("Time-of-day bounds crossing midnight are not supported")

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeOfDayBound":
        start_hour, start_minute = _parse_clock(start)
        end_hour, end_minute = _parse_clock(end)
        return cls(start_hour, start_minute, end_hour, end_minute)

    @property
    def start(self) -> Tuple[int, int]:
        return self.start_hour, self.start_minute

    @property
    def end(self) -> Tuple[int, int]:
        return self.end_hour, self.end_minute

    def contains(self, instant: datetime) -> bool:
        # Seconds are ignored: 23:59:30 is inside a bound ending at 23:59.
        return self.start <= (instant.hour, instant.minute) <= self.end


def filter_records(
    records: Iterable[TimedRecord],
    interval: Optional[Interval] = None,
    time_of_day: Optional[TimeOfDayBound] = None,
    parser: Optional[TimestampParser] = None,
) -> List[TimedRecord]:
    """Return the records inside ``interval`` and ``time_of_day``, in input order.

    Records whose timestamp cannot be parsed are dropped whenever a filter is
    active. Without any filter the input is returned as a list, unparsed.
    """
    if interval is None and time_of_day is None:
        return list(records)
    parser = parser or TimestampParser()
    kept: List[TimedRecord] = []
    for record in records:
        instant = parser.parse_or_none(record.time)
        if instant is None:
            continue
        if interval is not None and not interval.contains(instant):
            continue
        if time_of_day is not None and not time_of_day.contains(instant):
            continue
        kept.append(record)
    return kept
