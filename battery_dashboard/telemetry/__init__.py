"""Telemetry records and timestamp parsing."""

from .records import LabeledRecord, TimedRecord, to_dict_of_lists
from .timestamps import (
    DEFAULT_FORMATS,
    MONTH_ABBREVIATIONS,
    WEEKDAY_ABBREVIATIONS,
    CalendarTextTimestampFormat,
    IsoTimestampFormat,
    ParseError,
    TimestampFormat,
    TimestampParser,
    format_calendar_text,
    parse_timestamp,
)

__all__ = [
    "TimedRecord",
    "LabeledRecord",
    "to_dict_of_lists",
    "DEFAULT_FORMATS",
    "MONTH_ABBREVIATIONS",
    "WEEKDAY_ABBREVIATIONS",
    "CalendarTextTimestampFormat",
    "IsoTimestampFormat",
    "ParseError",
    "TimestampFormat",
    "TimestampParser",
    "format_calendar_text",
    "parse_timestamp",
]
