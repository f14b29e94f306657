"""X-axis labels whose granularity follows the selected date span."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional

from battery_dashboard.telemetry import LabeledRecord, TimedRecord, TimestampParser
from battery_dashboard.view.filtering import Interval

TIME_SEPARATOR = ":"


class Granularity(Enum):
    """Label resolution, carrying its ``strftime`` pattern."""

    MINUTE = "%H:%M"
    DAY = "%d"
    MONTH = "%b"


def granularity_for(interval: Optional[Interval]) -> Granularity:
    if interval is None:
        return Granularity.MINUTE
    span = interval.span_days
    if span <= 7:
        return Granularity.MINUTE
    if span <= 31:
        return Granularity.DAY
    return Granularity.MONTH


def label_records(
    records: Iterable[TimedRecord],
    interval: Optional[Interval] = None,
    parser: Optional[TimestampParser] = None,
) -> List[LabeledRecord]:
    """Attach a ``display_time`` to every record.

    Without an active interval, only timestamps carrying a clock component are
    reformatted; anything else is shown as stored. A record whose timestamp
    fails to parse is labelled with its raw string.
    """
    parser = parser or TimestampParser()
    pattern = granularity_for(interval).value
    labelled: List[LabeledRecord] = []
    for record in records:
        label = record.time
        if interval is not None or TIME_SEPARATOR in record.time:
            instant = parser.parse_or_none(record.time)
            if instant is not None:
                label = instant.strftime(pattern)
        labelled.append(LabeledRecord(record=record, display_time=label))
    return labelled
