"""Telemetry rows as read from the battery table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence


@dataclass(frozen=True)
class TimedRecord:
    """Single telemetry row: a raw timestamp plus its metric values."""

    time: str
    values: Mapping[str, Optional[float]] = field(default_factory=dict)

    def value(self, metric: str) -> Optional[float]:
        return self.values.get(metric)


@dataclass(frozen=True)
class LabeledRecord:
    """A record paired with the label shown on the chart's x axis."""

    record: TimedRecord
    display_time: str

    @property
    def time(self) -> str:
        return self.record.time

    def value(self, metric: str) -> Optional[float]:
        return self.record.value(metric)


def to_dict_of_lists(
    records: Iterable[LabeledRecord],
    metrics: Sequence[str],
) -> Dict[str, List]:
    """Column view of ``records`` for plotting; missing values become NaN."""
    columns: Dict[str, List] = {"display_time": []}
    for metric in metrics:
        columns[metric] = []
    for rec in records:
        columns["display_time"].append(rec.display_time)
        for metric in metrics:
            value = rec.value(metric)
            columns[metric].append(value if value is not None else float("nan"))
    return columns
