"""Immutable view state and the single recompute pass that derives a chart view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from battery_dashboard.telemetry import LabeledRecord, TimedRecord, TimestampParser
from battery_dashboard.view.filtering import Interval, TimeOfDayBound, filter_records, interval_from_dates
from battery_dashboard.view.labels import Granularity, granularity_for, label_records
from battery_dashboard.view.window import (
    DEFAULT_MIN_SIZE,
    DEFAULT_ZOOM_STEP,
    Window,
    WindowView,
    resize,
    scroll,
    view,
    zoom,
)

logger = logging.getLogger(__name__)

VALUE_PADDING = 2.0


@dataclass(frozen=True)
class ViewState:
    """Everything the user has chosen for one chart.

    Instances are never mutated; every event returns a new state.
    """

    interval: Optional[Interval] = None
    time_of_day: Optional[TimeOfDayBound] = None
    window: Window = field(default_factory=Window)
    visible_metrics: FrozenSet[str] = frozenset()

    @classmethod
    def initial(cls, record_count: int, metrics: Iterable[str] = ()) -> "ViewState":
        """Start out showing every record and every metric."""
        return cls(window=Window(offset=0, size=max(1, record_count)), visible_metrics=frozenset(metrics))


@dataclass(frozen=True)
class DerivedView:
    """Result of one recompute pass."""

    records: Tuple[LabeledRecord, ...]
    window: WindowView
    granularity: Granularity
    parse_failures: int = 0
    value_bounds: Optional[Tuple[float, float]] = None

    @property
    def visible(self) -> Sequence[LabeledRecord]:
        return self.window.slice(self.records)

    @property
    def is_empty(self) -> bool:
        return len(self.window) == 0


# ---------------------------------------------------------------------------
# Events


def select_dates(state: ViewState, start: Optional[date], end: Optional[date] = None) -> ViewState:
    """Apply a calendar selection; ``start=None`` clears the date filter."""
    interval = interval_from_dates(start, end) if start is not None else None
    return replace(state, interval=interval)


def clear_dates(state: ViewState) -> ViewState:
    return select_dates(state, None)


def set_time_of_day(state: ViewState, bound: Optional[TimeOfDayBound]) -> ViewState:
    return replace(state, time_of_day=bound)


def zoom_in(
    state: ViewState,
    filtered_length: int,
    step: int = DEFAULT_ZOOM_STEP,
    min_size: int = DEFAULT_MIN_SIZE,
) -> ViewState:
    return replace(state, window=zoom(state.window, -abs(step), filtered_length, min_size))


def zoom_out(
    state: ViewState,
    filtered_length: int,
    step: int = DEFAULT_ZOOM_STEP,
    min_size: int = DEFAULT_MIN_SIZE,
) -> ViewState:
    return replace(state, window=zoom(state.window, abs(step), filtered_length, min_size))


def set_zoom(state: ViewState, size: int, filtered_length: int, min_size: int = DEFAULT_MIN_SIZE) -> ViewState:
    return replace(state, window=resize(state.window, size, filtered_length, min_size))


def scroll_to(state: ViewState, offset: int, filtered_length: int) -> ViewState:
    return replace(state, window=scroll(state.window, offset, filtered_length))


def toggle_metric(state: ViewState, metric: str) -> ViewState:
    metrics = set(state.visible_metrics)
    if metric in metrics:
        metrics.remove(metric)
    else:
        metrics.add(metric)
    return replace(state, visible_metrics=frozenset(metrics))


# ---------------------------------------------------------------------------
# Derivation


def value_bounds(
    records: Iterable[LabeledRecord],
    metrics: Iterable[str],
    padding: float = VALUE_PADDING,
) -> Optional[Tuple[float, float]]:
    """Y-axis range over ``metrics`` with ``padding`` on both sides; ``None`` without values."""
    metric_list = list(metrics)
    values: List[float] = []
    for rec in records:
        for metric in metric_list:
            value = rec.value(metric)
            if value is not None and value == value:
                values.append(value)
    if not values:
        return None
    return min(values) - padding, max(values) + padding


def recompute(
    raw_records: Sequence[TimedRecord],
    state: ViewState,
    parser: Optional[TimestampParser] = None,
) -> DerivedView:
    """Filter, label and window ``raw_records`` for ``state`` in one pass."""
    parser = parser or TimestampParser()
    failures_before = parser.failure_count
    filtered = filter_records(raw_records, state.interval, state.time_of_day, parser=parser)
    labelled = tuple(label_records(filtered, state.interval, parser=parser))
    resolved = view(len(labelled), state.window.offset, state.window.size)
    visible = resolved.slice(labelled)
    bounds = value_bounds(visible, sorted(state.visible_metrics))
    failures = parser.failure_count - failures_before
    logger.debug(
        "Recomputed view: %d/%d records kept, showing [%d, %d), %d parse failures",
        len(labelled),
        len(raw_records),
        resolved.start,
        resolved.stop,
        failures,
    )
    return DerivedView(
        records=labelled,
        window=resolved,
        granularity=granularity_for(state.interval),
        parse_failures=failures,
        value_bounds=bounds,
    )
