"""Data models shared between the GUI and the data layer."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

from battery_dashboard.telemetry import TimedRecord

logger = logging.getLogger(__name__)


class DataSource(Enum):
    """Where the records on screen came from."""

    STORE = "store"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class MetricSpec:
    """How one metric is drawn and labelled."""

    key: str
    label: str
    color: str
    predicted: bool = False
    axis: str = "left"


BATTERY_METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec("soc", "Actual SOC (%)", "#60A5FA"),
    MetricSpec("soh", "Actual SOH (%)", "#34D399"),
    MetricSpec("socPredicted", "Predicted SOC (%)", "#A5C8FA", predicted=True),
    MetricSpec("sohPredicted", "Predicted SOH (%)", "#8DE3B0", predicted=True),
)

RAW_METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec("packSOC", "Pack SOC (%)", "#60A5FA"),
    MetricSpec("packVoltage", "Pack Voltage (V)", "#DC3F3F", axis="right"),
)


def format_percentage(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "N/A"


@dataclass(slots=True)
class MetricsSummary:
    """Headline values for the state-of-charge card."""

    soc: Optional[float] = None
    soc_time: str = ""
    soc_predicted: Optional[float] = None
    predicted_time: str = ""

    def soc_text(self) -> str:
        return f"{format_percentage(self.soc)}%"

    def predicted_text(self) -> str:
        return f"Predicted: {format_percentage(self.soc_predicted)}%"

    def times_text(self) -> str:
        """Timestamps the two headline values were read at, blank when unknown."""
        parts = []
        if self.soc_time:
            parts.append(f"Measured: {self.soc_time}")
        if self.predicted_time:
            parts.append(f"Predicted for: {self.predicted_time}")
        return "\n".join(parts)


def summarize(records: Sequence[TimedRecord]) -> MetricsSummary:
    """Latest actual SOC is the first record carrying one; the prediction comes from the last record."""
    summary = MetricsSummary()
    actual = next((rec for rec in records if rec.value("soc") is not None), None)
    if actual is not None:
        summary.soc = actual.value("soc")
        summary.soc_time = actual.time
    if records:
        last = records[-1]
        summary.soc_predicted = last.value("socPredicted")
        summary.predicted_time = last.time
    return summary


@dataclass(slots=True)
class DashboardSnapshot:
    """One fetch worth of data, ready for presentation."""

    records: List[TimedRecord] = field(default_factory=list)
    raw_records: List[TimedRecord] = field(default_factory=list)
    source: DataSource = DataSource.STORE
    fetched_at: Optional[datetime] = None
    message: Optional[str] = None


class FetchGeneration:
    """Tracks which fetch is current so that only the newest result is applied.

    ``begin`` hands out a token for a new request, superseding any request
    still in flight; ``accept`` tells whether a finished request may update
    the view.
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    def accept(self, token: int) -> bool:
        return token == self._latest


class SupersedingFetcher:
    """Runs ``provider`` on a single worker thread, at most one request waiting.

    A new request cancels the one still waiting to start, so a slow table never
    builds up a backlog. A request already running cannot be stopped; its result
    is handed to ``on_result`` with its token and the caller drops it through
    :attr:`generation`.
    """

    def __init__(
        self,
        provider: Callable[[], Any],
        on_result: Callable[[int, Any], None],
        generation: Optional[FetchGeneration] = None,
    ) -> None:
        self._provider = provider
        self._on_result = on_result
        self.generation = generation or FetchGeneration()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapshot-fetch")
        self._pending: Optional[Future] = None
        self._lock = threading.Lock()

    def request(self) -> int:
        with self._lock:
            if self._pending is not None and self._pending.cancel():
                logger.debug("Cancelled fetch %d before it started", self.generation.latest)
            token = self.generation.begin()
            future = self._executor.submit(self._provider)
            self._pending = future
        future.add_done_callback(lambda done, t=token: self._finish(t, done))
        return token

    def _finish(self, token: int, future: Future) -> None:
        if future.cancelled():
            return
        try:
            result = future.result()
        except Exception:
            logger.error("Snapshot provider failed", exc_info=True)
            return
        self._on_result(token, result)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
