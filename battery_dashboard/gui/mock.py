"""Generated data shown when the telemetry table cannot be reached."""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta
from typing import List, Optional

from battery_dashboard.gui.model import DashboardSnapshot, DataSource
from battery_dashboard.telemetry import TimedRecord, format_calendar_text

ISO_LAYOUT = "%Y-%m-%dT%H:%M:%S"


def generate_fallback_records(
    points: int,
    now: Optional[datetime] = None,
    prediction_points: int = 12,
    rng: Optional[random.Random] = None,
) -> List[TimedRecord]:
    """Hourly SOC history ending at ``now`` followed by ``prediction_points`` forecast-only rows."""
    now = (now or datetime.now()).replace(microsecond=0)
    rng = rng or random.Random()
    records: List[TimedRecord] = []
    for idx in range(points):
        point_time = now - timedelta(hours=points - idx - 1)
        soc = float(math.floor(rng.uniform(60, 100)))
        records.append(
            TimedRecord(
                time=point_time.strftime(ISO_LAYOUT),
                values={"soc": soc, "socPredicted": soc + rng.uniform(-3, 3)},
            )
        )
    for idx in range(prediction_points):
        point_time = now + timedelta(hours=idx + 1)
        records.append(
            TimedRecord(
                time=point_time.strftime(ISO_LAYOUT),
                values={"soc": None, "socPredicted": float(math.floor(rng.uniform(50, 100)))},
            )
        )
    return records


def generate_fallback_raw_records(
    points: int,
    now: Optional[datetime] = None,
    interval_minutes: int = 5,
) -> List[TimedRecord]:
    """Pack SOC/voltage rows stamped in the table's calendar-text layout."""
    now = (now or datetime.now()).replace(microsecond=0)
    records: List[TimedRecord] = []
    for idx in range(points):
        point_time = now - timedelta(minutes=interval_minutes * (points - idx - 1))
        pack_soc = 80.0 + 15.0 * math.sin(idx / 12.0)
        pack_voltage = 48.0 + 2.0 * math.sin(idx / 12.0 + 0.4)
        records.append(
            TimedRecord(
                time=format_calendar_text(point_time),
                values={"packSOC": round(pack_soc, 2), "packVoltage": round(pack_voltage, 3)},
            )
        )
    return records


def generate_fallback_snapshot(
    points: int = 24,
    prediction_points: int = 12,
    message: Optional[str] = None,
) -> DashboardSnapshot:
    """Create a fallback snapshot for demonstration purposes."""
    now = datetime.now()
    return DashboardSnapshot(
        records=generate_fallback_records(points, now=now, prediction_points=prediction_points),
        raw_records=generate_fallback_raw_records(points * 12, now=now),
        source=DataSource.FALLBACK,
        fetched_at=now,
        message=message,
    )
