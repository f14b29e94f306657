#!/usr/bin/env python3
"""Launch the battery dashboard against the telemetry table (or generated data)."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from typing import Optional

from battery_dashboard.gui.main_window import run_gui
from battery_dashboard.gui.mock import generate_fallback_snapshot
from battery_dashboard.gui.model import DashboardSnapshot, DataSource
from battery_dashboard.io import (
    DynamoTableClient,
    SettingWriter,
    StoreError,
    fetch_records,
    load_dashboard_settings,
)

logger = logging.getLogger("battery_dashboard")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the dashboard YAML settings (default: config/dashboard.yml).",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Refresh interval in milliseconds (default: chart.refresh_interval_ms).",
    )
    parser.add_argument(
        "--fallback",
        action="store_true",
        help="Never contact the telemetry table; show generated data instead.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_dashboard_settings(args.config)
    chart = settings.chart

    client: Optional[DynamoTableClient] = None
    if not args.fallback:
        try:
            client = DynamoTableClient.from_settings(settings.store)
        except StoreError as exc:
            logger.error("Telemetry table unavailable, using generated data: %s", exc)

    def provider() -> DashboardSnapshot:
        if client is None:
            return generate_fallback_snapshot(chart.fallback_points, chart.prediction_points)
        try:
            records = fetch_records(client, settings.store.field_map)
        except StoreError as exc:
            logger.error("Error fetching telemetry, falling back to generated data", exc_info=True)
            return generate_fallback_snapshot(
                chart.fallback_points,
                chart.prediction_points,
                message=f"Telemetry table unavailable: {exc}",
            )
        return DashboardSnapshot(records=records, source=DataSource.STORE, fetched_at=datetime.now())

    writer = SettingWriter.from_settings(settings.store)
    run_gui(
        provider,
        setting_writer=writer,
        chart_settings=chart,
        refresh_interval_ms=args.interval,
        settings_path=args.config,
    )


if __name__ == "__main__":
    main()
