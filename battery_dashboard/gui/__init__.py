"""Graphical user interface components for the battery dashboard."""

from __future__ import annotations

from .model import (
    BATTERY_METRICS,
    RAW_METRICS,
    DashboardSnapshot,
    DataSource,
    FetchGeneration,
    MetricsSummary,
    MetricSpec,
    SupersedingFetcher,
    format_percentage,
    summarize,
)

__all__ = [
    "BATTERY_METRICS",
    "RAW_METRICS",
    "DashboardSnapshot",
    "DataSource",
    "FetchGeneration",
    "MetricsSummary",
    "MetricSpec",
    "SupersedingFetcher",
    "format_percentage",
    "summarize",
]
