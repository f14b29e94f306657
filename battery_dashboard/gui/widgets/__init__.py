"""Qt widgets used by the dashboard window."""

from .chart_plot import ChartPlot

__all__ = ["ChartPlot"]
