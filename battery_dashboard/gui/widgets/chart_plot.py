"""Battery chart widget embedded in Qt."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
from PySide6.QtWidgets import QSizePolicy, QVBoxLayout, QWidget
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from battery_dashboard.gui.model import MetricSpec
from battery_dashboard.telemetry import to_dict_of_lists
from battery_dashboard.view import DerivedView

MAX_TICK_LABELS = 12
EMPTY_NOTICE = "No data in range"


class ChartPlot(QWidget):
    """Embeds a Matplotlib plot that draws the visible slice of a derived view.

    Metrics with ``axis="right"`` share a secondary y axis and keep Matplotlib's
    autoscaling; the primary axis uses the view's padded value bounds when only
    primary metrics are shown.
    """

    def __init__(self, metrics: Sequence[MetricSpec], ylabel: str = "", parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._metrics = tuple(metrics)
        self._view: Optional[DerivedView] = None
        self._visible: frozenset = frozenset(spec.key for spec in self._metrics)

        self._figure = Figure(figsize=(8, 4))
        self._canvas = FigureCanvas(self._figure)
        self._canvas.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        layout = QVBoxLayout()
        layout.addWidget(self._canvas)
        self.setLayout(layout)

        self._ax = self._figure.add_subplot(111)
        self._ax_right = self._ax.twinx() if any(spec.axis == "right" for spec in self._metrics) else None
        self._ylabel = ylabel
        self._figure.tight_layout()

    def set_view(self, view: DerivedView, visible_metrics: Iterable[str]) -> None:
        self._view = view
        self._visible = frozenset(visible_metrics)
        self.refresh()

    def refresh(self) -> None:
        ax = self._ax
        ax.clear()
        if self._ax_right is not None:
            self._ax_right.clear()
        ax.grid(True, linestyle="--", linewidth=0.3)
        if self._ylabel:
            ax.set_ylabel(self._ylabel)

        if self._view is None or self._view.is_empty:
            ax.text(0.5, 0.5, EMPTY_NOTICE, ha="center", va="center", transform=ax.transAxes)
            self._canvas.draw_idle()
            return

        shown = [spec for spec in self._metrics if spec.key in self._visible]
        data = to_dict_of_lists(self._view.visible, [spec.key for spec in shown])
        labels = data["display_time"]
        x = np.arange(len(labels))

        for spec in shown:
            y = np.asarray(data[spec.key], dtype=float)
            mask = np.isfinite(y)
            if not mask.any():
                continue
            target = self._ax_right if spec.axis == "right" and self._ax_right is not None else ax
            # Gaps are bridged rather than broken.
            target.plot(
                x[mask],
                y[mask],
                color=spec.color,
                label=spec.label,
                linewidth=1.5 if spec.predicted else 2.0,
                linestyle="--" if spec.predicted else "-",
                marker="o",
                markersize=2,
            )

        step = max(1, len(labels) // MAX_TICK_LABELS)
        ax.set_xticks(x[::step])
        ax.set_xticklabels(labels[::step], rotation=30, ha="right")
        if len(x) > 1:
            ax.set_xlim(x[0], x[-1])

        if self._view.value_bounds is not None and all(spec.axis == "left" for spec in shown):
            y_min, y_max = self._view.value_bounds
            ax.set_ylim(y_min, y_max)

        handles, names = ax.get_legend_handles_labels()
        if self._ax_right is not None:
            right_handles, right_names = self._ax_right.get_legend_handles_labels()
            handles += right_handles
            names += right_names
        if handles:
            ax.legend(handles, names, loc="upper right")
        self._figure.tight_layout()
        self._canvas.draw_idle()
