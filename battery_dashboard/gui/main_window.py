"""Qt-based main window for monitoring battery telemetry."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from PySide6.QtCore import QDate, QObject, Qt, QTime, QTimer, Signal, Slot
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QTimeEdit,
    QVBoxLayout,
    QWidget,
)

from battery_dashboard.gui.model import (
    BATTERY_METRICS,
    RAW_METRICS,
    DashboardSnapshot,
    DataSource,
    MetricSpec,
    SupersedingFetcher,
    summarize,
)
from battery_dashboard.gui.widgets import ChartPlot
from battery_dashboard.io import ChartSettings, SettingsError, StoreError, update_settings_value
from battery_dashboard.telemetry import TimedRecord
from battery_dashboard.view import (
    DerivedView,
    TimeOfDayBound,
    ViewState,
    recompute,
    scroll_to,
    select_dates,
    set_time_of_day,
    set_zoom,
    toggle_metric,
    zoom_in,
    zoom_out,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Layout constants
WINDOW_DEFAULT_SIZE = (1400, 950)
WINDOW_TITLE = "Battery Dashboard"

DATE_DISPLAY_FORMAT = "MMM dd, yyyy"
TIME_DISPLAY_FORMAT = "HH:mm"
ZOOM_STEPS = (10, 30)

BATTERY_CHART_TITLE = "Battery Metrics Over Time"
RAW_CHART_TITLE = "Raw Battery Metrics"


class ChartPane(QGroupBox):
    """One chart with its date/time filters, metric toggles and zoom/scroll controls."""

    zoom_step_changed = Signal(int)

    def __init__(
        self,
        title: str,
        metrics: Sequence[MetricSpec],
        chart_settings: ChartSettings,
        ylabel: str = "",
        with_time_filter: bool = False,
    ) -> None:
        super().__init__(title)
        self._metrics = tuple(metrics)
        self._min_size = chart_settings.min_window_size
        self._records: List[TimedRecord] = []
        self._state = ViewState.initial(0, [spec.key for spec in self._metrics])
        self._view: Optional[DerivedView] = None
        # Until the user zooms, the window grows with the data.
        self._show_all = True

        self.plot = ChartPlot(self._metrics, ylabel=ylabel)

        self.date_check = QCheckBox("Filter by date")
        self.from_edit = QDateEdit(QDate.currentDate())
        self.to_edit = QDateEdit(QDate.currentDate())
        self.range_check = QCheckBox("Until")
        for edit in (self.from_edit, self.to_edit):
            edit.setCalendarPopup(True)
            edit.setDisplayFormat(DATE_DISPLAY_FORMAT)
            edit.setEnabled(False)
        self.range_check.setEnabled(False)

        self.date_check.toggled.connect(self._on_date_filter_toggled)
        self.range_check.toggled.connect(self._on_date_changed)
        self.from_edit.dateChanged.connect(self._on_date_changed)
        self.to_edit.dateChanged.connect(self._on_date_changed)

        filter_row = QHBoxLayout()
        filter_row.addWidget(self.date_check)
        filter_row.addWidget(self.from_edit)
        filter_row.addWidget(self.range_check)
        filter_row.addWidget(self.to_edit)
        filter_row.addStretch()

        self.time_check: Optional[QCheckBox] = None
        self.start_time_edit: Optional[QTimeEdit] = None
        self.end_time_edit: Optional[QTimeEdit] = None
        time_row = None
        if with_time_filter:
            self.time_check = QCheckBox("Filter by time of day")
            self.start_time_edit = QTimeEdit(QTime(0, 0))
            self.end_time_edit = QTimeEdit(QTime(23, 59))
            for edit in (self.start_time_edit, self.end_time_edit):
                edit.setDisplayFormat(TIME_DISPLAY_FORMAT)
                edit.setEnabled(False)
                edit.timeChanged.connect(self._on_time_changed)
            self.time_check.toggled.connect(self._on_time_filter_toggled)
            time_row = QHBoxLayout()
            time_row.addWidget(self.time_check)
            time_row.addWidget(QLabel("Start Time:"))
            time_row.addWidget(self.start_time_edit)
            time_row.addWidget(QLabel("End Time:"))
            time_row.addWidget(self.end_time_edit)
            time_row.addStretch()

        metric_row = QHBoxLayout()
        self.metric_checks: Dict[str, QCheckBox] = {}
        for spec in self._metrics:
            check = QCheckBox(spec.label)
            check.setChecked(True)
            check.toggled.connect(lambda _, key=spec.key: self._apply(toggle_metric(self._state, key)))
            metric_row.addWidget(check)
            self.metric_checks[spec.key] = check
        metric_row.addStretch()

        self.step_combo = QComboBox()
        for step in ZOOM_STEPS:
            self.step_combo.addItem(str(step), step)
        index = self.step_combo.findData(chart_settings.zoom_step)
        if index < 0:
            self.step_combo.addItem(str(chart_settings.zoom_step), chart_settings.zoom_step)
            index = self.step_combo.count() - 1
        self.step_combo.setCurrentIndex(index)
        self.step_combo.currentIndexChanged.connect(
            lambda _: self.zoom_step_changed.emit(int(self.step_combo.currentData()))
        )
        zoom_in_btn = QPushButton("Zoom In")
        zoom_out_btn = QPushButton("Zoom Out")
        show_all_btn = QPushButton("Show All")
        zoom_in_btn.clicked.connect(self._on_zoom_in)
        zoom_out_btn.clicked.connect(self._on_zoom_out)
        show_all_btn.clicked.connect(self._on_show_all)
        metric_row.addWidget(QLabel("Step:"))
        metric_row.addWidget(self.step_combo)
        metric_row.addWidget(zoom_in_btn)
        metric_row.addWidget(zoom_out_btn)
        metric_row.addWidget(show_all_btn)

        self.scroll_slider = QSlider(Qt.Horizontal)
        self.scroll_slider.setRange(0, 0)
        self.scroll_slider.valueChanged.connect(self._on_scroll)

        self.status_label = QLabel()

        layout = QVBoxLayout()
        layout.addLayout(filter_row)
        if time_row is not None:
            layout.addLayout(time_row)
        layout.addLayout(metric_row)
        layout.addWidget(self.plot, stretch=1)
        layout.addWidget(self.scroll_slider)
        layout.addWidget(self.status_label)
        self.setLayout(layout)

    # ------------------------------------------------------------------
    @property
    def state(self) -> ViewState:
        return self._state

    def zoom_step(self) -> int:
        return int(self.step_combo.currentData())

    def filtered_length(self) -> int:
        return len(self._view.records) if self._view is not None else 0

    def set_records(self, records: Sequence[TimedRecord]) -> None:
        self._records = list(records)
        self._apply(self._state)

    def _apply(self, state: ViewState) -> None:
        """Replace the view state and derive everything shown from it in one pass."""
        view = recompute(self._records, state)
        length = max(1, len(view.records))
        if self._show_all and state.window.size != length:
            state = set_zoom(state, length, length, min_size=1)
            view = recompute(self._records, state)
        self._state = state
        self._view = view
        self.plot.set_view(view, state.visible_metrics)

        self.scroll_slider.blockSignals(True)
        self.scroll_slider.setRange(0, view.window.max_offset)
        self.scroll_slider.setValue(view.window.clamped_offset)
        self.scroll_slider.blockSignals(False)
        self.scroll_slider.setEnabled(view.window.max_offset > 0)

        status = f"Showing {len(view.window)} of {len(view.records)} records"
        if view.parse_failures:
            status += f" ({view.parse_failures} unreadable timestamps)"
        self.status_label.setText(status)

    # ------------------------------------------------------------------
    def _on_date_filter_toggled(self, checked: bool) -> None:
        self.from_edit.setEnabled(checked)
        self.range_check.setEnabled(checked)
        self.to_edit.setEnabled(checked and self.range_check.isChecked())
        self._on_date_changed()

    def _on_date_changed(self, *_args) -> None:
        self.to_edit.setEnabled(self.date_check.isChecked() and self.range_check.isChecked())
        if not self.date_check.isChecked():
            self._apply(select_dates(self._state, None))
            return
        start = self.from_edit.date().toPython()
        end = self.to_edit.date().toPython() if self.range_check.isChecked() else None
        self._apply(select_dates(self._state, start, end))

    def _on_time_filter_toggled(self, checked: bool) -> None:
        if self.start_time_edit is None or self.end_time_edit is None:
            return
        self.start_time_edit.setEnabled(checked)
        self.end_time_edit.setEnabled(checked)
        self._on_time_changed()

    def _on_time_changed(self, *_args) -> None:
        if self.time_check is None or not self.time_check.isChecked():
            self._apply(set_time_of_day(self._state, None))
            return
        start = self.start_time_edit.time().toString(TIME_DISPLAY_FORMAT)
        end = self.end_time_edit.time().toString(TIME_DISPLAY_FORMAT)
        try:
            bound = TimeOfDayBound.parse(start, end)
        except ValueError as exc:
            QMessageBox.warning(self, "Time Range", f"Cannot filter {start}-{end}: {exc}")
            return
        self._apply(set_time_of_day(self._state, bound))

    def _on_zoom_in(self) -> None:
        self._show_all = False
        self._apply(zoom_in(self._state, self.filtered_length(), self.zoom_step(), self._min_size))

    def _on_zoom_out(self) -> None:
        self._show_all = False
        self._apply(zoom_out(self._state, self.filtered_length(), self.zoom_step(), self._min_size))

    def _on_show_all(self) -> None:
        self._show_all = True
        length = max(1, self.filtered_length())
        self._apply(set_zoom(self._state, length, length, min_size=1))

    def _on_scroll(self, value: int) -> None:
        self._apply(scroll_to(self._state, value, self.filtered_length()))


class MetricsPane(QGroupBox):
    """State-of-charge card: latest actual value and latest prediction."""

    def __init__(self) -> None:
        super().__init__("State of Charge")
        self.soc_label = QLabel("N/A%")
        self.soc_label.setStyleSheet("font-size: 24px; font-weight: bold;")
        self.predicted_label = QLabel("Predicted: N/A%")
        self.times_label = QLabel()
        self.source_label = QLabel()

        layout = QVBoxLayout()
        layout.addWidget(self.soc_label)
        layout.addWidget(self.predicted_label)
        layout.addWidget(self.times_label)
        layout.addWidget(self.source_label)
        layout.addStretch()
        self.setLayout(layout)

    def update_snapshot(self, snapshot: DashboardSnapshot) -> None:
        summary = summarize(snapshot.records)
        self.soc_label.setText(summary.soc_text())
        self.predicted_label.setText(summary.predicted_text())
        self.times_label.setText(summary.times_text())
        text = "Source: generated data" if snapshot.source is DataSource.FALLBACK else "Source: telemetry table"
        if snapshot.fetched_at is not None:
            text += f" ({snapshot.fetched_at:%H:%M:%S})"
        if snapshot.message:
            text += f"\n{snapshot.message}"
        self.source_label.setText(text)


class SettingTogglePane(QGroupBox):
    """Off/On switch whose value is sent to the table on demand."""

    send_requested = Signal(bool)

    def __init__(self) -> None:
        super().__init__("Data Uploaded")
        self.toggle = QCheckBox()
        send_btn = QPushButton("Send")
        send_btn.clicked.connect(lambda: self.send_requested.emit(self.toggle.isChecked()))

        row = QHBoxLayout()
        row.addWidget(QLabel("Off"))
        row.addWidget(self.toggle)
        row.addWidget(QLabel("On"))
        row.addStretch()

        layout = QVBoxLayout()
        layout.addLayout(row)
        layout.addWidget(send_btn)
        layout.addStretch()
        self.setLayout(layout)


class MainWindow(QMainWindow):
    """Main UI window coordinating panes."""

    send_setting_requested = Signal(bool)
    zoom_step_changed = Signal(int)

    def __init__(self, chart_settings: Optional[ChartSettings] = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(*WINDOW_DEFAULT_SIZE)
        chart_settings = chart_settings or ChartSettings()

        self.metrics_pane = MetricsPane()
        self.toggle_pane = SettingTogglePane()
        self.battery_chart = ChartPane(BATTERY_CHART_TITLE, BATTERY_METRICS, chart_settings, ylabel="%")
        self.raw_chart = ChartPane(RAW_CHART_TITLE, RAW_METRICS, chart_settings, with_time_filter=True)

        top = QGridLayout()
        top.addWidget(self.metrics_pane, 0, 0)
        top.addWidget(self.toggle_pane, 0, 1)

        central = QWidget()
        central_layout = QVBoxLayout()
        central_layout.addLayout(top)
        central_layout.addWidget(self.battery_chart, stretch=1)
        central_layout.addWidget(self.raw_chart, stretch=1)
        central.setLayout(central_layout)
        self.setCentralWidget(central)

        # Relay signals outward
        self.toggle_pane.send_requested.connect(self.send_setting_requested)
        self.battery_chart.zoom_step_changed.connect(self.zoom_step_changed)
        self.raw_chart.zoom_step_changed.connect(self.zoom_step_changed)

    @Slot(object)
    def update_snapshot(self, snapshot: DashboardSnapshot) -> None:
        self.metrics_pane.update_snapshot(snapshot)
        self.battery_chart.set_records(snapshot.records)
        self.raw_chart.set_records(snapshot.raw_records or snapshot.records)


class SnapshotFetcher(QObject):
    """Runs the snapshot provider off the GUI thread; only the newest result is delivered."""

    fetched = Signal(int, object)
    snapshot_ready = Signal(object)

    def __init__(self, provider: Callable[[], Optional[DashboardSnapshot]]) -> None:
        super().__init__()
        # The worker thread only emits; tokens are checked on the GUI thread.
        self._worker = SupersedingFetcher(provider, self.fetched.emit)
        self.fetched.connect(self._on_fetched)

    def request(self) -> int:
        return self._worker.request()

    @Slot(int, object)
    def _on_fetched(self, token: int, snapshot: Optional[DashboardSnapshot]) -> None:
        if snapshot is None:
            return
        generation = self._worker.generation
        if not generation.accept(token):
            logger.debug("Dropping superseded snapshot %d (latest %d)", token, generation.latest)
            return
        self.snapshot_ready.emit(snapshot)

    def shutdown(self) -> None:
        self._worker.shutdown()


def run_gui(
    snapshot_provider: Callable[[], Optional[DashboardSnapshot]],
    setting_writer=None,
    chart_settings: Optional[ChartSettings] = None,
    refresh_interval_ms: Optional[int] = None,
    settings_path: Optional[str] = None,
) -> None:
    """Launch the GUI and periodically request snapshots from the provider callable.

    A changed zoom step is written back to ``settings_path`` (default settings file if ``None``).
    """
    chart_settings = chart_settings or ChartSettings()
    app = QApplication.instance() or QApplication([])
    window = MainWindow(chart_settings=chart_settings)

    fetcher = SnapshotFetcher(snapshot_provider)
    fetcher.snapshot_ready.connect(window.update_snapshot)

    timer = QTimer()
    timer.timeout.connect(fetcher.request)
    timer.start(refresh_interval_ms or chart_settings.refresh_interval_ms)

    def handle_send(enabled: bool) -> None:
        if setting_writer is None:
            QMessageBox.information(window, "Data Sent", "No setting endpoint configured.")
            return
        try:
            value = setting_writer.send(enabled)
        except StoreError as exc:
            QMessageBox.critical(window, "Error", f"There was an error sending your data.\n{exc}")
        else:
            QMessageBox.information(window, "Data Sent", f"Value {value} has been sent to the telemetry table.")

    def handle_zoom_step(step: int) -> None:
        try:
            update_settings_value("chart.zoom_step", step, settings_path)
        except (OSError, SettingsError, ValueError, TypeError) as exc:
            logger.warning("Could not persist zoom step %d: %s", step, exc)

    window.send_setting_requested.connect(handle_send)
    window.zoom_step_changed.connect(handle_zoom_step)

    window.show()
    fetcher.request()
    try:
        app.exec()
    finally:
        timer.stop()
        fetcher.shutdown()
