from dataclasses import FrozenInstanceError
from datetime import date, datetime, timedelta

import pytest

from battery_dashboard.telemetry import TimedRecord
from battery_dashboard.view import (
    Granularity,
    TimeOfDayBound,
    ViewState,
    Window,
    clear_dates,
    recompute,
    scroll_to,
    select_dates,
    set_time_of_day,
    toggle_metric,
    value_bounds,
    zoom_in,
    zoom_out,
)


def hourly_records(count, start=datetime(2024, 1, 1)):
    return [
        TimedRecord(
            time=(start + timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M:%S"),
            values={"soc": 50.0 + i % 10, "socPredicted": 55.0 + i % 10},
        )
        for i in range(count)
    ]


def test_initial_state_shows_everything():
    records = hourly_records(48)
    state = ViewState.initial(len(records), ["soc", "socPredicted"])

    derived = recompute(records, state)
    assert len(derived.visible) == 48
    assert derived.window.max_offset == 0
    assert derived.granularity is Granularity.MINUTE
    assert derived.parse_failures == 0
    assert derived.value_bounds == (48.0, 66.0)


def test_events_return_new_states():
    state = ViewState.initial(10, ["soc"])
    selected = select_dates(state, date(2024, 1, 1))
    assert state.interval is None
    assert selected.interval is not None
    assert clear_dates(selected).interval is None

    bounded = set_time_of_day(state, TimeOfDayBound(8, 0, 9, 0))
    assert state.time_of_day is None
    assert bounded.time_of_day == TimeOfDayBound(8, 0, 9, 0)

    with pytest.raises(FrozenInstanceError):
        state.window = Window()


def test_single_day_selection_filters_and_labels():
    records = hourly_records(72)
    state = select_dates(ViewState.initial(len(records), ["soc"]), date(2024, 1, 2))

    derived = recompute(records, state)
    assert len(derived.records) == 24
    assert derived.records[0].display_time == "00:00"
    assert derived.records[-1].display_time == "23:00"
    # The window was sized for 72 records; it now covers the whole filtered day.
    assert derived.window.max_offset == 0
    assert len(derived.visible) == 24


def test_zoom_and_scroll_over_filtered_records():
    records = hourly_records(100)
    state = ViewState.initial(len(records), ["soc"])

    state = zoom_in(state, 100, step=30, min_size=10)
    assert state.window.size == 70
    state = zoom_in(state, 100, step=30, min_size=10)
    state = zoom_in(state, 100, step=30, min_size=10)
    assert state.window.size == 10

    state = scroll_to(state, 95, 100)
    derived = recompute(records, state)
    assert derived.window.clamped_offset == 90
    assert [r.time for r in derived.visible] == [r.time for r in records[90:]]

    state = zoom_out(state, 100, step=30, min_size=10)
    assert state.window == Window(offset=60, size=40)


def test_stale_offset_is_clamped_against_the_current_filter():
    records = hourly_records(100)
    state = scroll_to(ViewState(window=Window(offset=0, size=10)), 80, 100)
    state = select_dates(state, date(2024, 1, 1))

    derived = recompute(records, state)
    assert len(derived.records) == 24
    assert derived.window.max_offset == 14
    assert derived.window.clamped_offset == 14
    assert len(derived.visible) == 10


def test_filters_excluding_everything_give_empty_view():
    records = hourly_records(10)
    state = select_dates(ViewState.initial(10, ["soc"]), date(2030, 1, 1))

    derived = recompute(records, state)
    assert derived.is_empty
    assert list(derived.visible) == []
    assert derived.value_bounds is None


def test_unparseable_record_dropped_when_filtered_but_labelled_raw_otherwise():
    records = [TimedRecord(time="2024-01-01T08:00:00", values={"soc": 70.0}), TimedRecord(time="not-a-date")]
    state = ViewState.initial(len(records), ["soc"])

    unfiltered = recompute(records, state)
    assert [r.display_time for r in unfiltered.records] == ["08:00", "not-a-date"]
    assert unfiltered.parse_failures == 0

    filtered = recompute(records, select_dates(state, date(2024, 1, 1)))
    assert [r.time for r in filtered.records] == ["2024-01-01T08:00:00"]
    assert filtered.parse_failures == 1


def test_long_selection_switches_label_granularity():
    records = hourly_records(24 * 45)
    state = select_dates(ViewState.initial(len(records), ["soc"]), date(2024, 1, 1), date(2024, 2, 10))

    derived = recompute(records, state)
    assert derived.granularity is Granularity.MONTH
    assert {r.display_time for r in derived.records} == {"Jan", "Feb"}


def test_toggle_metric_changes_value_bounds():
    records = [TimedRecord(time="2024-01-01T08:00:00", values={"soc": 70.0, "socPredicted": 90.0})]
    state = ViewState.initial(1, ["soc", "socPredicted"])
    assert recompute(records, state).value_bounds == (68.0, 92.0)

    state = toggle_metric(state, "socPredicted")
    assert state.visible_metrics == frozenset({"soc"})
    assert recompute(records, state).value_bounds == (68.0, 72.0)
    assert toggle_metric(state, "socPredicted").visible_metrics == frozenset({"soc", "socPredicted"})


def test_value_bounds_ignores_missing_values():
    records = recompute(
        [
            TimedRecord(time="2024-01-01T08:00:00", values={"soc": None, "socPredicted": 60.0}),
            TimedRecord(time="2024-01-01T09:00:00", values={"soc": float("nan"), "socPredicted": 65.0}),
        ],
        ViewState.initial(2),
    ).records
    assert value_bounds(records, ["soc", "socPredicted"], padding=1.0) == (59.0, 66.0)
    assert value_bounds(records, ["soc"]) is None
