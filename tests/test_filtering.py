from datetime import date, datetime

import pytest

from battery_dashboard.telemetry import TimedRecord, TimestampParser
from battery_dashboard.view import Interval, TimeOfDayBound, filter_records, interval_from_dates


def make_records(*times):
    return [TimedRecord(time=t, values={"soc": float(i)}) for i, t in enumerate(times)]


def test_single_date_keeps_only_that_day():
    records = make_records("2024-01-01T08:00:00", "2024-01-02T08:00:00")
    interval = interval_from_dates(date(2024, 1, 1))

    kept = filter_records(records, interval)
    assert kept == [records[0]]


def test_single_date_interval_spans_whole_day():
    interval = interval_from_dates(date(2024, 1, 1))
    assert interval.start == datetime(2024, 1, 1, 0, 0)
    assert interval.end.date() == date(2024, 1, 1)
    assert interval.contains(datetime(2024, 1, 1, 23, 59, 59))
    assert interval.span_days == 0


def test_date_range_includes_whole_last_day():
    records = make_records(
        "2023-12-31T23:59:59",
        "2024-01-01T00:00:00",
        "Wed Jan 03 23:30:00 2024",
        "2024-01-04T00:00:00",
    )
    interval = interval_from_dates(date(2024, 1, 1), date(2024, 1, 3))

    kept = filter_records(records, interval)
    assert [r.time for r in kept] == ["2024-01-01T00:00:00", "Wed Jan 03 23:30:00 2024"]


def test_reversed_date_selection_is_normalised():
    assert interval_from_dates(date(2024, 1, 3), date(2024, 1, 1)) == interval_from_dates(date(2024, 1, 1), date(2024, 1, 3))


def test_interval_rejects_end_before_start():
    with pytest.raises(ValueError):
        Interval(start=datetime(2024, 1, 2), end=datetime(2024, 1, 1))


def test_no_filter_is_identity_and_keeps_unparseable():
    records = make_records("2024-01-01T08:00:00", "not-a-date")
    parser = TimestampParser()
    assert filter_records(records, parser=parser) == records
    assert parser.failure_count == 0


def test_unparseable_records_are_dropped_by_date_filter():
    records = make_records("not-a-date", "2024-01-01T08:00:00")
    parser = TimestampParser()

    kept = filter_records(records, interval_from_dates(date(2024, 1, 1)), parser=parser)
    assert kept == [records[1]]
    assert parser.failure_count == 1


def test_unparseable_records_are_dropped_by_time_of_day_filter():
    records = make_records("not-a-date", "2024-01-01T08:00:00")
    kept = filter_records(records, time_of_day=TimeOfDayBound())
    assert kept == [records[1]]


def test_time_of_day_bound_is_inclusive_and_ignores_seconds():
    records = make_records(
        "2024-01-01T07:59:59",
        "2024-01-01T08:00:00",
        "2024-01-02T12:00:00",
        "2024-01-03T17:30:59",
        "2024-01-03T17:31:00",
    )
    bound = TimeOfDayBound.parse("08:00", "17:30")

    kept = filter_records(records, time_of_day=bound)
    assert [r.time for r in kept] == [
        "2024-01-01T08:00:00",
        "2024-01-02T12:00:00",
        "2024-01-03T17:30:59",
    ]


def test_date_and_time_filters_combine():
    records = make_records(
        "2024-01-01T06:00:00",
        "2024-01-01T09:00:00",
        "2024-01-02T09:00:00",
    )
    kept = filter_records(
        records,
        interval_from_dates(date(2024, 1, 1)),
        TimeOfDayBound(8, 0, 10, 0),
    )
    assert kept == [records[1]]


def test_time_of_day_crossing_midnight_is_rejected():
    with pytest.raises(ValueError):
        TimeOfDayBound.parse("22:00", "02:00")


@pytest.mark.parametrize("start,end", [("24:00", "23:59"), ("aa:00", "01:00"), ("08:60", "09:00"), ("8", "9")])
def test_time_of_day_rejects_invalid_clock(start, end):
    with pytest.raises(ValueError):
        TimeOfDayBound.parse(start, end)


def test_filter_preserves_order_and_is_idempotent():
    records = make_records(
        "2024-01-05T10:00:00",
        "2024-01-01T10:00:00",
        "2024-02-01T10:00:00",
        "2024-01-03T10:00:00",
    )
    interval = interval_from_dates(date(2024, 1, 1), date(2024, 1, 31))

    once = filter_records(records, interval)
    twice = filter_records(once, interval)
    assert once == [records[0], records[1], records[3]]
    assert twice == once


def test_zulu_and_local_stamps_for_the_same_day_are_both_kept(eastern_time):
    records = make_records("2024-01-02T04:30:00.000Z", "2024-01-01T23:30:00", "2024-01-02T05:30:00Z")

    kept = filter_records(records, interval_from_dates(date(2024, 1, 1)))
    assert kept == records[:2]
