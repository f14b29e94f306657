import math

import pytest

from battery_dashboard.view import RangeError, Window, clamp_size, resize, scroll, view, zoom


def test_offset_past_end_is_clamped():
    resolved = view(100, 90, 30)
    assert resolved.max_offset == 70
    assert resolved.clamped_offset == 70
    assert (resolved.start, resolved.stop) == (70, 100)
    assert list(resolved.slice(list(range(100)))) == list(range(70, 100))


def test_window_larger_than_sequence_is_truncated():
    resolved = view(5, 3, 30)
    assert resolved.max_offset == 0
    assert resolved.clamped_offset == 0
    assert resolved.slice("abcde") == "abcde"


def test_empty_sequence_gives_empty_slice():
    resolved = view(0, 4, 10)
    assert resolved.max_offset == 0
    assert len(resolved) == 0
    assert resolved.slice([]) == []


@pytest.mark.parametrize("offset", [-5, -1, float("nan"), float("-inf")])
def test_invalid_offsets_clamp_to_zero(offset):
    resolved = view(50, offset, 10)
    assert resolved.clamped_offset == 0


def test_infinite_offset_clamps_to_max():
    assert view(50, float("inf"), 10).clamped_offset == 40


def test_size_below_one_is_treated_as_one():
    resolved = view(10, 3, 0)
    assert resolved.max_offset == 9
    assert (resolved.start, resolved.stop) == (3, 4)


@pytest.mark.parametrize("length", [0, 1, 9, 10, 57, 100])
@pytest.mark.parametrize("size", [1, 10, 30, 200])
@pytest.mark.parametrize("offset", [-3, 0, 5, 70, 500])
def test_offset_invariant_holds(length, size, offset):
    resolved = view(length, offset, size)
    assert resolved.max_offset == max(0, length - size)
    assert 0 <= resolved.clamped_offset <= resolved.max_offset
    assert resolved.stop - resolved.start == min(size, length - resolved.start)


def test_window_construction_never_raises():
    window = Window(offset=-4, size=0)
    assert window.offset == 0
    assert window.size == 1


def test_range_error_is_value_error():
    assert issubclass(RangeError, ValueError)


def test_clamp_size_bounds():
    assert clamp_size(5, 100, min_size=10) == 10
    assert clamp_size(40, 100, min_size=10) == 40
    assert clamp_size(400, 100, min_size=10) == 100
    assert clamp_size(40, 4, min_size=10) == 10
    assert clamp_size(math.inf, 100, min_size=10) == 100
    assert clamp_size(0, 100, min_size=0) == 1


def test_zoom_reclamps_offset_in_same_step():
    window = Window(offset=70, size=30)

    grown = zoom(window, 30, filtered_length=100, min_size=10)
    assert grown == Window(offset=40, size=60)

    shrunk = zoom(window, -30, filtered_length=100, min_size=10)
    assert shrunk == Window(offset=70, size=10)


def test_resize_to_full_length_resets_offset():
    assert resize(Window(offset=70, size=30), 100, filtered_length=100) == Window(offset=0, size=100)


def test_scroll_is_clamped():
    window = Window(offset=0, size=30)
    assert scroll(window, 15, 100) == Window(offset=15, size=30)
    assert scroll(window, 95, 100) == Window(offset=70, size=30)
    assert scroll(window, -1, 100) == Window(offset=0, size=30)
