"""Time-windowed chart view: filtering, labelling and scroll/zoom."""

from .filtering import Interval, TimeOfDayBound, filter_records, interval_from_dates
from .labels import Granularity, granularity_for, label_records
from .state import (
    DerivedView,
    ViewState,
    clear_dates,
    recompute,
    scroll_to,
    select_dates,
    set_time_of_day,
    set_zoom,
    toggle_metric,
    value_bounds,
    zoom_in,
    zoom_out,
)
from .window import (
    DEFAULT_MIN_SIZE,
    DEFAULT_ZOOM_STEP,
    RangeError,
    Window,
    WindowView,
    clamp_size,
    resize,
    scroll,
    view,
    zoom,
)

__all__ = [
    "Interval",
    "TimeOfDayBound",
    "filter_records",
    "interval_from_dates",
    "Granularity",
    "granularity_for",
    "label_records",
    "DerivedView",
    "ViewState",
    "clear_dates",
    "recompute",
    "scroll_to",
    "select_dates",
    "set_time_of_day",
    "set_zoom",
    "toggle_metric",
    "value_bounds",
    "zoom_in",
    "zoom_out",
    "DEFAULT_MIN_SIZE",
    "DEFAULT_ZOOM_STEP",
    "RangeError",
    "Window",
    "WindowView",
    "clamp_size",
    "resize",
    "scroll",
    "view",
    "zoom",
]
