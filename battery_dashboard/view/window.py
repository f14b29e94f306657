"""Scroll offset and zoom size over a filtered sequence."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_MIN_SIZE = 10
DEFAULT_ZOOM_STEP = 30

T = TypeVar("T")


class RangeError(ValueError):
    """Raised for offsets or sizes that are negative or not finite."""


def _as_index(value, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RangeError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise RangeError(f"{name} must be finite, got {value!r}")
    index = int(value)
    if index < minimum:
        raise RangeError(f"{name} must be >= {minimum}, got {value!r}")
    return index


def _coerce(value, name: str, minimum: int, upper: int) -> int:
    """Like ``_as_index`` but clamps instead of raising: +inf maps to ``upper``."""
    try:
        return _as_index(value, name, minimum)
    except RangeError as exc:
        logger.debug("Clamping %s: %s", name, exc)
        if isinstance(value, float) and value == math.inf:
            return upper
        return minimum


@dataclass(frozen=True)
class Window:
    """Contiguous run of ``size`` records starting at ``offset``."""

    offset: int = 0
    size: int = DEFAULT_MIN_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", _coerce(self.offset, "offset", 0, 0))
        object.__setattr__(self, "size", _coerce(self.size, "size", 1, 1))


@dataclass(frozen=True)
class WindowView:
    """Resolved window over a sequence of known length."""

    clamped_offset: int
    max_offset: int
    start: int
    stop: int

    def slice(self, items: Sequence[T]) -> Sequence[T]:
        return items[self.start:self.stop]

    def __len__(self) -> int:
        return self.stop - self.start


def view(filtered_length: int, offset, size) -> WindowView:
    """Resolve ``offset``/``size`` against a sequence of ``filtered_length`` items.

    Negative or non-finite offsets clamp to 0; an offset past the end clamps to
    ``max_offset``. Sizes below 1 are treated as 1.
    """
    length = _coerce(filtered_length, "filtered_length", 0, 0)
    width = _coerce(size, "size", 1, max(length, 1))
    start_hint = _coerce(offset, "offset", 0, length)
    max_offset = max(0, length - width)
    clamped = min(start_hint, max_offset)
    return WindowView(
        clamped_offset=clamped,
        max_offset=max_offset,
        start=clamped,
        stop=min(clamped + width, length),
    )


def clamp_size(size, filtered_length: int, min_size: int = DEFAULT_MIN_SIZE) -> int:
    """Bound a zoom level to ``[min_size, filtered_length]``, never below ``min_size``."""
    floor = max(1, int(min_size))
    requested = _coerce(size, "size", 1, max(filtered_length, floor))
    return max(floor, min(requested, filtered_length))


def scroll(window: Window, offset, filtered_length: int) -> Window:
    resolved = view(filtered_length, offset, window.size)
    return Window(offset=resolved.clamped_offset, size=window.size)


def resize(window: Window, size, filtered_length: int, min_size: int = DEFAULT_MIN_SIZE) -> Window:
    """Change the zoom level and re-clamp the offset in the same step."""
    new_size = clamp_size(size, filtered_length, min_size)
    resolved = view(filtered_length, window.offset, new_size)
    return Window(offset=resolved.clamped_offset, size=new_size)


def zoom(window: Window, delta: int, filtered_length: int, min_size: int = DEFAULT_MIN_SIZE) -> Window:
    """Grow (positive ``delta``) or shrink the window by ``delta`` records."""
    return resize(window, window.size + delta, filtered_length, min_size)
