"""
Primitive operations on half-open time ranges.

All functions are pure: inputs are never mutated and equal inputs give equal
outputs.
"""

from typing import Iterable, List

from .models import TimeRange


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """True iff the ranges share any instant. Touching endpoints do not overlap."""
    return a.start < b.end and a.end > b.start


def contains(outer: TimeRange, inner: TimeRange) -> bool:
    """True iff ``inner`` lies entirely within ``outer``."""
    return outer.start <= inner.start and inner.end <= outer.end


def subtract(period: TimeRange, busy_ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Subtract busy ranges from a period, yielding the free sub-ranges in order.

    Example:
    Period: 09:00 - 17:00
    Busy: [10:00-11:00, 14:00-15:00]
    Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
    """
    free_ranges: List[TimeRange] = []
    cursor = period.start

    for busy in sorted(busy_ranges, key=lambda r: r.start):
        if not overlaps(period, busy):
            continue

        if cursor < busy.start:
            free_ranges.append(TimeRange(start=cursor, end=busy.start))

        cursor = max(cursor, busy.end)

    if cursor < period.end:
        free_ranges.append(TimeRange(start=cursor, end=period.end))

    return free_ranges
