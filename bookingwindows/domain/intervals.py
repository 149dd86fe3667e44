"""
Interval algebra: buffering, merging and inverting busy time.

Pure functions without any I/O; every caller passes its own inputs.
"""

from typing import Iterable, List, Union

from .models import BufferPolicy, BusyEvent, TimeRange

BusyInput = Union[BusyEvent, TimeRange]


def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or touching time ranges.

    Touching ranges are merged so that no zero-length gap survives.

    Example: [09:00-10:00, 10:00-11:00, 10:30-12:00] -> [09:00-12:00]
    """
    sorted_ranges = sorted(ranges, key=lambda r: (r.start, r.end))
    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeRange(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


def buffer_and_merge(busy: Iterable[BusyInput], buffer: BufferPolicy) -> List[TimeRange]:
    """
    Pad every busy interval by the buffer on both ends, then merge.

    Returns a minimal, sorted list of non-overlapping, non-touching ranges.
    An empty input yields an empty list.
    """
    padded = [
        buffer.pad(item.time_range if isinstance(item, BusyEvent) else item)
        for item in busy
    ]
    return merge_ranges(padded)


def free_windows(window: TimeRange, merged_busy: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Subtract merged busy blocks from an operating window, yielding free windows.

    Busy blocks are clipped to the window first, so blocks that start before
    or run past the window are handled.

    Example:
    Window: 00:00 - 23:59
    Busy: [09:45-11:15]
    Result: [00:00-09:45, 11:15-23:59]
    """
    free: List[TimeRange] = []
    cursor = window.start

    for busy in sorted(merged_busy, key=lambda r: r.start):
        clipped = busy.clip(window)
        if clipped is None:
            continue

        if cursor < clipped.start:
            free.append(TimeRange(start=cursor, end=clipped.start))

        cursor = max(cursor, clipped.end)

    if cursor < window.end:
        free.append(TimeRange(start=cursor, end=window.end))

    return free
