"""
Historical range planning for candle sources with per-request limits.

A long span [start, end] is cut into interval-sized DateWindows (the last one
clipped to end) and consecutive windows are packed into groups of at most
``limit`` windows. Each group is the span one network request may cover.

Example:
    >>> groups = plan_ranges(datetime(2023, 1, 1), datetime(2024, 1, 1), ONE_DAY, 300)
    >>> [len(g) for g in groups]
    [300, 65]
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Sequence, Union

from kline.errors import InvalidIntervalError, InvalidLimitError, InvalidRangeError
from kline.interval import Interval
from kline.timestamp_utils import from_epoch_us, to_epoch_us

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateWindow:
    """One [start, end) bucket of a planned span."""
    start: datetime
    end: datetime

    def duration(self) -> timedelta:
        return self.end - self.start


def _positive_interval(interval: Union[Interval, timedelta]) -> Interval:
    if isinstance(interval, timedelta):
        interval = Interval(interval)
    if not isinstance(interval, Interval) or not interval.is_positive():
        raise InvalidIntervalError(interval)
    return interval


def total_candles(start: datetime, end: datetime, interval: Union[Interval, timedelta]) -> int:
    """
    Number of interval-sized buckets needed to cover [start, end].

    Computed as ceil((end - start) / interval) with integer arithmetic, so
    intervals that do not divide the span evenly are counted up. Returns 0
    when end is not after start, and at least 1 otherwise.

    Raises:
        InvalidIntervalError: If interval is not strictly positive
    """
    interval_us = _positive_interval(interval).total_microseconds()
    span_us = to_epoch_us(end) - to_epoch_us(start)
    if span_us <= 0:
        return 0
    return -(-span_us // interval_us)


def plan_ranges(
    start: datetime,
    end: datetime,
    interval: Union[Interval, timedelta],
    limit: int
) -> List[List[DateWindow]]:
    """
    Partition [start, end] into groups of at most ``limit`` DateWindows.

    Guarantees:
        - windows concatenated across groups cover [start, end] exactly,
          without gaps or overlaps
        - every window but the last is exactly one interval long; the last
          ends at ``end``
        - every group but the last holds exactly ``limit`` windows

    Args:
        start: Span start
        end: Span end, must be after start
        interval: Window length
        limit: Maximum windows (candles) per group

    Returns:
        Ordered list of groups, each an ordered list of DateWindows whose
        edges are UTC-aware datetimes. Aware inputs in any zone are planned
        on absolute time, so DST transitions do not change window lengths.

    Raises:
        InvalidLimitError: If limit is zero or negative
        InvalidRangeError: If end is not after start
        InvalidIntervalError: If interval is not strictly positive
    """
    if limit <= 0:
        raise InvalidLimitError(limit)
    interval = _positive_interval(interval)
    start_us = to_epoch_us(start)
    end_us = to_epoch_us(end)
    if end_us <= start_us:
        raise InvalidRangeError(start, end)

    step_us = interval.total_microseconds()
    n_windows = total_candles(start, end, interval)

    # edges live on the UTC timeline, naive bounds read as UTC
    edges = [from_epoch_us(start_us + i * step_us) for i in range(n_windows)]
    edges.append(from_epoch_us(end_us))

    windows = [DateWindow(edges[i], edges[i + 1]) for i in range(n_windows)]

    groups = [windows[i:i + limit] for i in range(0, n_windows, limit)]

    logger.debug(
        f"Planned {n_windows:,} {interval.short()} windows from {start} to {end} "
        f"in {len(groups)} group(s) of up to {limit}"
    )
    return groups


def flatten_ranges(groups: Sequence[Sequence[DateWindow]]) -> List[DateWindow]:
    """Concatenate planned groups back into one ordered window list."""
    return [window for group in groups for window in group]
