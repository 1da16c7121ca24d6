"""
Exchange kline capability descriptor.

Exchange wrappers describe which intervals they serve and how many candles a
single request may return. The descriptor checks intervals, rejects oversized
single requests and plans multi-request fetches with plan_ranges().
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from kline.config import NOT_FOUND_WORD
from kline.errors import RequestExceedsLimitsError, UnsupportedIntervalError
from kline.interval import Interval
from kline.range_planner import DateWindow, plan_ranges, total_candles

logger = logging.getLogger(__name__)


@dataclass
class ExchangeCapabilities:
    """
    Kline related options an exchange supports.

    Attributes:
        supports_intervals: True if intervals outside the well-known table
            (custom intervals) are accepted
        intervals: Interval word -> enabled, e.g. {"onemin": True}
        supports_date_range: True if requests accept arbitrary start/end
        limit: Maximum number of candles returned per request
    """
    supports_intervals: bool = False
    intervals: Dict[str, bool] = field(default_factory=dict)
    supports_date_range: bool = False
    limit: int = 0

    @classmethod
    def with_intervals(cls, *intervals: Interval, **kwargs) -> "ExchangeCapabilities":
        """Build a descriptor enabling the given well-known intervals."""
        return cls(intervals={i.word(): True for i in intervals}, **kwargs)

    def supports_interval(self, interval: Interval) -> bool:
        if not interval.is_positive():
            return False
        word = interval.word()
        if word == NOT_FOUND_WORD:
            return self.supports_intervals
        return self.intervals.get(word, False)

    def validate_interval(self, interval: Interval) -> None:
        """
        Raises:
            UnsupportedIntervalError: If the exchange does not serve interval
        """
        if not self.supports_interval(interval):
            err = UnsupportedIntervalError(interval)
            logger.warning(err.long_message())
            raise err

    def check_request_limits(self, start: datetime, end: datetime, interval: Interval) -> int:
        """
        Ensure a single request for [start, end] fits within ``limit``.

        Returns:
            Number of candles the request covers

        Raises:
            RequestExceedsLimitsError: If the request needs more than limit candles
        """
        requested = total_candles(start, end, interval)
        if requested > self.limit:
            logger.warning(f"{requested:,} candles requested, exchange limit is {self.limit:,}")
            raise RequestExceedsLimitsError(requested, self.limit)
        return requested

    def plan_requests(self, start: datetime, end: datetime, interval: Interval) -> List[List[DateWindow]]:
        """
        Plan the request groups needed to fetch [start, end] at interval.

        Raises:
            UnsupportedIntervalError: If the exchange does not serve interval
            InvalidLimitError: If limit is zero or negative
            InvalidRangeError: If end is not after start
        """
        self.validate_interval(interval)
        return plan_ranges(start, end, interval, self.limit)
