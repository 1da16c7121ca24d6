"""
Validation utilities for raw trades and built candle series.

validate_trades() is the gate every trade batch passes before aggregation:
it rejects empty or malformed input and sorts the batch chronologically.
check_item() inspects a finished Item and reports every broken invariant.
"""

import math
import numbers
from decimal import Decimal
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from kline.errors import EmptyInputError, InvalidRecordError
from kline.models import Item, TradeRecord
from kline.timestamp_utils import is_zero_timestamp, to_epoch_us


def _is_positive(value) -> bool:
    if isinstance(value, Decimal):
        return not value.is_nan() and value > 0
    # `not x > 0` also rejects NaN
    return isinstance(value, numbers.Real) and value > 0


def _record_problems(trade: TradeRecord) -> List[str]:
    problems = []
    if is_zero_timestamp(trade.timestamp):
        problems.append("timestamp is zero")
    if not _is_positive(trade.price):
        problems.append(f"price must be positive, got {trade.price}")
    if not _is_positive(trade.amount):
        problems.append(f"amount must be positive, got {trade.amount}")
    return problems


def validate_trades(trades: Optional[Sequence[TradeRecord]]) -> List[TradeRecord]:
    """
    Validate a trade batch and sort it into ascending timestamp order.

    A list is sorted in place and returned; a tuple or other
    sequence is copied into a new list first. The sort is stable, so trades sharing a timestamp keep their
    input order.

    Args:
        trades: Trade records in any order

    Returns:
        The input list (or a new list for other sequences), sorted by timestamp

    Raises:
        EmptyInputError: If trades is None or empty
        InvalidRecordError: If any record has a zero timestamp or a
            non-positive price or amount. Every bad record is listed.
    """
    if trades is None or len(trades) == 0:
        raise EmptyInputError()

    violations: List[Tuple[int, str, List[str]]] = []
    for index, trade in enumerate(trades):
        problems = _record_problems(trade)
        if problems:
            violations.append((index, trade.tid, problems))

    if violations:
        raise InvalidRecordError(violations)

    if not isinstance(trades, list):
        trades = list(trades)
    trades.sort(key=lambda t: to_epoch_us(t.timestamp))
    return trades


@dataclass
class ItemValidationResult:
    """
    Results from checking the invariants of a candle series.

    Attributes:
        total_candles: Number of candles inspected
        ohlc_violations: Indexes where high/low do not bound open and close
        volume_violations: Indexes with a negative volume
        ordering_violations: Indexes whose time is not after the previous one
    """
    total_candles: int
    ohlc_violations: List[int] = field(default_factory=list)
    volume_violations: List[int] = field(default_factory=list)
    ordering_violations: List[int] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not (self.ohlc_violations or self.volume_violations or self.ordering_violations)

    def __str__(self) -> str:
        """Format validation results as human-readable string."""
        lines = [
            "=" * 60,
            "KLINE ITEM VALIDATION REPORT",
            "=" * 60,
            f"Candles checked:     {self.total_candles:,}",
            f"OHLC violations:     {len(self.ohlc_violations)}",
            f"Volume violations:   {len(self.volume_violations)}",
            f"Ordering violations: {len(self.ordering_violations)}",
            "=" * 60,
            f"Overall: {'✓ ALL CHECKS PASSED' if self.passed else '✗ VALIDATION FAILED'}",
            "=" * 60,
        ]
        return "\n".join(lines)


def check_item(item: Item) -> ItemValidationResult:
    """
    Check an Item against the candle and ordering invariants.

    - high >= max(open, close) and low <= min(open, close)
    - volume >= 0
    - candle times strictly ascending (no duplicates)
    """
    result = ItemValidationResult(total_candles=len(item.candles))

    previous_time = None
    for index, candle in enumerate(item.candles):
        if candle.high < max(candle.open, candle.close) or candle.low > min(candle.open, candle.close):
            result.ohlc_violations.append(index)
        if math.isnan(candle.volume) or candle.volume < 0:
            result.volume_violations.append(index)

        current_time = to_epoch_us(candle.time)
        if previous_time is not None and current_time <= previous_time:
            result.ordering_violations.append(index)
        previous_time = current_time

    return result
