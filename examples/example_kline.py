"""
Example Usage of the kline Package

This script demonstrates how to:
1. Build one-minute candles from raw trades
2. Resample them to a coarser interval
3. Plan a paginated fetch of one year of daily candles
"""

import logging
from datetime import datetime, timedelta, timezone

import numpy as np

from kline import (
    TradeRecord,
    CurrencyPair,
    ExchangeCapabilities,
    build_candles,
    resample_item,
    check_item,
    UnsupportedIntervalError,
    ONE_MIN,
    FIFTEEN_MIN,
    ONE_DAY,
    ONE_YEAR,
)

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def example_build_candles():
    """Example: Aggregate synthetic trades into one-minute candles"""
    print("=" * 70)
    print("EXAMPLE 1: Trades to Candles")
    print("=" * 70)

    rng = np.random.default_rng(1)
    start = datetime(2025, 11, 1, tzinfo=timezone.utc)
    offsets = rng.integers(0, 3600, 20_000)
    prices = 60_000 + np.cumsum(rng.normal(0, 5, 20_000))

    trades = [
        TradeRecord(start + timedelta(seconds=int(offsets[i])), str(i), float(prices[i]), 0.01)
        for i in range(len(offsets))
    ]

    item = build_candles(trades, ONE_MIN, CurrencyPair("BTC", "USDT"), "spot", "Binance")

    print(f"\nGenerated {len(item.candles):,} candles")
    print("\nFirst 5 candles:")
    print(item.to_polars().head(5))
    print(check_item(item))

    return item


def example_resample(item):
    """Example: Re-aggregate one-minute candles to fifteen minutes"""
    print("\n" + "=" * 70)
    print("EXAMPLE 2: Resampling")
    print("=" * 70)

    resampled = resample_item(item, FIFTEEN_MIN)
    print(f"\n{len(item.candles):,} {item.interval.short()} candles -> "
          f"{len(resampled.candles):,} {resampled.interval.short()} candles")

    return resampled


def example_plan_requests():
    """Example: Plan a year of daily candles against a 300 candle limit"""
    print("\n" + "=" * 70)
    print("EXAMPLE 3: Range Planning")
    print("=" * 70)

    caps = ExchangeCapabilities.with_intervals(ONE_MIN, ONE_DAY, supports_date_range=True, limit=300)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2025, 1, 1, tzinfo=timezone.utc)

    groups = caps.plan_requests(start, end, ONE_DAY)
    for number, group in enumerate(groups, 1):
        print(f"  request {number}: {group[0].start} -> {group[-1].end} ({len(group)} candles)")

    try:
        caps.plan_requests(start, end, ONE_YEAR)
    except UnsupportedIntervalError as e:
        logger.info(f"Rejected as expected: {e}")

    return groups


if __name__ == "__main__":
    item = example_build_candles()
    example_resample(item)
    example_plan_requests()
