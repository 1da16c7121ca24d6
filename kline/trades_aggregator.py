"""
Trades to OHLCV candle aggregator.

Turns validated trade records into fixed-interval OHLCV candles. Each trade
is assigned to the epoch-aligned window ``floor(time / interval) * interval``
and every window is reduced in a single Polars group_by pass:

- open:   price of the first trade in the window
- high:   highest trade price in the window
- low:    lowest trade price in the window
- close:  price of the last trade in the window
- volume: sum of trade amounts in the window

Windows without trades produce no candle. All bucketing happens on integer
Unix microseconds; datetimes only appear at the TradeRecord/Candle boundary.
"""

import logging
from datetime import timedelta
from typing import List, Optional, Sequence, Union

import numpy as np
import polars as pl

from kline.config import OHLCV_COLUMNS
from kline.errors import InvalidIntervalError
from kline.interval import Interval
from kline.models import Candle, CurrencyPair, Item, TradeRecord
from kline.timestamp_utils import from_epoch_us, normalize_timestamp_to_epoch_us, to_epoch_us
from kline.validators import validate_trades

logger = logging.getLogger(__name__)


def _interval_us(interval: Union[Interval, timedelta]) -> int:
    """Interval length in microseconds, rejecting non-positive intervals."""
    if isinstance(interval, timedelta):
        interval = Interval(interval)
    if not isinstance(interval, Interval) or not interval.is_positive():
        raise InvalidIntervalError(interval)
    return interval.total_microseconds()


def _calculate_time_bin(time_col: str, interval_us: int) -> pl.Expr:
    """
    Calculate the time bin (bucket) start for each trade.

    Floor division keeps pre-epoch timestamps in the correct bin as well.
    """
    return (pl.col(time_col) // interval_us) * interval_us


def _aggregate_trades_by_time_bin(trades_df: pl.DataFrame, interval_us: int) -> pl.DataFrame:
    """
    Aggregate time-sorted trades into OHLCV rows.

    Args:
        trades_df: Trades with 'time' (Unix µs), 'price' and 'amount' columns,
                   already sorted by time
        interval_us: Window length in microseconds

    Returns:
        DataFrame with OHLCV_COLUMNS, one row per non-empty window, sorted
        by open_time
    """
    trades_with_bin = trades_df.with_columns(
        _calculate_time_bin("time", interval_us).alias("open_time")
    )

    # maintain_order keeps first()/last() tied to the time-sorted input
    aggregated = trades_with_bin.group_by("open_time", maintain_order=True).agg([
        pl.col("price").first().alias("open"),
        pl.col("price").max().alias("high"),
        pl.col("price").min().alias("low"),
        pl.col("price").last().alias("close"),
        pl.col("amount").sum().alias("volume"),
        pl.col("price").count().alias("count"),
    ]).sort("open_time")

    return aggregated.select(OHLCV_COLUMNS)


def trades_to_frame(trades: List[TradeRecord]) -> pl.DataFrame:
    """
    Convert trade records into a trades DataFrame.

    Columns are pre-allocated numpy arrays filled in one pass.

    Returns:
        DataFrame with 'time' (Int64 Unix µs), 'tid', 'price', 'amount'
    """
    n_trades = len(trades)
    times = np.empty(n_trades, dtype=np.int64)
    prices = np.empty(n_trades, dtype=np.float64)
    amounts = np.empty(n_trades, dtype=np.float64)
    tids = [None] * n_trades

    for i, trade in enumerate(trades):
        times[i] = to_epoch_us(trade.timestamp)
        prices[i] = trade.price
        amounts[i] = trade.amount
        tids[i] = trade.tid

    return pl.DataFrame({
        "time": times,
        "tid": pl.Series(tids, dtype=pl.Utf8),
        "price": prices,
        "amount": amounts,
    })


def aggregate_trades_to_ohlcv(
    trades_df: pl.DataFrame,
    interval: Union[Interval, timedelta],
    ensure_sorted: bool = True,
    timestamp_col: str = 'time'
) -> pl.DataFrame:
    """
    Aggregate a trades DataFrame into OHLCV candles.

    Args:
        trades_df: DataFrame with a timestamp column plus 'price' and
                   'amount'. The timestamp may be epoch s/ms/µs/ns integers
                   or a Datetime column; it is normalized to Unix µs.
        interval: Candle interval (Interval or timedelta)
        ensure_sorted: If True, sorts trades by time before aggregation.
                       Set to False if data is already sorted.
        timestamp_col: Name of the timestamp column

    Returns:
        DataFrame with open_time (Unix µs), open, high, low, close, volume
        and count columns

    Raises:
        InvalidIntervalError: If interval is not strictly positive
        ValueError: If required columns are missing

    Example:
        >>> klines_1m = aggregate_trades_to_ohlcv(trades_df, ONE_MIN)
        >>> klines_1h = aggregate_trades_to_ohlcv(trades_df, ONE_HOUR)
    """
    interval_us = _interval_us(interval)

    required_columns = {timestamp_col, "price", "amount"}
    missing_columns = required_columns - set(trades_df.columns)
    if missing_columns:
        raise ValueError(f"Missing required columns: {missing_columns}")

    trades_df, _ = normalize_timestamp_to_epoch_us(trades_df, timestamp_col)
    if timestamp_col != "time":
        trades_df = trades_df.rename({timestamp_col: "time"})

    # Sorting is required for correct open/close selection
    if ensure_sorted:
        trades_df = trades_df.sort("time", maintain_order=True)

    return _aggregate_trades_by_time_bin(trades_df, interval_us)


def _frame_to_candles(ohlcv_df: pl.DataFrame) -> List[Candle]:
    return [
        Candle(
            time=from_epoch_us(row[0]),
            open=row[1],
            high=row[2],
            low=row[3],
            close=row[4],
            volume=row[5],
        )
        for row in ohlcv_df.select(["open_time", "open", "high", "low", "close", "volume"]).iter_rows()
    ]


def build_candles(
    trades: Optional[Sequence[TradeRecord]],
    interval: Interval,
    pair: CurrencyPair,
    asset: str,
    exchange: str
) -> Item:
    """
    Build a kline Item from raw trade records.

    A trades list is validated and sorted in place first; see
    validate_trades(). Windows without trades are omitted.

    Args:
        trades: Raw trade records in any order
        interval: Candle interval, must be strictly positive
        pair: Currency pair the trades belong to
        asset: Asset class tag, e.g. "spot"
        exchange: Exchange name

    Returns:
        Item whose candles are strictly ascending by time

    Raises:
        InvalidIntervalError: If interval is not strictly positive
        EmptyInputError: If trades is None or empty
        InvalidRecordError: If any trade record is malformed
    """
    if isinstance(interval, timedelta):
        interval = Interval(interval)
    interval_us = _interval_us(interval)
    trades = validate_trades(trades)

    trades_df = trades_to_frame(trades)
    ohlcv_df = _aggregate_trades_by_time_bin(trades_df, interval_us)
    candles = _frame_to_candles(ohlcv_df)

    logger.debug(
        f"{exchange} {pair} {asset}: aggregated {len(trades):,} trades into "
        f"{len(candles):,} {interval.short()} candles"
    )

    return Item(
        exchange=exchange,
        pair=pair,
        asset=asset,
        interval=interval,
        candles=candles,
    )


def resample_item(item: Item, interval: Interval) -> Item:
    """
    Re-aggregate an Item's candles to a coarser interval.

    Useful after reassembling partial Items fetched at a finer interval than
    the one the caller wants.

    Args:
        item: Source Item
        interval: Target interval; must be an exact multiple of item.interval

    Returns:
        New Item at the target interval

    Raises:
        InvalidIntervalError: If either interval is not strictly positive, or
            the target is not an exact multiple of the source interval
    """
    source_us = _interval_us(item.interval)
    target_us = _interval_us(interval)

    if target_us < source_us or target_us % source_us != 0:
        raise InvalidIntervalError(
            interval,
            f"target interval ({interval}) must be an exact multiple of "
            f"source interval ({item.interval})"
        )

    if not item.candles:
        return Item(item.exchange, item.pair, item.asset, interval, [])

    candles_df = pl.DataFrame({
        "time": [to_epoch_us(c.time) for c in item.candles],
        "open": [c.open for c in item.candles],
        "high": [c.high for c in item.candles],
        "low": [c.low for c in item.candles],
        "close": [c.close for c in item.candles],
        "volume": [c.volume for c in item.candles],
    }, schema={
        "time": pl.Int64,
        "open": pl.Float64,
        "high": pl.Float64,
        "low": pl.Float64,
        "close": pl.Float64,
        "volume": pl.Float64,
    })

    resampled = (
        candles_df
        .sort("time")
        .with_columns(_calculate_time_bin("time", target_us).alias("open_time"))
        .group_by("open_time", maintain_order=True)
        .agg([
            pl.col("open").first().alias("open"),
            pl.col("high").max().alias("high"),
            pl.col("low").min().alias("low"),
            pl.col("close").last().alias("close"),
            pl.col("volume").sum().alias("volume"),
        ])
        .sort("open_time")
    )

    return Item(
        exchange=item.exchange,
        pair=item.pair,
        asset=item.asset,
        interval=interval,
        candles=_frame_to_candles(resampled),
    )
