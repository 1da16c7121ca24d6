"""
Timestamp conversion and format detection utilities.

Candles and trades are bucketed on integer Unix microseconds. This module
converts between those integers and ``datetime`` objects, and normalizes
trade DataFrames whose time column arrives in any of the encodings
exchanges use:
- Unix timestamps in seconds, milliseconds, microseconds or nanoseconds
- Datetime columns with ms, μs or ns time units
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple

import polars as pl

from kline.config import MILLISECOND_THRESHOLD, MICROSECOND_THRESHOLD, NANOSECOND_THRESHOLD

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimestampFormat(Enum):
    """Enumeration of supported timestamp formats."""
    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"
    MICROSECONDS = "microseconds"
    NANOSECONDS = "nanoseconds"
    DATETIME_MS = "datetime_ms"
    DATETIME_US = "datetime_us"
    DATETIME_NS = "datetime_ns"


def to_epoch_us(value: datetime) -> int:
    """
    Convert a datetime to Unix microseconds.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def from_epoch_us(value: int) -> datetime:
    """Convert Unix microseconds to a timezone-aware UTC datetime."""
    return EPOCH + timedelta(microseconds=int(value))


def is_zero_timestamp(value: Optional[datetime]) -> bool:
    """True for a missing timestamp or one at (or before) the Unix epoch."""
    if value is None:
        return True
    return to_epoch_us(value) <= 0


def detect_timestamp_format(df: pl.DataFrame, timestamp_col: str = 'time') -> TimestampFormat:
    """
    Automatically detect the timestamp format in a DataFrame.

    Args:
        df: Input DataFrame
        timestamp_col: Name of the timestamp column

    Returns:
        Detected timestamp format

    Raises:
        ValueError: If timestamp format cannot be determined
    """
    if timestamp_col not in df.columns:
        raise ValueError(f"Timestamp column '{timestamp_col}' not found in DataFrame")

    dtype = df[timestamp_col].dtype

    if isinstance(dtype, pl.Datetime):
        time_unit = dtype.time_unit
        if time_unit == 'ms':
            return TimestampFormat.DATETIME_MS
        elif time_unit == 'us':
            return TimestampFormat.DATETIME_US
        elif time_unit == 'ns':
            return TimestampFormat.DATETIME_NS

    elif dtype in [pl.Int32, pl.Int64, pl.UInt32, pl.UInt64, pl.Float64]:
        # Sample values to determine the magnitude
        sample_values = df[timestamp_col].head(100)
        avg_value = sample_values.mean()

        if avg_value is None:
            raise ValueError(f"Timestamp column '{timestamp_col}' has no values")
        if avg_value > NANOSECOND_THRESHOLD:
            return TimestampFormat.NANOSECONDS
        elif avg_value > MICROSECOND_THRESHOLD:
            return TimestampFormat.MICROSECONDS
        elif avg_value > MILLISECOND_THRESHOLD:
            return TimestampFormat.MILLISECONDS
        else:
            return TimestampFormat.SECONDS

    raise ValueError(f"Unsupported timestamp dtype: {dtype}")


def normalize_timestamp_to_epoch_us(
    df: pl.DataFrame,
    timestamp_col: str = 'time',
    format_hint: Optional[TimestampFormat] = None
) -> Tuple[pl.DataFrame, TimestampFormat]:
    """
    Normalize a timestamp column to Int64 Unix microseconds.

    Args:
        df: Input DataFrame
        timestamp_col: Name of the timestamp column
        format_hint: Optional known format (auto-detected if None)

    Returns:
        Tuple of (normalized DataFrame, detected format)
    """
    if format_hint is None:
        format_hint = detect_timestamp_format(df, timestamp_col)

    col = pl.col(timestamp_col)

    if format_hint in (TimestampFormat.DATETIME_MS, TimestampFormat.DATETIME_US,
                       TimestampFormat.DATETIME_NS):
        expr = col.dt.epoch('us')
    elif format_hint == TimestampFormat.SECONDS:
        expr = col.cast(pl.Int64) * 1_000_000
    elif format_hint == TimestampFormat.MILLISECONDS:
        expr = col.cast(pl.Int64) * 1_000
    elif format_hint == TimestampFormat.MICROSECONDS:
        expr = col.cast(pl.Int64)
    else:
        expr = col.cast(pl.Int64) // 1_000

    return df.with_columns(expr.cast(pl.Int64).alias(timestamp_col)), format_hint
