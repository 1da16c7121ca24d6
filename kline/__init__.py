"""
Kline construction and historical range planning for market-data sources.

This package turns raw exchange trades into fixed-interval OHLCV candles and
plans how to fetch long candle histories from sources that cap the number of
candles returned per request.

Main Features:
    - Interval taxonomy with word ("oneday"), short ("24h") and duration forms
    - Trade validation with chronological (stable) sorting
    - Linear-time trade bucketing with Polars
    - Gapless, size-bounded range planning for paginated fetches
    - Exchange capability checks (supported intervals, request limits)

Usage:
    >>> from kline import build_candles, plan_ranges, CurrencyPair, ONE_MIN, ONE_DAY
    >>>
    >>> item = build_candles(trades, ONE_MIN, CurrencyPair("BTC", "USD"), "spot", "Binance")
    >>> item.candles[0].open
    >>>
    >>> # Split one year of daily candles into requests of 300 candles
    >>> groups = plan_ranges(start, end, ONE_DAY, 300)
    >>> [(g[0].start, g[-1].end) for g in groups]
"""

# Interval taxonomy
from kline.interval import (
    Interval,
    duration_to_word,
    format_duration,
    parse_interval,
    supported_words,
    ONE_MIN,
    THREE_MIN,
    FIVE_MIN,
    TEN_MIN,
    FIFTEEN_MIN,
    THIRTY_MIN,
    ONE_HOUR,
    TWO_HOUR,
    FOUR_HOUR,
    SIX_HOUR,
    EIGHT_HOUR,
    TWELVE_HOUR,
    TWENTY_FOUR_HOUR,
    ONE_DAY,
    THREE_DAY,
    SEVEN_DAY,
    FIFTEEN_DAY,
    ONE_WEEK,
    TWO_WEEK,
    ONE_MONTH,
    ONE_YEAR,
)

# Data model
from kline.models import TradeRecord, Candle, CurrencyPair, Item

# Validation
from kline.validators import validate_trades, check_item, ItemValidationResult

# Aggregation
from kline.trades_aggregator import (
    build_candles,
    aggregate_trades_to_ohlcv,
    trades_to_frame,
    resample_item,
)

# Range planning
from kline.range_planner import DateWindow, total_candles, plan_ranges, flatten_ranges
from kline.capabilities import ExchangeCapabilities

# Errors
from kline.errors import (
    KlineError,
    EmptyInputError,
    InvalidRecordError,
    InvalidIntervalError,
    UnsupportedIntervalError,
    InvalidLimitError,
    InvalidRangeError,
    RequestExceedsLimitsError,
)

__version__ = "1.0.0"

__all__ = [
    # Interval taxonomy
    "Interval",
    "duration_to_word",
    "format_duration",
    "parse_interval",
    "supported_words",
    "ONE_MIN",
    "THREE_MIN",
    "FIVE_MIN",
    "TEN_MIN",
    "FIFTEEN_MIN",
    "THIRTY_MIN",
    "ONE_HOUR",
    "TWO_HOUR",
    "FOUR_HOUR",
    "SIX_HOUR",
    "EIGHT_HOUR",
    "TWELVE_HOUR",
    "TWENTY_FOUR_HOUR",
    "ONE_DAY",
    "THREE_DAY",
    "SEVEN_DAY",
    "FIFTEEN_DAY",
    "ONE_WEEK",
    "TWO_WEEK",
    "ONE_MONTH",
    "ONE_YEAR",

    # Data model
    "TradeRecord",
    "Candle",
    "CurrencyPair",
    "Item",

    # Validation
    "validate_trades",
    "check_item",
    "ItemValidationResult",

    # Aggregation
    "build_candles",
    "aggregate_trades_to_ohlcv",
    "trades_to_frame",
    "resample_item",

    # Range planning
    "DateWindow",
    "total_candles",
    "plan_ranges",
    "flatten_ranges",
    "ExchangeCapabilities",

    # Errors
    "KlineError",
    "EmptyInputError",
    "InvalidRecordError",
    "InvalidIntervalError",
    "UnsupportedIntervalError",
    "InvalidLimitError",
    "InvalidRangeError",
    "RequestExceedsLimitsError",
]
