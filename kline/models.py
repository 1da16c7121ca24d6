"""
Value objects exchanged between trade sources, the aggregator and consumers.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional

import polars as pl

from kline.errors import KlineError
from kline.interval import Interval
from kline.timestamp_utils import to_epoch_us


@dataclass(frozen=True)
class TradeRecord:
    """One executed trade as reported by an exchange."""
    timestamp: Optional[datetime]
    tid: str
    price: float
    amount: float


@dataclass(frozen=True)
class Candle:
    """OHLCV summary of one interval window; ``time`` is the window start."""
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class CurrencyPair:
    base: str
    quote: str
    delimiter: str = "-"

    @classmethod
    def from_string(cls, text: str, delimiter: str = "-") -> "CurrencyPair":
        base, sep, quote = text.partition(delimiter)
        if not sep or not base or not quote:
            raise KlineError(f"cannot split currency pair {text!r} on {delimiter!r}")
        return cls(base, quote, delimiter)

    def __str__(self) -> str:
        return f"{self.base}{self.delimiter}{self.quote}"


@dataclass
class Item:
    """
    Candles for one exchange, currency pair, asset class and interval.

    Candles are kept in strictly ascending time order without duplicates.
    """
    exchange: str
    pair: CurrencyPair
    asset: str
    interval: Interval
    candles: List[Candle] = field(default_factory=list)

    def to_polars(self) -> pl.DataFrame:
        """Candles as a DataFrame with a UTC datetime ``time`` column."""
        return pl.DataFrame(
            {
                "time": [c.time for c in self.candles],
                "open": [c.open for c in self.candles],
                "high": [c.high for c in self.candles],
                "low": [c.low for c in self.candles],
                "close": [c.close for c in self.candles],
                "volume": [c.volume for c in self.candles],
            },
            schema={
                "time": pl.Datetime("us", "UTC"),
                "open": pl.Float64,
                "high": pl.Float64,
                "low": pl.Float64,
                "close": pl.Float64,
                "volume": pl.Float64,
            },
        )

    def merge(self, other: "Item") -> "Item":
        """
        Combine two partial Items for the same series into a new Item.

        Used to reassemble results fetched per planned request group. When
        both Items hold a candle for the same time, the candle from ``other``
        wins, matching the upsert semantics of candle storage.

        Raises:
            KlineError: If exchange, pair, asset or interval differ
        """
        mine = (self.exchange, self.pair, self.asset, self.interval)
        theirs = (other.exchange, other.pair, other.asset, other.interval)
        if mine != theirs:
            raise KlineError(f"cannot merge kline items {mine} and {theirs}")

        by_time: Dict[int, Candle] = {to_epoch_us(c.time): c for c in self.candles}
        by_time.update((to_epoch_us(c.time), c) for c in other.candles)
        return replace(self, candles=[by_time[key] for key in sorted(by_time)])

    def storage_records(self) -> List[dict]:
        """
        One row per candle for the candle store.

        Rows are keyed by (timestamp, exchange, base, quote, interval), so
        storing an already-seen candle overwrites it rather than duplicating.
        """
        interval_word = self.interval.word()
        return [
            {
                "timestamp": c.time,
                "exchange": self.exchange,
                "base": self.pair.base.upper(),
                "quote": self.pair.quote.upper(),
                "interval": interval_word,
                "open": c.open,
                "high": c.high,
                "low": c.low,
                "close": c.close,
                "volume": c.volume,
            }
            for c in self.candles
        ]
