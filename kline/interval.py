"""
Kline interval taxonomy.

An Interval wraps a ``datetime.timedelta`` and exposes three renderings:

- ``duration()``: the underlying timedelta
- ``word()``: lowercase name from the well-known table ("oneday"), or "notfound"
- ``short()``: compact form derived from the duration itself ("24h", "15m")

Example:
    >>> from kline.interval import ONE_DAY, Interval
    >>> ONE_DAY.word(), ONE_DAY.short()
    ('oneday', '24h')
    >>> (3 * ONE_DAY).word()
    'threeday'
"""

import re
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Mapping, Union

from kline.config import NOT_FOUND_WORD, STANDARD_INTERVALS
from kline.errors import InvalidIntervalError


@dataclass(frozen=True, order=True)
class Interval:
    """Fixed duration spanned by each candle of an Item."""
    delta: timedelta

    def duration(self) -> timedelta:
        return self.delta

    def word(self) -> str:
        return duration_to_word(self.delta)

    def short(self) -> str:
        """
        Compact rendering of the duration.

        Takes the Go-style duration string and drops a trailing "0s" after
        minutes, then a trailing "0m" after hours: 24h0m0s -> 24h,
        1m0s -> 1m, 1h30m0s -> 1h30m, 1m30s stays as is.
        """
        s = format_duration(self.delta)
        if s.endswith("m0s"):
            s = s[:-2]
        if s.endswith("h0m"):
            s = s[:-2]
        return s

    def is_positive(self) -> bool:
        return self.delta > timedelta(0)

    def total_microseconds(self) -> int:
        return _to_microseconds(self.delta)

    def __mul__(self, factor: int) -> "Interval":
        if not isinstance(factor, int):
            return NotImplemented
        return Interval(self.delta * factor)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return format_duration(self.delta)


ONE_MIN = Interval(timedelta(minutes=1))
THREE_MIN = 3 * ONE_MIN
FIVE_MIN = 5 * ONE_MIN
TEN_MIN = 10 * ONE_MIN
FIFTEEN_MIN = 15 * ONE_MIN
THIRTY_MIN = 30 * ONE_MIN
ONE_HOUR = Interval(timedelta(hours=1))
TWO_HOUR = 2 * ONE_HOUR
FOUR_HOUR = 4 * ONE_HOUR
SIX_HOUR = 6 * ONE_HOUR
EIGHT_HOUR = 8 * ONE_HOUR
TWELVE_HOUR = 12 * ONE_HOUR
TWENTY_FOUR_HOUR = 24 * ONE_HOUR
ONE_DAY = TWENTY_FOUR_HOUR
THREE_DAY = 3 * ONE_DAY
SEVEN_DAY = 7 * ONE_DAY
FIFTEEN_DAY = 15 * ONE_DAY
ONE_WEEK = SEVEN_DAY
TWO_WEEK = 2 * ONE_WEEK
ONE_MONTH = 31 * ONE_DAY
ONE_YEAR = 365 * ONE_DAY

# Aliases share a duration, so each duration maps to exactly one word
_INTERVAL_WORDS: Mapping[timedelta, str] = MappingProxyType({
    ONE_MIN.delta: "onemin",
    THREE_MIN.delta: "threemin",
    FIVE_MIN.delta: "fivemin",
    TEN_MIN.delta: "tenmin",
    FIFTEEN_MIN.delta: "fifteenmin",
    THIRTY_MIN.delta: "thirtymin",
    ONE_HOUR.delta: "onehour",
    TWO_HOUR.delta: "twohour",
    FOUR_HOUR.delta: "fourhour",
    SIX_HOUR.delta: "sixhour",
    EIGHT_HOUR.delta: "eighthour",
    TWELVE_HOUR.delta: "twelvehour",
    ONE_DAY.delta: "oneday",
    THREE_DAY.delta: "threeday",
    ONE_WEEK.delta: "oneweek",
    FIFTEEN_DAY.delta: "fifteenday",
    TWO_WEEK.delta: "twoweek",
    ONE_MONTH.delta: "onemonth",
    ONE_YEAR.delta: "oneyear",
})

_WORD_INTERVALS: Mapping[str, Interval] = MappingProxyType(
    {word: Interval(delta) for delta, word in _INTERVAL_WORDS.items()}
)


def supported_words() -> Mapping[str, Interval]:
    """Read-only mapping of every well-known interval word to its Interval."""
    return _WORD_INTERVALS


def duration_to_word(interval: Union[Interval, timedelta]) -> str:
    """
    Look up the canonical word for an interval or bare duration.

    Args:
        interval: Interval or timedelta

    Returns:
        Lowercase word such as "fifteenmin", or "notfound" when the duration
        is not in the well-known table
    """
    delta = interval.delta if isinstance(interval, Interval) else interval
    return _INTERVAL_WORDS.get(delta, NOT_FOUND_WORD)


def _to_microseconds(delta: timedelta) -> int:
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def _format_fraction(whole: int, fraction: int, digits: int) -> str:
    if fraction == 0:
        return str(whole)
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def format_duration(delta: timedelta) -> str:
    """
    Render a timedelta the way Go renders a time.Duration.

    Examples: 8760h0m0s, 24h0m0s, 1m30s, 1.5s, 250ms, 10µs, 0s.
    Resolution is one microsecond, the resolution of timedelta.
    """
    us = _to_microseconds(delta)
    if us == 0:
        return "0s"

    sign = "-" if us < 0 else ""
    us = abs(us)

    if us < 1_000:
        return f"{sign}{us}µs"
    if us < 1_000_000:
        return f"{sign}{_format_fraction(us // 1_000, us % 1_000, 3)}ms"

    total_seconds, fraction = divmod(us, 1_000_000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    seconds_str = _format_fraction(seconds, fraction, 6)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds_str}s"
    if minutes:
        return f"{sign}{minutes}m{seconds_str}s"
    return f"{sign}{seconds_str}s"


_SHORT_PART = re.compile(r"(\d+)(h|m|s)")


def parse_interval(text: str) -> Interval:
    """
    Parse an interval from a word, a standard short name or a short() string.

    Accepted forms:
        - table words: "onemin", "oneday", "oneyear"
        - standard names: "1m", "4h", "1d", "1w", "1M", "1y"
        - short() output: "24h", "1h30m", "360h", "1m30s"

    Raises:
        InvalidIntervalError: If the text cannot be parsed or is not positive
    """
    if not isinstance(text, str) or not text:
        raise InvalidIntervalError(text, f"cannot parse interval from {text!r}")

    if text.lower() in _WORD_INTERVALS:
        return _WORD_INTERVALS[text.lower()]

    if text in STANDARD_INTERVALS:
        return Interval(timedelta(seconds=STANDARD_INTERVALS[text]))

    parts = _SHORT_PART.findall(text)
    if not parts or "".join(n + u for n, u in parts) != text:
        raise InvalidIntervalError(text, f"cannot parse interval from {text!r}")

    units = {"h": 3600, "m": 60, "s": 1}
    seconds = sum(int(number) * units[unit] for number, unit in parts)
    if seconds <= 0:
        raise InvalidIntervalError(text)
    return Interval(timedelta(seconds=seconds))
