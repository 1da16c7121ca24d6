"""
Error types raised while validating trades, building candles and planning ranges.

Every error derives from KlineError, which is a ValueError so callers that
already guard input with ``except ValueError`` keep working.
"""

from typing import List, Tuple

from kline.config import ERR_UNSUPPORTED_INTERVAL, ERR_REQUEST_EXCEEDS_EXCHANGE_LIMITS


class KlineError(ValueError):
    """Base class for all kline errors."""


class EmptyInputError(KlineError):
    """Raised when a trade batch is None or has no records."""

    def __init__(self, message: str = "trade history is empty"):
        super().__init__(message)


class InvalidRecordError(KlineError):
    """
    Raised when one or more trade records are malformed.

    Attributes:
        violations: List of (index, tid, reasons) tuples, one per bad record
    """

    def __init__(self, violations: List[Tuple[int, str, List[str]]]):
        self.violations = violations
        details = "; ".join(
            f"record {index} (tid={tid!r}): {', '.join(reasons)}"
            for index, tid, reasons in violations
        )
        super().__init__(f"{len(violations)} invalid trade record(s): {details}")


class InvalidIntervalError(KlineError):
    """Raised when an interval is not strictly positive or cannot be parsed."""

    def __init__(self, interval, message: str = None):
        self.interval = interval
        super().__init__(message or f"interval must be greater than zero, got {interval}")


class UnsupportedIntervalError(KlineError):
    """
    Raised when an exchange does not support the requested interval.

    The offending interval is kept on ``interval``. ``str(err)`` renders the
    short, word based message ("oneyear interval unsupported by exchange") and
    ``long_message()`` the duration based one
    ("8760h0m0s interval unsupported by exchange").
    """

    def __init__(self, interval):
        self.interval = interval
        super().__init__(self.short_message())

    def short_message(self) -> str:
        return ERR_UNSUPPORTED_INTERVAL % self.interval.word()

    def long_message(self) -> str:
        return ERR_UNSUPPORTED_INTERVAL % self.interval

    def __str__(self) -> str:
        return self.short_message()


class InvalidLimitError(KlineError):
    """Raised when a range planner batch size is zero or negative."""

    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"limit must be greater than zero, got {limit}")


class InvalidRangeError(KlineError):
    """Raised when a time span does not end after it starts."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"end {end} must be after start {start}")


class RequestExceedsLimitsError(KlineError):
    """Raised when a single request would return more candles than allowed."""

    def __init__(self, requested: int, limit: int):
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"{ERR_REQUEST_EXCEEDS_EXCHANGE_LIMITS} ({requested} candles requested, limit {limit})"
        )
