"""
Test Suite for Exchange Kline Capabilities

Verifies:
1. Interval support checks (enabled words and custom intervals)
2. Unsupported interval errors keep the offending interval
3. Single-request limit checks
4. Request planning against the exchange limit

Run tests with: pytest tests/test_capabilities.py -v
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from kline import (
    ExchangeCapabilities,
    Interval,
    plan_ranges,
    UnsupportedIntervalError,
    RequestExceedsLimitsError,
    InvalidLimitError,
    ONE_MIN,
    FIVE_MIN,
    ONE_HOUR,
    ONE_DAY,
    ONE_WEEK,
    ONE_YEAR,
)

START = datetime(2023, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_capabilities(**kwargs) -> ExchangeCapabilities:
    return ExchangeCapabilities.with_intervals(
        ONE_MIN, FIVE_MIN, ONE_HOUR, ONE_DAY, ONE_WEEK,
        supports_date_range=True,
        limit=300,
        **kwargs
    )


def test_supported_intervals():
    """Only enabled words pass, custom intervals need supports_intervals."""
    print("\n=== Test 1: Interval Support ===")

    caps = make_capabilities()
    custom = Interval(timedelta(minutes=7))

    assert caps.intervals == {
        "onemin": True, "fivemin": True, "onehour": True, "oneday": True, "oneweek": True,
    }
    assert caps.supports_interval(ONE_MIN)
    assert caps.supports_interval(ONE_DAY)
    assert not caps.supports_interval(ONE_YEAR)
    assert not caps.supports_interval(custom)
    assert not caps.supports_interval(Interval(timedelta(0)))

    assert make_capabilities(supports_intervals=True).supports_interval(custom)

    disabled = ExchangeCapabilities(intervals={"onemin": False}, limit=100)
    assert not disabled.supports_interval(ONE_MIN)

    print("✓ Test passed!")


def test_validate_interval_error():
    caps = make_capabilities()

    with pytest.raises(UnsupportedIntervalError) as excinfo:
        caps.validate_interval(ONE_YEAR)

    assert excinfo.value.interval == ONE_YEAR
    assert str(excinfo.value) == "oneyear interval unsupported by exchange"
    assert excinfo.value.long_message() == "8760h0m0s interval unsupported by exchange"

    caps.validate_interval(ONE_HOUR)


def test_check_request_limits():
    """A year of daily candles exceeds a 300 candle limit, 100 days do not."""
    print("\n=== Test 2: Request Limits ===")

    caps = make_capabilities()

    with pytest.raises(RequestExceedsLimitsError) as excinfo:
        caps.check_request_limits(START, END, ONE_DAY)

    print(f"Error: {excinfo.value}")
    assert excinfo.value.requested == 365
    assert excinfo.value.limit == 300

    assert caps.check_request_limits(START, START + timedelta(days=100), ONE_DAY) == 100
    assert caps.check_request_limits(START, START + timedelta(days=300), ONE_DAY) == 300

    print("✓ Test passed!")


def test_plan_requests():
    caps = make_capabilities()

    groups = caps.plan_requests(START, END, ONE_DAY)

    assert groups == plan_ranges(START, END, ONE_DAY, 300)
    assert [len(g) for g in groups] == [300, 65]

    with pytest.raises(UnsupportedIntervalError):
        caps.plan_requests(START, END, ONE_YEAR)


def test_plan_requests_without_limit():
    caps = ExchangeCapabilities.with_intervals(ONE_DAY)

    with pytest.raises(InvalidLimitError):
        caps.plan_requests(START, END, ONE_DAY)
