"""
Test Suite for Trade Validation and Sorting

Verifies:
1. Empty and missing batches are rejected
2. Malformed records (zero timestamp, non-positive price/amount) are rejected
3. Valid batches come back in ascending timestamp order
4. Ties keep their input order
5. Item invariant checks

Run tests with: pytest tests/test_trade_validation.py -v
"""

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from kline import (
    TradeRecord,
    Candle,
    CurrencyPair,
    Item,
    validate_trades,
    check_item,
    EmptyInputError,
    InvalidRecordError,
    KlineError,
    ONE_MIN,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_empty_input():
    """None and [] both fail."""
    print("\n=== Test 1: Empty Input ===")

    with pytest.raises(EmptyInputError):
        validate_trades(None)

    with pytest.raises(EmptyInputError):
        validate_trades([])

    print("✓ Test passed!")


def test_zero_price_and_amount():
    """Records missing price and amount fail."""
    trades = [
        TradeRecord(NOW + timedelta(minutes=2), "2", 0, 0),
        TradeRecord(NOW + timedelta(minutes=1), "1", 0, 0),
        TradeRecord(NOW + timedelta(minutes=3), "3", 0, 0),
    ]
    with pytest.raises(InvalidRecordError) as excinfo:
        validate_trades(trades)

    assert [v[0] for v in excinfo.value.violations] == [0, 1, 2]


def test_zero_price():
    trades = [TradeRecord(NOW + timedelta(minutes=2), "2", price=0, amount=1)]
    with pytest.raises(InvalidRecordError) as excinfo:
        validate_trades(trades)

    index, tid, reasons = excinfo.value.violations[0]
    assert (index, tid) == (0, "2")
    assert any("price" in reason for reason in reasons)


def test_zero_timestamp():
    """A missing timestamp or one at the epoch counts as zero."""
    for timestamp in [None, datetime(1970, 1, 1, tzinfo=timezone.utc)]:
        trades = [TradeRecord(timestamp, "2", price=1000, amount=1)]
        with pytest.raises(InvalidRecordError) as excinfo:
            validate_trades(trades)
        assert "timestamp is zero" in excinfo.value.violations[0][2]


def test_negative_and_nan_values():
    trades = [
        TradeRecord(NOW, "a", price=-1.0, amount=1.0),
        TradeRecord(NOW, "b", price=float("nan"), amount=1.0),
        TradeRecord(NOW, "c", price=10.0, amount=-3.0),
        TradeRecord(NOW, "d", price=10.0, amount=float("nan")),
    ]
    with pytest.raises(InvalidRecordError) as excinfo:
        validate_trades(trades)

    assert [v[1] for v in excinfo.value.violations] == ["a", "b", "c", "d"]


def test_one_bad_record_fails_whole_batch():
    """A single bad record fails validation regardless of the others."""
    print("\n=== Test 2: One Bad Record ===")

    trades = [
        TradeRecord(NOW + timedelta(seconds=i), str(i), price=100.0 + i, amount=1.0)
        for i in range(1, 50)
    ]
    trades.insert(17, TradeRecord(NOW, "bad", price=100.0, amount=0.0))
    original_order = [t.tid for t in trades]

    with pytest.raises(InvalidRecordError) as excinfo:
        validate_trades(trades)

    print(f"Error: {excinfo.value}")
    assert len(excinfo.value.violations) == 1
    assert excinfo.value.violations[0][:2] == (17, "bad")
    assert "bad" in str(excinfo.value)
    # Nothing is reordered when validation fails
    assert [t.tid for t in trades] == original_order

    print("✓ Test passed!")


def test_sorts_out_of_order_trades():
    """Out of order but valid records come back ascending."""
    print("\n=== Test 3: Chronological Sort ===")

    trades = [
        TradeRecord(NOW + timedelta(minutes=2), "2", price=1000, amount=1),
        TradeRecord(NOW + timedelta(minutes=1), "1", price=1001, amount=1),
        TradeRecord(NOW + timedelta(minutes=3), "3", price=1001.5, amount=1),
    ]

    result = validate_trades(trades)

    assert result is trades
    assert [t.tid for t in trades] == ["1", "2", "3"]

    print("✓ Test passed!")


def test_equal_timestamps_keep_input_order():
    trades = [
        TradeRecord(NOW + timedelta(seconds=5), "a", price=1, amount=1),
        TradeRecord(NOW + timedelta(seconds=5), "b", price=2, amount=1),
        TradeRecord(NOW, "c", price=3, amount=1),
        TradeRecord(NOW + timedelta(seconds=5), "d", price=4, amount=1),
    ]

    validate_trades(trades)

    assert [t.tid for t in trades] == ["c", "a", "b", "d"]


def test_decimal_prices_and_amounts():
    """Decimal quantities from exchange payloads validate like floats."""
    print("\n=== Test 4: Decimal Values ===")

    trades = [
        TradeRecord(NOW + timedelta(seconds=1), "1", price=Decimal("100"), amount=Decimal("0.5")),
        TradeRecord(NOW, "0", price=Decimal("99.95"), amount=Decimal("2")),
    ]
    assert [t.tid for t in validate_trades(trades)] == ["0", "1"]

    bad = [
        TradeRecord(NOW, "zero", price=Decimal("0"), amount=Decimal("1")),
        TradeRecord(NOW, "nan", price=Decimal("NaN"), amount=Decimal("1")),
        TradeRecord(NOW, "neg", price=Decimal("10"), amount=Decimal("-1")),
    ]
    with pytest.raises(InvalidRecordError) as excinfo:
        validate_trades(bad)

    assert [v[1] for v in excinfo.value.violations] == ["zero", "nan", "neg"]

    print("✓ Test passed!")


def test_tuple_input_returns_sorted_list():
    trades = (
        TradeRecord(NOW + timedelta(minutes=1), "b", price=2, amount=1),
        TradeRecord(NOW, "a", price=1, amount=1),
    )

    result = validate_trades(trades)

    assert isinstance(result, list)
    assert [t.tid for t in result] == ["a", "b"]
    assert [t.tid for t in trades] == ["b", "a"]


def test_naive_timestamps_are_utc():
    trades = [
        TradeRecord(datetime(2024, 3, 1, 12, 0, 30), "naive", price=1, amount=1),
        TradeRecord(datetime(2024, 3, 1, 12, 0, 10, tzinfo=timezone.utc), "aware", price=1, amount=1),
    ]

    validate_trades(trades)

    assert [t.tid for t in trades] == ["aware", "naive"]


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        validate_trades([])
    assert issubclass(InvalidRecordError, KlineError)


def test_check_item_reports_violations():
    """check_item flags broken OHLC bounds, volumes and ordering."""
    print("\n=== Test 5: Item Checks ===")

    good = Candle(NOW, open=10, high=12, low=9, close=11, volume=5)
    bad_high = Candle(NOW + timedelta(minutes=1), open=10, high=10.5, low=9, close=11, volume=5)
    bad_volume = Candle(NOW + timedelta(minutes=2), open=10, high=12, low=9, close=11, volume=-1)
    duplicate = Candle(NOW + timedelta(minutes=2), open=10, high=12, low=9, close=11, volume=1)

    item = Item("Binance", CurrencyPair("BTC", "USD"), "spot", ONE_MIN,
                [good, bad_high, bad_volume, duplicate])
    result = check_item(item)

    print(result)
    assert not result.passed
    assert result.total_candles == 4
    assert result.ohlc_violations == [1]
    assert result.volume_violations == [2]
    assert result.ordering_violations == [3]

    clean = Item("Binance", CurrencyPair("BTC", "USD"), "spot", ONE_MIN, [good])
    assert check_item(clean).passed

    print("✓ Test passed!")
