"""
Configuration constants and default settings for kline construction.
"""

from typing import Dict, List

# Word returned for intervals missing from the well-known interval table
NOT_FOUND_WORD = "notfound"

# Message templates (the %s is filled with an interval word or duration)
ERR_UNSUPPORTED_INTERVAL = "%s interval unsupported by exchange"
ERR_REQUEST_EXCEEDS_EXCHANGE_LIMITS = (
    "requested data would exceed exchange limits please lower range "
    "or split the request with plan_ranges"
)

# Standard short interval names in seconds (exchange-style notation)
STANDARD_INTERVALS: Dict[str, int] = {
    '1m': 60,
    '3m': 180,
    '5m': 300,
    '10m': 600,
    '15m': 900,
    '30m': 1800,
    '1h': 3600,
    '2h': 7200,
    '4h': 14400,
    '6h': 21600,
    '8h': 28800,
    '12h': 43200,
    '1d': 86400,
    '3d': 259200,
    '1w': 604800,
    '15d': 1296000,
    '2w': 1209600,
    '1M': 2678400,    # 31 days
    '1y': 31536000,   # 365 days
}

# Aggregated OHLCV frame columns
OHLCV_COLUMNS: List[str] = [
    'open_time',
    'open',
    'high',
    'low',
    'close',
    'volume',
    'count',
]

# Timestamp format detection thresholds for integer epoch columns
MILLISECOND_THRESHOLD = 1e11   # Values above this are at least milliseconds
MICROSECOND_THRESHOLD = 1e14   # Values above this are at least microseconds
NANOSECOND_THRESHOLD = 1e17    # Values above this are nanoseconds
