"""Fixed protocol constants — all monetary math is integer fixed-point."""
from __future__ import annotations

# Fixed-point scale for USD values, token amounts and the health factor.
PRECISION = 10**18

# Price feeds report 8 decimals; this lifts them to PRECISION.
FEED_DECIMALS = 8
ADDITIONAL_FEED_PRECISION = 10**10

# Percentages are expressed over LIQUIDATION_PRECISION.
LIQUIDATION_THRESHOLD = 50
LIQUIDATION_BONUS = 10
LIQUIDATION_PRECISION = 100

MIN_HEALTH_FACTOR = 10**18
MAX_HEALTH_FACTOR = 2**256 - 1

NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# Staleness window of the price feed adapters, in seconds.
DEFAULT_PRICE_TIMEOUT = 3 * 60 * 60
