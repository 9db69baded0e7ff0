"""Price feed adapters."""
from __future__ import annotations

from ..config import AppConfig
from ..interfaces.price_feed import PriceFeed
from .fixed import FixedPriceFeed
from .pyth import PythPriceFeed

__all__ = ["FixedPriceFeed", "PythPriceFeed", "build_price_feed"]


def build_price_feed(config: AppConfig) -> PriceFeed:
    """Build the feed selected by ``price_oracle.provider``."""
    oracle = config.price_oracle
    if oracle.provider == "fixed":
        return FixedPriceFeed(oracle.fixed.prices)
    return PythPriceFeed(
        oracle.pyth,
        price_refs=[c.price_ref for c in config.collateral],
        max_age_seconds=oracle.max_price_age_seconds,
    )
