"""In-memory price feed for offline runs."""
from __future__ import annotations

import logging
from typing import Mapping

from ..models import PriceReading

logger = logging.getLogger(__name__)


class FixedPriceFeed:
    """Serve prices set by hand; unknown references read as stale."""

    def __init__(self, prices: Mapping[str, int] | None = None) -> None:
        self._prices: dict[str, int] = dict(prices or {})
        self._stale: set[str] = set()

    def set_price(self, price_ref: str, price: int) -> None:
        self._prices[price_ref] = int(price)
        self._stale.discard(price_ref)
        logger.info("Price of %s set to %d", price_ref, price)

    def mark_stale(self, price_ref: str) -> None:
        self._stale.add(price_ref)

    def latest_price(self, price_ref: str) -> PriceReading:
        if price_ref not in self._prices:
            return PriceReading(price=0, is_fresh=False)
        return PriceReading(
            price=self._prices[price_ref],
            is_fresh=price_ref not in self._stale,
        )
