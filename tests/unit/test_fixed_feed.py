"""Unit tests for the in-memory price feed."""
from __future__ import annotations

from dsc_engine.oracles import FixedPriceFeed


class TestFixedPriceFeed:
    def test_known_ref_is_fresh(self) -> None:
        feed = FixedPriceFeed({"ETH/USD": 2000 * 10**8})
        reading = feed.latest_price("ETH/USD")
        assert reading.price == 2000 * 10**8
        assert reading.is_fresh

    def test_unknown_ref_is_stale(self) -> None:
        reading = FixedPriceFeed().latest_price("ETH/USD")
        assert reading.price == 0
        assert not reading.is_fresh

    def test_mark_stale_keeps_price(self) -> None:
        feed = FixedPriceFeed({"ETH/USD": 2000 * 10**8})
        feed.mark_stale("ETH/USD")
        reading = feed.latest_price("ETH/USD")
        assert reading.price == 2000 * 10**8
        assert not reading.is_fresh

    def test_set_price_clears_stale(self) -> None:
        feed = FixedPriceFeed({"ETH/USD": 2000 * 10**8})
        feed.mark_stale("ETH/USD")
        feed.set_price("ETH/USD", 1800 * 10**8)
        reading = feed.latest_price("ETH/USD")
        assert reading.price == 1800 * 10**8
        assert reading.is_fresh
