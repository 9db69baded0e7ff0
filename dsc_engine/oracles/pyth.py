"""Pyth Network price feed with a staleness window."""
from __future__ import annotations

import logging
import ssl
import time
from typing import Callable, Iterable

import aiohttp
import certifi

from ..config import PythConfig
from ..constants import DEFAULT_PRICE_TIMEOUT, FEED_DECIMALS
from ..models import PriceReading

logger = logging.getLogger(__name__)


def _normalize_feed_id(feed_id: str) -> str:
    """Hermes returns ids without the ``0x`` prefix."""
    feed_id = feed_id.lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def to_feed_decimals(price: int, expo: int) -> int:
    """Rescale a Pyth ``price * 10^expo`` to an integer with FEED_DECIMALS.

    Examples:
        (350000000, -8) → 350000000
        (2000123, -3)   → 200012300000
    """
    shift = expo + FEED_DECIMALS
    if shift >= 0:
        return price * 10**shift
    return price // 10**-shift


class PythPriceFeed:
    """Cache Pyth Hermes prices and serve them with a freshness verdict.

    ``refresh`` is the only network call; ``latest_price`` reads the cache, so
    the engine never blocks on I/O. A reference that was never fetched, or
    whose last publish time is older than ``max_age_seconds``, reads as stale.
    """

    def __init__(
        self,
        config: PythConfig,
        price_refs: Iterable[str] = (),
        max_age_seconds: int = DEFAULT_PRICE_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout
        self.max_age_seconds = max_age_seconds
        self.price_refs = tuple(price_refs)
        self._clock = clock
        self._cache: dict[str, tuple[int, int]] = {}

    async def refresh(self, price_refs: Iterable[str] | None = None) -> int:
        """Fetch the latest prices from Hermes.

        Args:
            price_refs: Feed ids to fetch. Defaults to the ids given at
                construction.

        Returns:
            Number of feeds updated. HTTP and connection errors are logged and
            leave the cache untouched.
        """
        refs = tuple(price_refs) if price_refs is not None else self.price_refs
        feed_ids = sorted({_normalize_feed_id(ref) for ref in refs if ref})
        if not feed_ids:
            return 0

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        updated = 0
        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return 0

                    data = await response.json()
                    for item in data.get("parsed", []):
                        feed_id = _normalize_feed_id(item.get("id", ""))
                        price_data = item.get("price", {})
                        price = to_feed_decimals(
                            int(price_data.get("price", 0)),
                            int(price_data.get("expo", 0)),
                        )
                        publish_time = int(price_data.get("publish_time", 0))
                        self._cache[feed_id] = (price, publish_time)
                        updated += 1
                        logger.debug(
                            "Pyth %s: %d (published %d)", feed_id, price, publish_time
                        )

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        logger.info("Refreshed %d/%d Pyth feeds", updated, len(feed_ids))
        return updated

    def latest_price(self, price_ref: str) -> PriceReading:
        cached = self._cache.get(_normalize_feed_id(price_ref))
        if cached is None:
            return PriceReading(price=0, is_fresh=False)
        price, publish_time = cached
        age = self._clock() - publish_time
        return PriceReading(price=price, is_fresh=0 <= age <= self.max_age_seconds)
