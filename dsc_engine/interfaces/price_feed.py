"""Price feed protocol — price oracle abstraction."""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..models import PriceReading


class PriceFeed(Protocol):
    """Abstract interface for reading the latest price of an oracle reference."""

    def latest_price(self, price_ref: str) -> PriceReading: ...
