"""Protocol interfaces for the collateralized-debt engine."""
from .asset import TransferableAsset
from .price_feed import PriceFeed
from .snapshot import Snapshottable
from .stable_unit import StableUnitAuthority

__all__ = ["PriceFeed", "Snapshottable", "StableUnitAuthority", "TransferableAsset"]
