"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .errors import InvalidConfigurationError, UnregisteredAssetError
from .interfaces.asset import TransferableAsset


@dataclass(frozen=True)
class PriceReading:
    """One price feed answer: 8-decimal price plus freshness verdict."""

    price: int
    is_fresh: bool


@dataclass(frozen=True)
class Event:
    """Append-only record of a state change."""

    name: str
    args: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CollateralRegistry:
    """Approved collateral assets, fixed at construction.

    ``assets`` keeps the construction order; ``tokens`` and ``price_refs`` are
    read-only views keyed by asset address.
    """

    assets: tuple[str, ...]
    tokens: Mapping[str, TransferableAsset]
    price_refs: Mapping[str, str]

    @classmethod
    def from_lists(
        cls,
        collateral_tokens: Sequence[TransferableAsset],
        price_refs: Sequence[str],
    ) -> CollateralRegistry:
        """Build the registry from parallel lists, rejecting any mismatch."""
        if len(collateral_tokens) != len(price_refs):
            raise InvalidConfigurationError(
                "Token addresses and price feed addresses must be the same length "
                f"({len(collateral_tokens)} != {len(price_refs)})"
            )
        if not collateral_tokens:
            raise InvalidConfigurationError("At least one collateral token is required")

        tokens: dict[str, TransferableAsset] = {}
        refs: dict[str, str] = {}
        for token, ref in zip(collateral_tokens, price_refs):
            address = token.address
            if not address:
                raise InvalidConfigurationError("Collateral token has no address")
            if address in tokens:
                raise InvalidConfigurationError(
                    f"Collateral token '{address}' registered twice"
                )
            if not ref:
                raise InvalidConfigurationError(
                    f"Collateral token '{address}' has no price feed"
                )
            tokens[address] = token
            refs[address] = ref

        return cls(
            assets=tuple(tokens),
            tokens=MappingProxyType(tokens),
            price_refs=MappingProxyType(refs),
        )

    def __contains__(self, asset: object) -> bool:
        return asset in self.price_refs

    def token(self, asset: str) -> TransferableAsset:
        if asset not in self.tokens:
            raise UnregisteredAssetError(asset)
        return self.tokens[asset]

    def price_ref(self, asset: str) -> str:
        if asset not in self.price_refs:
            raise UnregisteredAssetError(asset)
        return self.price_refs[asset]


@dataclass(frozen=True)
class AccountInformation:
    """Debt and collateral value of one account."""

    total_dsc_minted: int
    collateral_value_in_usd: int


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of a single liquidation call."""

    user: str
    liquidator: str
    asset: str
    debt_covered: int
    token_amount_from_debt: int
    bonus_collateral: int
    starting_health_factor: int
    ending_health_factor: int

    @property
    def total_collateral_redeemed(self) -> int:
        return self.token_amount_from_debt + self.bonus_collateral
