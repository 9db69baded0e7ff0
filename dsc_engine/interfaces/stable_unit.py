"""Stable unit authority protocol — owner-gated mint/burn."""
from typing import Protocol

from .asset import TransferableAsset


class StableUnitAuthority(TransferableAsset, Protocol):
    """Mintable/burnable ledger whose supply is controlled by one owner."""

    @property
    def owner(self) -> str: ...

    def mint(self, caller: str, to: str, amount: int) -> bool: ...

    def burn(self, caller: str, amount: int) -> None: ...
