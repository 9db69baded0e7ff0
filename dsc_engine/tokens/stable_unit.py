"""Stable unit — burnable, mintable ledger controlled by a single owner."""
from __future__ import annotations

import logging
from typing import Any

from ..constants import NULL_ADDRESS
from ..errors import (
    BurnExceedsBalanceError,
    MintToZeroAddressError,
    NotOwnerError,
    OwnershipLockedError,
    ZeroAmountError,
)
from .ledger import TokenLedger

logger = logging.getLogger(__name__)


class StableUnit(TokenLedger):
    """Pegged synthetic asset whose supply only the owner can change.

    Ownership starts with the deployer and is handed to the engine exactly once
    during bootstrap.
    """

    def __init__(
        self,
        owner: str,
        address: str = "dsc",
        symbol: str = "DSC",
        name: str = "DecentralizedStableCoin",
    ) -> None:
        super().__init__(address, symbol, decimals=18)
        self.name = name
        self._owner = owner
        self._ownership_locked = False

    @property
    def owner(self) -> str:
        return self._owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand supply control to ``new_owner``. Allowed once."""
        self._only_owner(caller)
        if self._ownership_locked:
            raise OwnershipLockedError("Ownership has already been handed off")
        if not new_owner or new_owner == NULL_ADDRESS:
            raise ValueError("New owner cannot be the null address")
        previous, self._owner = self._owner, new_owner
        self._ownership_locked = True
        self._emit("OwnershipTransferred", previous_owner=previous, new_owner=new_owner)
        logger.info("%s ownership transferred: %s -> %s", self.symbol, previous, new_owner)

    def mint(self, caller: str, to: str, amount: int) -> bool:
        self._only_owner(caller)
        if not to or to == NULL_ADDRESS:
            raise MintToZeroAddressError("Cannot mint to the null address")
        if amount <= 0:
            raise ZeroAmountError("Mint amount must be more than zero")
        self._credit(to, amount)
        self._total_supply += amount
        self._emit("Transfer", sender=NULL_ADDRESS, recipient=to, amount=amount)
        return True

    def burn(self, caller: str, amount: int) -> None:
        """Destroy ``amount`` from the caller's own balance."""
        self._only_owner(caller)
        if amount <= 0:
            raise ZeroAmountError("Burn amount must be more than zero")
        balance = self.balance_of(caller)
        if amount > balance:
            raise BurnExceedsBalanceError(
                f"Burn amount {amount} exceeds balance {balance}"
            )
        self._debit(caller, amount)
        self._total_supply -= amount
        self._emit("Transfer", sender=caller, recipient=NULL_ADDRESS, amount=amount)

    def snapshot(self) -> Any:
        return (super().snapshot(), self._owner, self._ownership_locked)

    def restore(self, state: Any) -> None:
        ledger_state, self._owner, self._ownership_locked = state
        super().restore(ledger_state)

    def _only_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise NotOwnerError(caller)
