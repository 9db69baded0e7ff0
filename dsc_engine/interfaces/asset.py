"""Transferable asset protocol — token transfer abstraction."""
from typing import Protocol


class TransferableAsset(Protocol):
    """Abstract interface for a fungible token the engine can move.

    Transfers report failure by returning ``False``; callers must check.
    """

    @property
    def address(self) -> str: ...

    def balance_of(self, holder: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> bool: ...
