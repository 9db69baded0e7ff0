"""In-process fungible token ledger (ERC-20 style balances and allowances)."""
from __future__ import annotations

import logging
from typing import Any

from ..constants import NULL_ADDRESS
from ..errors import ZeroAmountError
from ..models import Event

logger = logging.getLogger(__name__)


class TokenLedger:
    """Balances, allowances and transfers for one token.

    Failed transfers return ``False`` instead of raising, so callers must check
    the result. Balances that drop to zero are removed.
    """

    def __init__(self, address: str, symbol: str, decimals: int = 18) -> None:
        self._address = address
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        self.events: list[Event] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._address!r}, {self.symbol!r})"

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set ``spender``'s allowance over ``owner``'s balance."""
        if amount < 0:
            raise ValueError("Allowance cannot be negative")
        if amount:
            self._allowances[(owner, spender)] = amount
        else:
            self._allowances.pop((owner, spender), None)
        self._emit("Approval", owner=owner, spender=spender, amount=amount)
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``."""
        if not self._move(sender, recipient, amount):
            return False
        self._after_transfer(sender, recipient, amount)
        return True

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int
    ) -> bool:
        """Move ``amount`` from ``owner`` to ``recipient`` using an allowance."""
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            logger.warning(
                "%s transfer_from rejected: allowance %d < %d (%s -> %s)",
                self.symbol,
                allowed,
                amount,
                owner,
                recipient,
            )
            return False
        if not self._move(owner, recipient, amount):
            return False
        remaining = allowed - amount
        if remaining:
            self._allowances[(owner, spender)] = remaining
        else:
            self._allowances.pop((owner, spender), None)
        self._after_transfer(owner, recipient, amount)
        return True

    def faucet(self, to: str, amount: int) -> None:
        """Create ``amount`` new tokens for ``to`` (funding for runs and tests)."""
        if amount <= 0:
            raise ZeroAmountError("Faucet amount must be more than zero")
        self._credit(to, amount)
        self._total_supply += amount
        self._emit("Transfer", sender=NULL_ADDRESS, recipient=to, amount=amount)

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> Any:
        return (
            dict(self._balances),
            dict(self._allowances),
            self._total_supply,
            len(self.events),
        )

    def restore(self, state: Any) -> None:
        balances, allowances, total_supply, event_count = state
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total_supply = total_supply
        del self.events[event_count:]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _after_transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Hook run after every successful transfer. No-op by default."""

    def _move(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError("Transfer amount cannot be negative")
        if not recipient or recipient == NULL_ADDRESS:
            logger.warning("%s transfer to the null address rejected", self.symbol)
            return False
        balance = self.balance_of(sender)
        if amount > balance:
            logger.warning(
                "%s transfer rejected: balance %d < %d (%s -> %s)",
                self.symbol,
                balance,
                amount,
                sender,
                recipient,
            )
            return False
        self._debit(sender, amount)
        self._credit(recipient, amount)
        self._emit("Transfer", sender=sender, recipient=recipient, amount=amount)
        return True

    def _credit(self, holder: str, amount: int) -> None:
        self._balances[holder] = self._balances.get(holder, 0) + amount

    def _debit(self, holder: str, amount: int) -> None:
        remaining = self._balances.get(holder, 0) - amount
        if remaining:
            self._balances[holder] = remaining
        else:
            self._balances.pop(holder, None)

    def _emit(self, name: str, **args: Any) -> None:
        self.events.append(Event(name=name, args=args))
