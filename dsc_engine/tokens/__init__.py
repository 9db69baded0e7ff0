"""Token ledgers."""
from .ledger import TokenLedger
from .stable_unit import StableUnit

__all__ = ["TokenLedger", "StableUnit"]
