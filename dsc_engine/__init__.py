"""Collateralized-debt engine for an over-collateralized stable unit."""
from .engine import DSCEngine
from .tokens import StableUnit, TokenLedger

__all__ = ["DSCEngine", "StableUnit", "TokenLedger"]

__version__ = "0.1.0"
