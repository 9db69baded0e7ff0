"""Exception hierarchy for the engine and the stable unit.

Every error an operation can raise is a subclass of ``DSCEngineError`` so
callers can tell kinds apart with ``isinstance`` rather than by message.
"""
from __future__ import annotations


class DSCEngineError(Exception):
    """Base exception for dsc-engine."""


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------


class ConfigurationError(DSCEngineError):
    """Construction-time configuration is invalid; no instance is created."""


class ValidationError(DSCEngineError):
    """Input rejected before any state change."""


class InsolvencyError(DSCEngineError):
    """Operation would leave a position under-collateralized."""


class AuthorizationError(DSCEngineError):
    """Caller is not allowed to perform the operation."""


class ExternalCallError(DSCEngineError):
    """An asset transfer, mint, burn or price read failed."""


# ---------------------------------------------------------------------------
# Engine errors
# ---------------------------------------------------------------------------


class InvalidConfigurationError(ConfigurationError):
    """Collateral tokens and price references do not line up."""


class ZeroAmountError(ValidationError):
    """Amount must be more than zero."""


class UnregisteredAssetError(ValidationError):
    """Asset is not in the collateral registry."""

    def __init__(self, asset: str) -> None:
        super().__init__(f"Asset '{asset}' is not an approved collateral")
        self.asset = asset


class InsufficientBalanceError(ValidationError):
    """A recorded balance is lower than the amount being removed."""

    def __init__(self, what: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient {what}: requested {requested}, available {available}"
        )
        self.available = available
        self.requested = requested


class HealthFactorBrokenError(InsolvencyError):
    """Health factor fell below the minimum."""

    def __init__(self, user: str, health_factor: int) -> None:
        super().__init__(
            f"Health factor of {user} is broken: {health_factor}"
        )
        self.user = user
        self.health_factor = health_factor


class HealthFactorOkError(AuthorizationError):
    """Liquidation attempted on a solvent account."""

    def __init__(self, user: str, health_factor: int) -> None:
        super().__init__(
            f"Health factor of {user} is ok ({health_factor}); cannot liquidate"
        )
        self.user = user
        self.health_factor = health_factor


class TransferFailedError(ExternalCallError):
    """A token transfer returned False."""


class MintFailedError(ExternalCallError):
    """The stable unit declined to mint."""


class StalePriceError(ExternalCallError):
    """Price reading is stale or not positive."""

    def __init__(self, price_ref: str, price: int) -> None:
        super().__init__(f"Stale or invalid price for '{price_ref}': {price}")
        self.price_ref = price_ref
        self.price = price


class ReentrantCallError(DSCEngineError):
    """A mutating entry point was entered while another was in flight."""

    def __init__(self, entry_point: str) -> None:
        super().__init__(f"Reentrant call to '{entry_point}' rejected")
        self.entry_point = entry_point


# ---------------------------------------------------------------------------
# Stable unit errors
# ---------------------------------------------------------------------------


class StableUnitError(DSCEngineError):
    """Base exception for stable unit mint/burn/ownership failures."""


class NotOwnerError(StableUnitError, AuthorizationError):
    """Caller is not the stable unit owner."""

    def __init__(self, caller: str) -> None:
        super().__init__(f"Caller '{caller}' is not the owner")
        self.caller = caller


class OwnershipLockedError(StableUnitError, AuthorizationError):
    """Ownership was already handed off and cannot move again."""


class MintToZeroAddressError(StableUnitError, ValidationError):
    """Cannot mint to the null address."""


class BurnExceedsBalanceError(StableUnitError, ValidationError):
    """Burn amount exceeds the caller's balance."""
