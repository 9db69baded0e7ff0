"""Pure fixed-point accounting functions — no state, no I/O.

All amounts are integers scaled by ``PRECISION`` (1e18). Prices are integers
with ``FEED_DECIMALS`` (8) decimals, lifted by ``ADDITIONAL_FEED_PRECISION``.
Division always rounds down.
"""
from __future__ import annotations

from decimal import Decimal

from .constants import (
    ADDITIONAL_FEED_PRECISION,
    FEED_DECIMALS,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    PRECISION,
)


def usd_value(price: int, amount: int) -> int:
    """USD value (1e18) of ``amount`` tokens at an 8-decimal ``price``.

    Example:
        15e18 tokens at 2000e8 → 30_000e18
    """
    return (price * ADDITIONAL_FEED_PRECISION) * amount // PRECISION


def token_amount_from_usd(price: int, usd_amount_in_wei: int) -> int:
    """Inverse of :func:`usd_value`.

    Example:
        100e18 USD at 2000e8 → 0.05e18 tokens
    """
    return usd_amount_in_wei * PRECISION // (price * ADDITIONAL_FEED_PRECISION)


def calculate_health_factor(
    total_dsc_minted: int,
    collateral_value_in_usd: int,
    compound_threshold: bool = True,
) -> int:
    """Health factor (1e18 = 1.0) of a position.

    health_factor = collateral * threshold% [* threshold%] * 1e18 / debt

    The threshold is applied twice when ``compound_threshold`` is set, which
    reproduces the historical arithmetic of the protocol. A position without
    debt is infinitely healthy.
    """
    if total_dsc_minted == 0:
        return MAX_HEALTH_FACTOR
    adjusted = collateral_value_in_usd * LIQUIDATION_THRESHOLD // LIQUIDATION_PRECISION
    if compound_threshold:
        adjusted = adjusted * LIQUIDATION_THRESHOLD // LIQUIDATION_PRECISION
    # Scaled by PRECISION so the result compares against MIN_HEALTH_FACTOR (1e18).
    return adjusted * PRECISION // total_dsc_minted


def liquidation_bonus(token_amount: int) -> int:
    """Flat incentive paid on top of the collateral covering the debt."""
    return token_amount * LIQUIDATION_BONUS // LIQUIDATION_PRECISION


def checked_sub(balance: int, amount: int) -> int | None:
    """Subtract without wrapping; ``None`` signals an underflow."""
    if amount > balance:
        return None
    return balance - amount


def format_health_factor(health_factor: int) -> str:
    """Human-readable health factor, e.g. ``1.50`` or ``∞``."""
    if health_factor == MAX_HEALTH_FACTOR:
        return "∞"
    return f"{health_factor / PRECISION:.2f}"


def to_wei(value: int | float | str | Decimal, decimals: int = 18) -> int:
    """Scale a human amount to integer base units.

    Examples:
        "0.05" → 50000000000000000
        10     → 10000000000000000000
    """
    scaled = Decimal(str(value)) * 10**decimals
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value} has more than {decimals} decimals")
    return int(scaled)


def to_feed_price(value: int | float | str | Decimal) -> int:
    """USD price to the feed's 8-decimal integer, e.g. 2000 → 200000000000."""
    return to_wei(value, FEED_DECIMALS)


def from_wei(amount: int, decimals: int = 18) -> Decimal:
    return Decimal(amount) / Decimal(10**decimals)
