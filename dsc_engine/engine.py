"""Collateral/debt engine — custody, solvency checks, mint/burn and liquidation."""
from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from . import accounting
from .constants import (
    ADDITIONAL_FEED_PRECISION,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from .errors import (
    HealthFactorBrokenError,
    HealthFactorOkError,
    InsufficientBalanceError,
    MintFailedError,
    StalePriceError,
    TransferFailedError,
    UnregisteredAssetError,
    ZeroAmountError,
)
from .guard import ReentrancyGuard, atomic
from .interfaces.asset import TransferableAsset
from .interfaces.price_feed import PriceFeed
from .interfaces.stable_unit import StableUnitAuthority
from .models import AccountInformation, CollateralRegistry, Event, LiquidationResult

logger = logging.getLogger(__name__)


class DSCEngine:
    """Owns every collateral and debt balance and decides solvency.

    Mutating entry points take the caller's address first. Each one runs under
    the reentrancy guard and rolls back engine, stable unit and collateral
    token state if anything inside it raises.
    """

    def __init__(
        self,
        collateral_tokens: Sequence[TransferableAsset],
        price_refs: Sequence[str],
        stable_unit: StableUnitAuthority,
        price_feed: PriceFeed,
        address: str = "dsc-engine",
        compound_threshold: bool = True,
    ) -> None:
        self._registry = CollateralRegistry.from_lists(collateral_tokens, price_refs)
        self._dsc = stable_unit
        self._price_feed = price_feed
        self._address = address
        self._compound_threshold = compound_threshold
        self._guard = ReentrancyGuard()

        self._collateral_deposited: dict[str, dict[str, int]] = {}
        self._dsc_minted: dict[str, int] = {}
        self.events: list[Event] = []

        logger.info(
            "Engine %s created with collateral %s",
            address,
            ", ".join(self._registry.assets),
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def registry(self) -> CollateralRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, entry_point: str) -> Iterator[None]:
        """Guard plus rollback for one entry point.

        Snapshots copy every participant's full balance maps, so each call
        costs time proportional to the number of holders.
        """
        with self._guard.enter(entry_point):
            participants = [self, self._dsc, *self._registry.tokens.values()]
            with atomic(participants):
                yield

    def snapshot(self) -> Any:
        return (
            copy.deepcopy(self._collateral_deposited),
            dict(self._dsc_minted),
            len(self.events),
        )

    def restore(self, state: Any) -> None:
        collateral, minted, event_count = state
        self._collateral_deposited = copy.deepcopy(collateral)
        self._dsc_minted = dict(minted)
        del self.events[event_count:]

    # ------------------------------------------------------------------
    # External entry points
    # ------------------------------------------------------------------

    def deposit_collateral_and_mint_dsc(
        self, caller: str, asset: str, amount_collateral: int, amount_dsc_to_mint: int
    ) -> None:
        """Deposit collateral and mint against it in one operation."""
        with self._transaction("deposit_collateral_and_mint_dsc"):
            self._deposit_collateral(caller, asset, amount_collateral)
            self._mint_dsc(caller, amount_dsc_to_mint)

    def deposit_collateral(self, caller: str, asset: str, amount: int) -> None:
        with self._transaction("deposit_collateral"):
            self._deposit_collateral(caller, asset, amount)

    def redeem_collateral_for_dsc(
        self, caller: str, asset: str, amount_collateral: int, amount_dsc_to_burn: int
    ) -> None:
        """Burn debt, then withdraw collateral, then check solvency once."""
        with self._transaction("redeem_collateral_for_dsc"):
            self._require_more_than_zero(amount_collateral)
            minted = self._dsc_minted.get(caller, 0)
            if minted < amount_dsc_to_burn:
                raise InsufficientBalanceError("minted DSC", minted, amount_dsc_to_burn)
            self._burn_dsc(amount_dsc_to_burn, on_behalf_of=caller, dsc_from=caller)
            self._redeem_collateral(asset, amount_collateral, caller, caller)
            self._revert_if_health_factor_is_broken(caller)

    def redeem_collateral(self, caller: str, asset: str, amount: int) -> None:
        """Withdraw collateral as long as the position stays solvent."""
        with self._transaction("redeem_collateral"):
            self._require_more_than_zero(amount)
            self._redeem_collateral(asset, amount, caller, caller)
            self._revert_if_health_factor_is_broken(caller)

    def mint_dsc(self, caller: str, amount: int) -> None:
        with self._transaction("mint_dsc"):
            self._mint_dsc(caller, amount)

    def burn_dsc(self, caller: str, amount: int) -> None:
        """Repay debt with stable units held by the caller."""
        with self._transaction("burn_dsc"):
            self._burn_dsc(amount, on_behalf_of=caller, dsc_from=caller)
            self._revert_if_health_factor_is_broken(caller)

    def liquidate(
        self, caller: str, asset: str, user: str, debt_to_cover: int
    ) -> LiquidationResult:
        """Repay part of ``user``'s debt and seize collateral plus a bonus.

        The victim's health factor is not re-checked afterwards: covering a
        small slice of a position below 100% collateralization can leave it
        unhealthy, and that is accepted.
        """
        with self._transaction("liquidate"):
            self._require_more_than_zero(debt_to_cover)
            self._require_allowed_token(asset)

            starting_health_factor = self._health_factor(user)
            if starting_health_factor >= MIN_HEALTH_FACTOR:
                logger.debug("Liquidation of healthy account %s rejected", user)
                raise HealthFactorOkError(user, starting_health_factor)

            token_amount_from_debt = self.get_token_amount_from_usd(asset, debt_to_cover)
            bonus_collateral = accounting.liquidation_bonus(token_amount_from_debt)
            total_collateral = token_amount_from_debt + bonus_collateral

            self._redeem_collateral(asset, total_collateral, user, caller)
            self._burn_dsc(debt_to_cover, on_behalf_of=user, dsc_from=caller)
            self._revert_if_health_factor_is_broken(caller)

            ending_health_factor = self._health_factor(user)
            logger.warning(
                "Liquidated %s: %s covered %d debt for %d %s (bonus %d), HF %s -> %s",
                user,
                caller,
                debt_to_cover,
                total_collateral,
                asset,
                bonus_collateral,
                accounting.format_health_factor(starting_health_factor),
                accounting.format_health_factor(ending_health_factor),
            )
            return LiquidationResult(
                user=user,
                liquidator=caller,
                asset=asset,
                debt_covered=debt_to_cover,
                token_amount_from_debt=token_amount_from_debt,
                bonus_collateral=bonus_collateral,
                starting_health_factor=starting_health_factor,
                ending_health_factor=ending_health_factor,
            )

    # ------------------------------------------------------------------
    # Internal operations (run inside a transaction)
    # ------------------------------------------------------------------

    def _deposit_collateral(self, user: str, asset: str, amount: int) -> None:
        self._require_more_than_zero(amount)
        token = self._require_allowed_token(asset)

        self._set_collateral(user, asset, self._collateral(user, asset) + amount)
        self._emit("CollateralDeposited", user=user, token=asset, amount=amount)
        logger.info("%s deposited %d %s", user, amount, asset)

        if not token.transfer_from(self._address, user, self._address, amount):
            raise TransferFailedError(f"Pulling {amount} {asset} from {user} failed")

    def _mint_dsc(self, user: str, amount: int) -> None:
        self._require_more_than_zero(amount)
        self._dsc_minted[user] = self._dsc_minted.get(user, 0) + amount
        self._revert_if_health_factor_is_broken(user)

        if not self._dsc.mint(self._address, user, amount):
            raise MintFailedError(f"Minting {amount} DSC to {user} failed")
        logger.info("%s minted %d DSC", user, amount)

    def _redeem_collateral(
        self, asset: str, amount: int, from_user: str, to_user: str
    ) -> None:
        token = self._require_allowed_token(asset)

        balance = self._collateral(from_user, asset)
        remaining = accounting.checked_sub(balance, amount)
        if remaining is None:
            raise InsufficientBalanceError(f"{asset} collateral", balance, amount)
        self._set_collateral(from_user, asset, remaining)
        self._emit(
            "CollateralRedeemed",
            redeemed_from=from_user,
            redeemed_to=to_user,
            token=asset,
            amount=amount,
        )
        logger.info("%d %s redeemed from %s to %s", amount, asset, from_user, to_user)

        if not token.transfer(self._address, to_user, amount):
            raise TransferFailedError(f"Sending {amount} {asset} to {to_user} failed")

    def _burn_dsc(self, amount: int, on_behalf_of: str, dsc_from: str) -> None:
        self._require_more_than_zero(amount)

        minted = self._dsc_minted.get(on_behalf_of, 0)
        remaining = accounting.checked_sub(minted, amount)
        if remaining is None:
            raise InsufficientBalanceError("minted DSC", minted, amount)
        if remaining:
            self._dsc_minted[on_behalf_of] = remaining
        else:
            self._dsc_minted.pop(on_behalf_of, None)

        if not self._dsc.transfer_from(self._address, dsc_from, self._address, amount):
            raise TransferFailedError(f"Pulling {amount} DSC from {dsc_from} failed")
        self._dsc.burn(self._address, amount)
        logger.info("%d DSC burned for %s (paid by %s)", amount, on_behalf_of, dsc_from)

    # ------------------------------------------------------------------
    # Checks and helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_more_than_zero(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError(f"Amount must be an integer, got {type(amount).__name__}")
        if amount <= 0:
            raise ZeroAmountError("Amount must be more than zero")

    def _require_allowed_token(self, asset: str) -> TransferableAsset:
        return self._registry.token(asset)

    def _revert_if_health_factor_is_broken(self, user: str) -> None:
        health_factor = self._health_factor(user)
        if health_factor < MIN_HEALTH_FACTOR:
            logger.debug(
                "Health factor of %s broken: %s",
                user,
                accounting.format_health_factor(health_factor),
            )
            raise HealthFactorBrokenError(user, health_factor)

    def _health_factor(self, user: str) -> int:
        total_dsc_minted = self._dsc_minted.get(user, 0)
        if total_dsc_minted == 0:
            return accounting.calculate_health_factor(0, 0)
        collateral_value = self.get_account_collateral_value(user)
        return self.calculate_health_factor(total_dsc_minted, collateral_value)

    def _price(self, asset: str) -> int:
        price_ref = self._registry.price_ref(asset)
        reading = self._price_feed.latest_price(price_ref)
        if not reading.is_fresh or reading.price <= 0:
            raise StalePriceError(price_ref, reading.price)
        return reading.price

    def _collateral(self, user: str, asset: str) -> int:
        return self._collateral_deposited.get(user, {}).get(asset, 0)

    def _set_collateral(self, user: str, asset: str, amount: int) -> None:
        balances = self._collateral_deposited.setdefault(user, {})
        if amount:
            balances[asset] = amount
            return
        balances.pop(asset, None)
        if not balances:
            del self._collateral_deposited[user]

    def _emit(self, name: str, **args: Any) -> None:
        self.events.append(Event(name=name, args=args))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def calculate_health_factor(
        self, total_dsc_minted: int, collateral_value_in_usd: int
    ) -> int:
        return accounting.calculate_health_factor(
            total_dsc_minted, collateral_value_in_usd, self._compound_threshold
        )

    def get_health_factor(self, user: str) -> int:
        return self._health_factor(user)

    def get_account_information(self, user: str) -> AccountInformation:
        return AccountInformation(
            total_dsc_minted=self._dsc_minted.get(user, 0),
            collateral_value_in_usd=self.get_account_collateral_value(user),
        )

    def get_account_collateral_value(self, user: str) -> int:
        """USD value (1e18) of everything ``user`` has deposited."""
        total = 0
        for asset, amount in self._collateral_deposited.get(user, {}).items():
            total += self.get_usd_value(asset, amount)
        return total

    def get_usd_value(self, asset: str, amount: int) -> int:
        return accounting.usd_value(self._price(asset), amount)

    def get_token_amount_from_usd(self, asset: str, usd_amount_in_wei: int) -> int:
        return accounting.token_amount_from_usd(self._price(asset), usd_amount_in_wei)

    def get_collateral_balance_of_user(self, user: str, asset: str) -> int:
        if asset not in self._registry:
            raise UnregisteredAssetError(asset)
        return self._collateral(user, asset)

    def get_dsc_minted(self, user: str) -> int:
        return self._dsc_minted.get(user, 0)

    def get_total_collateral_deposited(self, asset: str) -> int:
        if asset not in self._registry:
            raise UnregisteredAssetError(asset)
        return sum(b.get(asset, 0) for b in self._collateral_deposited.values())

    def get_accounts(self) -> tuple[str, ...]:
        """Every account currently holding collateral or debt."""
        return tuple(dict.fromkeys([*self._collateral_deposited, *self._dsc_minted]))

    def get_collateral_tokens(self) -> tuple[str, ...]:
        return self._registry.assets

    def get_collateral_token_price_feed(self, asset: str) -> str:
        return self._registry.price_ref(asset)

    def get_dsc(self) -> StableUnitAuthority:
        return self._dsc

    @staticmethod
    def get_precision() -> int:
        return PRECISION

    @staticmethod
    def get_additional_feed_precision() -> int:
        return ADDITIONAL_FEED_PRECISION

    @staticmethod
    def get_liquidation_threshold() -> int:
        return LIQUIDATION_THRESHOLD

    @staticmethod
    def get_liquidation_bonus() -> int:
        return LIQUIDATION_BONUS

    @staticmethod
    def get_liquidation_precision() -> int:
        return LIQUIDATION_PRECISION

    @staticmethod
    def get_min_health_factor() -> int:
        return MIN_HEALTH_FACTOR
