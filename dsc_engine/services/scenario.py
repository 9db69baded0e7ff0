"""Scenario runner — bootstraps a system and replays user actions against it."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

from ..accounting import format_health_factor, from_wei, to_feed_price, to_wei
from ..config import AppConfig
from ..constants import MIN_HEALTH_FACTOR, PRECISION
from ..engine import DSCEngine
from ..errors import DSCEngineError, StalePriceError
from ..interfaces.price_feed import PriceFeed
from ..oracles import FixedPriceFeed
from ..tokens import StableUnit, TokenLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class System:
    """A bootstrapped engine with its stable unit, collateral and feed."""

    engine: DSCEngine
    stable_unit: StableUnit
    collateral: dict[str, TokenLedger]
    price_refs: dict[str, str]
    price_feed: PriceFeed


@dataclass(frozen=True)
class StepResult:
    index: int
    action: str
    ok: bool
    error: str = ""
    detail: str = ""


@dataclass(frozen=True)
class AccountSnapshot:
    """Balances and solvency of one account after a run."""

    account: str
    collateral: dict[str, int] = field(default_factory=dict)
    dsc_minted: int = 0
    dsc_balance: int = 0
    collateral_value_in_usd: int | None = None
    health_factor: int | None = None


def build_system(config: AppConfig, price_feed: PriceFeed) -> System:
    """Deploy collateral ledgers, the stable unit and the engine.

    The stable unit is created by the deployer, then ownership is handed to
    the engine so that only the engine can mint and burn.
    """
    collateral = {
        c.symbol: TokenLedger(c.address, c.symbol) for c in config.collateral
    }
    price_refs = {c.symbol: c.price_ref for c in config.collateral}

    stable_unit = StableUnit(
        owner=config.engine.deployer,
        address=config.stable_unit.address,
        symbol=config.stable_unit.symbol,
        name=config.stable_unit.name,
    )
    engine = DSCEngine(
        list(collateral.values()),
        [c.price_ref for c in config.collateral],
        stable_unit,
        price_feed,
        address=config.engine.address,
        compound_threshold=config.engine.compound_threshold,
    )
    stable_unit.transfer_ownership(config.engine.deployer, engine.address)

    return System(
        engine=engine,
        stable_unit=stable_unit,
        collateral=collateral,
        price_refs=price_refs,
        price_feed=price_feed,
    )


def load_scenario(path: str | Path) -> dict[str, Any]:
    """Read a scenario YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw.get("steps", []), list):
        raise ValueError("Scenario 'steps' must be a list")
    return raw


class ScenarioRunner:
    """Replay scenario steps; failing steps are recorded, not fatal."""

    def __init__(self, system: System, warning_health_factor: float = 1.5) -> None:
        self._system = system
        self._warning = int(warning_health_factor * PRECISION)
        self._accounts: list[str] = []
        self._actions: dict[str, Callable[[dict[str, Any]], str]] = {
            "approve": self._approve,
            "deposit": self._deposit,
            "mint": self._mint,
            "deposit_and_mint": self._deposit_and_mint,
            "redeem": self._redeem,
            "redeem_for_dsc": self._redeem_for_dsc,
            "burn": self._burn,
            "liquidate": self._liquidate,
            "set_price": self._set_price,
        }

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def fund(self, balances: dict[str, dict[str, Any]]) -> None:
        """Faucet collateral to each account, amounts in whole tokens."""
        for account, assets in balances.items():
            self._track(account)
            for symbol, amount in assets.items():
                self._token(symbol).faucet(account, to_wei(amount))

    def run(self, scenario: dict[str, Any]) -> list[StepResult]:
        self.fund(scenario.get("balances", {}))

        results: list[StepResult] = []
        for index, step in enumerate(scenario.get("steps", []), start=1):
            action = str(step.get("action", ""))
            handler = self._actions.get(action)
            if handler is None:
                results.append(
                    StepResult(index, action, ok=False, error=f"Unknown action '{action}'")
                )
                continue
            try:
                detail = handler(step)
            except (DSCEngineError, KeyError, ValueError) as e:
                logger.info("Step %d (%s) failed: %s", index, action, e)
                results.append(
                    StepResult(index, action, ok=False, error=f"{type(e).__name__}: {e}")
                )
                continue
            results.append(StepResult(index, action, ok=True, detail=detail))
        return results

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _approve(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        amount = to_wei(step["amount"])
        token = self._token(step["asset"])
        token.approve(caller, self._system.engine.address, amount)
        return f"{caller} approved {amount} {token.symbol}"

    def _deposit(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        token = self._token(step["asset"])
        amount = to_wei(step["amount"])
        self._allow(token, caller, amount)
        self._system.engine.deposit_collateral(caller, token.address, amount)
        return f"{caller} deposited {step['amount']} {token.symbol}"

    def _mint(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        self._system.engine.mint_dsc(caller, to_wei(step["amount"]))
        return f"{caller} minted {step['amount']} DSC"

    def _deposit_and_mint(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        token = self._token(step["asset"])
        amount = to_wei(step["amount"])
        self._allow(token, caller, amount)
        self._system.engine.deposit_collateral_and_mint_dsc(
            caller, token.address, amount, to_wei(step["mint"])
        )
        return (
            f"{caller} deposited {step['amount']} {token.symbol} "
            f"and minted {step['mint']} DSC"
        )

    def _redeem(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        token = self._token(step["asset"])
        self._system.engine.redeem_collateral(caller, token.address, to_wei(step["amount"]))
        return f"{caller} redeemed {step['amount']} {token.symbol}"

    def _redeem_for_dsc(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        token = self._token(step["asset"])
        burn = to_wei(step["burn"])
        self._allow(self._system.stable_unit, caller, burn)
        self._system.engine.redeem_collateral_for_dsc(
            caller, token.address, to_wei(step["amount"]), burn
        )
        return f"{caller} burned {step['burn']} DSC and redeemed {step['amount']} {token.symbol}"

    def _burn(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        amount = to_wei(step["amount"])
        self._allow(self._system.stable_unit, caller, amount)
        self._system.engine.burn_dsc(caller, amount)
        return f"{caller} burned {step['amount']} DSC"

    def _liquidate(self, step: dict[str, Any]) -> str:
        caller = self._caller(step)
        user = str(step["user"])
        self._track(user)
        token = self._token(step["asset"])
        debt = to_wei(step["debt"])
        self._allow(self._system.stable_unit, caller, debt)
        result = self._system.engine.liquidate(caller, token.address, user, debt)
        return (
            f"{caller} liquidated {step['debt']} DSC of {user} for "
            f"{from_wei(result.total_collateral_redeemed):.6f} {token.symbol} "
            f"(HF {format_health_factor(result.starting_health_factor)} -> "
            f"{format_health_factor(result.ending_health_factor)})"
        )

    def _set_price(self, step: dict[str, Any]) -> str:
        feed = self._system.price_feed
        if not isinstance(feed, FixedPriceFeed):
            raise ValueError("set_price requires the fixed price provider")
        symbol = str(step["asset"])
        feed.set_price(self._system.price_refs[symbol], to_feed_price(step["price"]))
        return f"{symbol} price set to ${step['price']}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _caller(self, step: dict[str, Any]) -> str:
        caller = str(step["caller"])
        self._track(caller)
        return caller

    def _track(self, account: str) -> None:
        if account not in self._accounts:
            self._accounts.append(account)

    def _token(self, symbol: str) -> TokenLedger:
        token = self._system.collateral.get(str(symbol))
        if token is None:
            raise KeyError(f"Unknown collateral symbol '{symbol}'")
        return token

    def _allow(self, token: TokenLedger, owner: str, amount: int) -> None:
        spender = self._system.engine.address
        token.approve(owner, spender, token.allowance(owner, spender) + amount)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def snapshot_accounts(self) -> list[AccountSnapshot]:
        engine = self._system.engine
        snapshots: list[AccountSnapshot] = []
        for account in self._accounts:
            collateral = {
                symbol: engine.get_collateral_balance_of_user(account, token.address)
                for symbol, token in self._system.collateral.items()
            }
            try:
                value: int | None = engine.get_account_collateral_value(account)
                health_factor: int | None = engine.get_health_factor(account)
            except StalePriceError as e:
                logger.warning("Cannot value %s: %s", account, e)
                value = health_factor = None
            snapshots.append(
                AccountSnapshot(
                    account=account,
                    collateral={k: v for k, v in collateral.items() if v},
                    dsc_minted=engine.get_dsc_minted(account),
                    dsc_balance=self._system.stable_unit.balance_of(account),
                    collateral_value_in_usd=value,
                    health_factor=health_factor,
                )
            )
        return snapshots

    def _get_status(self, health_factor: int | None) -> str:
        if health_factor is None:
            return "❔ NO PRICE"
        if health_factor < MIN_HEALTH_FACTOR:
            return "🚨 LIQUIDATABLE"
        if health_factor < self._warning:
            return "⚠️ WARNING"
        return "✅ Healthy"

    def format_report(self, snapshots: list[AccountSnapshot]) -> str:
        """Render account snapshots, one block per account."""
        if not snapshots:
            return "No accounts."

        blocks: list[str] = []
        for s in snapshots:
            collateral = (
                ", ".join(
                    f"{symbol} {from_wei(amount):,.4f}"
                    for symbol, amount in s.collateral.items()
                )
                or "—"
            )
            value = (
                f"${from_wei(s.collateral_value_in_usd):,.2f}"
                if s.collateral_value_in_usd is not None
                else "n/a"
            )
            hf = (
                format_health_factor(s.health_factor)
                if s.health_factor is not None
                else "n/a"
            )
            blocks.append(
                f"📊 {s.account} · {self._get_status(s.health_factor)}\n"
                f"  Collateral: {collateral} — {value}\n"
                f"  Minted: {from_wei(s.dsc_minted):,.2f} DSC · "
                f"Wallet: {from_wei(s.dsc_balance):,.2f} DSC\n"
                f"  HF: {hf}"
            )
        return "\n\n".join(blocks)
