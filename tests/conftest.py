"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from dsc_engine.config import (
    AppConfig,
    CollateralConfig,
    EngineConfig,
    FixedPricesConfig,
    PriceOracleConfig,
    PythConfig,
    ReportConfig,
    StableUnitConfig,
)
from dsc_engine.engine import DSCEngine
from dsc_engine.oracles import FixedPriceFeed
from dsc_engine.tokens import StableUnit, TokenLedger

from tests.helpers import (
    AMOUNT_COLLATERAL,
    AMOUNT_TO_MINT,
    BTC_USD_PRICE,
    BTC_USD_REF,
    DEPLOYER,
    ETH_USD_PRICE,
    ETH_USD_REF,
    STARTING_BALANCE,
    USER,
)


# ---------------------------------------------------------------------------
# System fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def price_feed() -> FixedPriceFeed:
    return FixedPriceFeed({ETH_USD_REF: ETH_USD_PRICE, BTC_USD_REF: BTC_USD_PRICE})


@pytest.fixture()
def weth() -> TokenLedger:
    token = TokenLedger("weth", "WETH")
    token.faucet(USER, STARTING_BALANCE)
    return token


@pytest.fixture()
def wbtc() -> TokenLedger:
    token = TokenLedger("wbtc", "WBTC")
    token.faucet(USER, STARTING_BALANCE)
    return token


@pytest.fixture()
def dsc() -> StableUnit:
    return StableUnit(owner=DEPLOYER)


@pytest.fixture()
def engine(
    weth: TokenLedger, wbtc: TokenLedger, dsc: StableUnit, price_feed: FixedPriceFeed
) -> DSCEngine:
    dsce = DSCEngine([weth, wbtc], [ETH_USD_REF, BTC_USD_REF], dsc, price_feed)
    dsc.transfer_ownership(DEPLOYER, dsce.address)
    return dsce


@pytest.fixture()
def deposited(engine: DSCEngine, weth: TokenLedger) -> DSCEngine:
    """USER has deposited AMOUNT_COLLATERAL of WETH."""
    weth.approve(USER, engine.address, AMOUNT_COLLATERAL)
    engine.deposit_collateral(USER, weth.address, AMOUNT_COLLATERAL)
    return engine


@pytest.fixture()
def minted(engine: DSCEngine, weth: TokenLedger) -> DSCEngine:
    """USER has deposited AMOUNT_COLLATERAL of WETH and minted AMOUNT_TO_MINT."""
    weth.approve(USER, engine.address, AMOUNT_COLLATERAL)
    engine.deposit_collateral_and_mint_dsc(
        USER, weth.address, AMOUNT_COLLATERAL, AMOUNT_TO_MINT
    )
    return engine


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        engine=EngineConfig(address="dsc-engine", deployer=DEPLOYER),
        stable_unit=StableUnitConfig(),
        collateral=(
            CollateralConfig(symbol="WETH", address="weth", price_ref=ETH_USD_REF),
            CollateralConfig(symbol="WBTC", address="wbtc", price_ref=BTC_USD_REF),
        ),
        price_oracle=PriceOracleConfig(
            provider="fixed",
            pyth=PythConfig(hermes_url="https://hermes.example.com"),
            fixed=FixedPricesConfig(
                prices={ETH_USD_REF: ETH_USD_PRICE, BTC_USD_REF: BTC_USD_PRICE}
            ),
        ),
        report=ReportConfig(health_factor_warning=1.5),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      address: dsc-engine
      deployer: deployer
      compound_threshold: true
    stable_unit:
      symbol: DSC
    collateral:
      - symbol: WETH
        address: weth
        price_ref: "ETH/USD"
      - symbol: WBTC
        address: wbtc
        price_ref: "BTC/USD"
    price_oracle:
      provider: fixed
      max_price_age_seconds: 3600
      pyth:
        hermes_url: "https://hermes.example.com"
      fixed:
        prices:
          "ETH/USD": 2000
          "BTC/USD": 1000.5
    report:
      health_factor_warning: 2.0
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


SAMPLE_SCENARIO = textwrap.dedent("""\
    balances:
      alice: {WETH: 10}
      bob: {WETH: 20}
    steps:
      - {action: deposit_and_mint, caller: alice, asset: WETH, amount: 10, mint: 5000}
      - {action: mint, caller: alice, amount: 1}
      - {action: set_price, asset: WETH, price: 1800}
      - {action: deposit_and_mint, caller: bob, asset: WETH, amount: 20, mint: 5000}
      - {action: liquidate, caller: bob, asset: WETH, user: alice, debt: 5000}
      - {action: redeem, caller: alice, asset: WETH, amount: 6}
""")


@pytest.fixture()
def sample_scenario_path(tmp_path: Path) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(SAMPLE_SCENARIO)
    return path
