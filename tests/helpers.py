"""Accounts, prices and amounts shared by the test suites."""
from __future__ import annotations

ETHER = 10**18

DEPLOYER = "deployer"
USER = "user"
LIQUIDATOR = "liquidator"

ETH_USD_REF = "ETH/USD"
BTC_USD_REF = "BTC/USD"
ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8

AMOUNT_COLLATERAL = 10 * ETHER
STARTING_BALANCE = 10 * ETHER
AMOUNT_TO_MINT = 100 * ETHER
COLLATERAL_TO_COVER = 20 * ETHER
