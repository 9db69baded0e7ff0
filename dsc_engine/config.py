"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .accounting import to_feed_price
from .constants import DEFAULT_PRICE_TIMEOUT

logger = logging.getLogger(__name__)

PRICE_PROVIDERS = ("pyth", "fixed")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    address: str = "dsc-engine"
    deployer: str = "deployer"
    compound_threshold: bool = True


@dataclass(frozen=True)
class StableUnitConfig:
    address: str = "dsc"
    symbol: str = "DSC"
    name: str = "DecentralizedStableCoin"


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str = ""
    address: str = ""
    price_ref: str = ""


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    timeout: int = 30


@dataclass(frozen=True)
class FixedPricesConfig:
    prices: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    max_price_age_seconds: int = DEFAULT_PRICE_TIMEOUT
    pyth: PythConfig = field(default_factory=PythConfig)
    fixed: FixedPricesConfig = field(default_factory=FixedPricesConfig)


@dataclass(frozen=True)
class ReportConfig:
    health_factor_warning: float = 1.5


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    stable_unit: StableUnitConfig = field(default_factory=StableUnitConfig)
    collateral: tuple[CollateralConfig, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        address=str(raw.get("address", "dsc-engine")),
        deployer=str(raw.get("deployer", "deployer")),
        compound_threshold=bool(raw.get("compound_threshold", True)),
    )


def _build_stable_unit(raw: dict[str, Any]) -> StableUnitConfig:
    return StableUnitConfig(
        address=str(raw.get("address", "dsc")),
        symbol=str(raw.get("symbol", "DSC")),
        name=str(raw.get("name", "DecentralizedStableCoin")),
    )


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    collateral: list[CollateralConfig] = []
    for c in raw:
        symbol = str(c.get("symbol", ""))
        collateral.append(
            CollateralConfig(
                symbol=symbol,
                address=str(c.get("address", symbol.lower())),
                price_ref=str(c.get("price_ref", "")),
            )
        )
    return tuple(collateral)


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    fixed_raw = raw.get("fixed", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        max_price_age_seconds=int(
            raw.get("max_price_age_seconds", DEFAULT_PRICE_TIMEOUT)
        ),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url") or PythConfig.hermes_url,
            timeout=int(pyth_raw.get("timeout", 30)),
        ),
        fixed=FixedPricesConfig(
            prices={
                str(ref): to_feed_price(price)
                for ref, price in fixed_raw.get("prices", {}).items()
            },
        ),
    )


def _build_report(raw: dict[str, Any]) -> ReportConfig:
    return ReportConfig(
        health_factor_warning=float(raw.get("health_factor_warning", 1.5)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {})),
        stable_unit=_build_stable_unit(raw.get("stable_unit", {})),
        collateral=_build_collateral(raw.get("collateral", [])),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        report=_build_report(raw.get("report", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.collateral:
        raise ValueError("At least one collateral asset must be configured")

    seen: set[str] = set()
    for c in cfg.collateral:
        if not c.address:
            raise ValueError(f"Collateral '{c.symbol}' has no address")
        if c.address in seen:
            raise ValueError(f"Collateral address '{c.address}' is configured twice")
        seen.add(c.address)
        if not c.price_ref:
            raise ValueError(f"Collateral '{c.symbol}' has no price_ref")

    oracle = cfg.price_oracle
    if oracle.provider not in PRICE_PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{oracle.provider}'")
    if oracle.max_price_age_seconds <= 0:
        raise ValueError("max_price_age_seconds must be positive")
    if oracle.provider == "fixed":
        for c in cfg.collateral:
            if c.price_ref not in oracle.fixed.prices:
                raise ValueError(
                    f"Collateral '{c.symbol}' has no fixed price for '{c.price_ref}'"
                )
