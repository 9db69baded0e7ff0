"""Command-line interface for the collateralized-debt engine."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .accounting import from_wei
from .config import AppConfig, load_config
from .constants import FEED_DECIMALS
from .interfaces.price_feed import PriceFeed
from .logging_setup import configure_logging
from .oracles import PythPriceFeed, build_price_feed
from .services import ScenarioRunner, build_system, load_scenario


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="dsc-engine",
        description="Over-collateralized stable unit engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("prices", help="Show the price and freshness of each collateral")

    run_parser = sub.add_parser("run", help="Replay a scenario file against a fresh engine")
    run_parser.add_argument("scenario", help="Path to the scenario YAML file")
    run_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any step failed",
    )

    return parser


async def _prepare_feed(config: AppConfig) -> PriceFeed:
    feed = build_price_feed(config)
    if isinstance(feed, PythPriceFeed):
        await feed.refresh()
    return feed


def _print_prices(config: AppConfig, feed: PriceFeed) -> None:
    for c in config.collateral:
        reading = feed.latest_price(c.price_ref)
        freshness = "fresh" if reading.is_fresh else "STALE"
        price = from_wei(reading.price, FEED_DECIMALS)
        print(f"{c.symbol:<8} ${price:>14,.4f}  {freshness}")


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the exit status."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    feed = await _prepare_feed(config)

    if args.command == "prices":
        _print_prices(config, feed)
        return 0

    if args.command == "run":
        scenario = load_scenario(args.scenario)
        runner = ScenarioRunner(
            build_system(config, feed),
            warning_health_factor=config.report.health_factor_warning,
        )
        results = runner.run(scenario)
        for r in results:
            mark = "✅" if r.ok else "❌"
            print(f"{mark} {r.index:>3} {r.action:<18} {r.detail if r.ok else r.error}")
        print()
        print(runner.format_report(runner.snapshot_accounts()))
        if args.strict and not all(r.ok for r in results):
            return 1
        return 0

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
