#!/usr/bin/env python3
"""
LP Hedge CLI -- Concentrated Liquidity + Short Hedge Calculator
================================================================

Values a Uniswap V3 range position paired with a short across a sweep of
hypothetical prices.

Usage:
  python run.py table    --entry 2000 --deposit 10000 --lower 1800 --upper 2200   Scenario table
  python run.py table    --token ETH --deposit 10000 --lower 1800 --upper 2200    Live entry price
  python run.py position --entry 2000 --deposit 10000 --lower 1800 --upper 2200 --current 2100
  python run.py hedge    --entry 2000 --deposit 10000 --lower 1800 --upper 2200   Short sizing
  python run.py price    ETH                                                      Live spot price
  python run.py tokens                                                            Token catalog
  python run.py info                                                              System overview

Sources:
  Uniswap V3 Whitepaper : https://uniswap.org/whitepaper-v3.pdf
  CoinGecko API         : https://docs.coingecko.com/reference/simple-price
"""

import sys
import asyncio
import argparse
import logging
from pathlib import Path

# ── Imports ───────────────────────────────────────────────────────────────

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from hedge_cli.central_config import (
    DEFAULT_PRICE_RANGE,
    DEFAULT_STEP_SIZE,
    PRICE_RANGES,
    PROJECT_VERSION,
    STEP_SIZES,
)
from hedge_cli.commands import (
    cmd_hedge,
    cmd_info,
    cmd_position,
    cmd_price,
    cmd_table,
    cmd_tokens,
    resolve_entry_price,
)


# ── CLI Parser ────────────────────────────────────────────────────────────


def _add_position_args(p: argparse.ArgumentParser) -> None:
    """Arguments shared by table / position / hedge."""
    p.add_argument("--entry", type=float, default=None, help="Entry price (omit to fetch live via --token)")
    p.add_argument("--token", type=str, default=None, help="Token id or symbol for a live entry price (e.g. ETH)")
    p.add_argument("--deposit", type=float, required=True, help="Deposit amount (cash units unless --input token)")
    p.add_argument("--lower", type=float, required=True, help="Lower range price")
    p.add_argument("--upper", type=float, required=True, help="Upper range price")
    p.add_argument(
        "--input",
        dest="denomination",
        choices=["cash", "token"],
        default="cash",
        help="cash: --deposit is total USD value; token: --deposit is a token quantity (default: cash)",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lp-hedge",
        description=f"LP Hedge CLI v{PROJECT_VERSION} — Uniswap V3 LP + short hedge calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py table --entry 2000 --deposit 10000 --lower 1800 --upper 2200 --short 5000
  python run.py table --entry 2000 --deposit 10000 --lower 1800 --upper 2200 \\
                      --short 5000 --fee-apr 30 --funding-rate 0.01 --days 30 --range wide --step fine
  python run.py position --entry 2000 --deposit 10000 --lower 1800 --upper 2200 --current 1700
  python run.py hedge --token ETH --deposit 10000 --lower 1800 --upper 2200
  python run.py hedge --entry 2000 --deposit 2.5 --input token --lower 1800 --upper 2200

Sweep ranges: narrow ±25%, medium ±50%, wide ±75%, extreme ±100%
Step sizes  : fine 2.5%, normal 5%, coarse 10%
""",
    )
    parser.add_argument(
        "--version", action="version", version=f"LP Hedge CLI v{PROJECT_VERSION}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", help="Available commands")

    table_p = sub.add_parser("table", help="Price-scenario table for LP + short")
    _add_position_args(table_p)
    table_p.add_argument("--short", type=float, default=0.0, help="Short notional in cash units (default: 0)")
    table_p.add_argument(
        "--range", dest="sweep_range", choices=list(PRICE_RANGES), default=DEFAULT_PRICE_RANGE,
        help=f"Price sweep width (default: {DEFAULT_PRICE_RANGE})",
    )
    table_p.add_argument(
        "--step", choices=list(STEP_SIZES), default=DEFAULT_STEP_SIZE,
        help=f"Sweep step (default: {DEFAULT_STEP_SIZE})",
    )
    table_p.add_argument("--fee-apr", type=float, default=0.0, help="LP fee APR in %% (default: 0)")
    table_p.add_argument("--funding-rate", type=float, default=0.0, help="Short funding in %% per day (default: 0)")
    table_p.add_argument("--days", type=float, default=0.0, help="Holding duration in days (default: 0)")

    position_p = sub.add_parser("position", help="LP + short outcome at one price")
    _add_position_args(position_p)
    position_p.add_argument("--current", type=float, required=True, help="Observation price")
    position_p.add_argument("--short", type=float, default=0.0, help="Short notional in cash units (default: 0)")

    hedge_p = sub.add_parser("hedge", help="Recommended short sizes (bull / normal / bear)")
    _add_position_args(hedge_p)

    price_p = sub.add_parser("price", help="Fetch a live spot price (CoinGecko)")
    price_p.add_argument("token", help="Token id or symbol, e.g. ETH or ethereum")

    sub.add_parser("tokens", help="List selectable tokens")
    sub.add_parser("info", help="System info")

    return parser


# ── Main ──────────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "info":
        return cmd_info()
    if args.command == "tokens":
        return cmd_tokens()
    if args.command == "price":
        return asyncio.run(cmd_price(args.token))

    entry = asyncio.run(resolve_entry_price(args.entry, args.token))
    if entry is None:
        return 1

    if args.command == "table":
        return cmd_table(
            entry=entry,
            deposit=args.deposit,
            lower=args.lower,
            upper=args.upper,
            short=args.short,
            sweep_range=args.sweep_range,
            step=args.step,
            fee_apr=args.fee_apr,
            funding_rate=args.funding_rate,
            days=args.days,
            denomination=args.denomination,
        )
    if args.command == "position":
        return cmd_position(
            entry=entry,
            deposit=args.deposit,
            lower=args.lower,
            upper=args.upper,
            current=args.current,
            short=args.short,
            denomination=args.denomination,
        )
    if args.command == "hedge":
        return cmd_hedge(
            entry=entry,
            deposit=args.deposit,
            lower=args.lower,
            upper=args.upper,
            denomination=args.denomination,
        )

    parser.print_help()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n❌ Cancelled.")
        sys.exit(130)
