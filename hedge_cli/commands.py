"""
LP Hedge CLI — Command Implementations
======================================

All CLI command handlers live here, keeping run.py as a thin
argparse dispatcher. Each public function corresponds to a
subcommand (info, tokens, price, position, hedge, table) and returns
a process exit code.
"""

from __future__ import annotations

import logging

from hedge_cli.central_config import (
    CUSTOM_TOKEN_ID,
    PRICE_RANGES,
    PROJECT_NAME,
    PROJECT_VERSION,
    STEP_SIZES,
)
from hedge_cli.coingecko_client import CoinGeckoClient, find_token, get_token_list
from hedge_cli.errors import FetchError, HedgeCalcError, ValidationError
from hedge_cli.formatting import (
    format_currency,
    format_number,
    format_percent,
    format_scenario_row,
)
from hedge_cli.validation import require_valid_inputs
from scenario_table import TableDataGenerator
from v3_hedge_math import (
    InputDenomination,
    PositionParams,
    RangeSpec,
    calculate_lp_position_strict,
    calculate_market_based_short_sizes,
    calculate_short_pnl,
)

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────────


def _print_errors(errors: list[str]) -> None:
    print("❌ Invalid input:")
    for err in errors:
        print(f"   • {err}")


async def resolve_entry_price(entry: float | None, token: str | None) -> float | None:
    """Use the explicit entry price, or fetch a live one for `token`."""
    if entry is not None:
        return entry
    if not token:
        print("❌ Provide --entry or --token.")
        return None

    info = find_token(token)
    if info is None:
        print(f"❌ Unknown token '{token}'. Run: python run.py tokens")
        return None
    if info.id == CUSTOM_TOKEN_ID:
        print("❌ Custom token has no live price. Pass --entry.")
        return None

    try:
        price = await CoinGeckoClient().fetch_token_price(info.id)
    except FetchError as exc:
        print(f"❌ Price fetch failed: {exc}")
        return None
    print(f"💰 Live {info.symbol} price: {format_currency(price)}")
    return price


def _resolve_params(
    entry: float, deposit: float, lower: float, upper: float, short: float,
    days: float = 0, denomination: str = "cash",
) -> PositionParams | None:
    """Validate inputs and turn the deposit into cash units."""
    try:
        require_valid_inputs(entry, deposit, lower, upper, short, days)
        params = PositionParams(
            entry_price=entry,
            deposit_amount=deposit,
            price_range=RangeSpec(lower, upper),
            input_denomination=InputDenomination(denomination),
        )
        deposit_value = params.deposit_value()
    except ValidationError as exc:
        _print_errors(exc.errors)
        return None
    except HedgeCalcError as exc:
        print(f"❌ {exc}")
        return None

    if params.input_denomination is InputDenomination.TOKEN:
        print(f"🪙 {format_number(deposit, 6)} tokens ≈ {format_currency(deposit_value)} deposit")
    return PositionParams(entry, deposit_value, params.price_range)


# ── Commands ─────────────────────────────────────────────────────────────


def cmd_info() -> int:
    """Display system information."""
    print(f"\n📊 {PROJECT_NAME} v{PROJECT_VERSION}")
    print("=" * 55)
    print("🔗 Model      : Uniswap V3 concentrated liquidity + short hedge")
    print("📡 Price Data : CoinGecko simple-price API (optional, free, no key)")
    print()
    print("📁 Files:")
    print("   run.py             — CLI entry point")
    print("   v3_hedge_math.py   — liquidity, decomposition, IL, hedge sizing")
    print("   scenario_table.py  — price sweep + fee/funding accrual")
    print("   hedge_cli/         — config, price client, formatting, validation")
    print()
    print(f"📐 Sweep ranges : {', '.join(f'{k} ±{v:g}%' for k, v in PRICE_RANGES.items())}")
    print(f"📏 Step sizes   : {', '.join(f'{k} {v:g}%' for k, v in STEP_SIZES.items())}")
    print()
    print("🔗 Quick Start:")
    print("   python run.py table --entry 2000 --deposit 10000 --lower 1800 --upper 2200")
    print("   python run.py hedge --token ETH --deposit 10000 --lower 1800 --upper 2200")
    return 0


def cmd_tokens() -> int:
    print("\n🪙 Selectable tokens")
    print("-" * 40)
    for info in get_token_list():
        print(f"   {info.symbol:<8} {info.name:<12} ({info.id})")
    return 0


async def cmd_price(token: str) -> int:
    price = await resolve_entry_price(None, token)
    return 0 if price is not None else 1


def cmd_position(
    entry: float, deposit: float, lower: float, upper: float,
    current: float, short: float = 0.0, denomination: str = "cash",
) -> int:
    """Value the LP + short at a single current price (strict math)."""
    params = _resolve_params(entry, deposit, lower, upper, short, denomination=denomination)
    if params is None:
        return 1
    if current <= 0:
        _print_errors(["Current price must be positive"])
        return 1

    try:
        outcome = calculate_lp_position_strict(
            current, params.entry_price, params.deposit_amount, params.price_range
        )
    except HedgeCalcError as exc:
        print(f"❌ {exc}")
        return 1

    short_pnl = calculate_short_pnl(current, params.entry_price, short)
    lp_pnl = outcome.total_value - params.deposit_amount

    print(f"\n📍 Position at {format_currency(current)} (entry {format_currency(entry)})")
    print("=" * 55)
    print(f"💧 Liquidity (L)     : {format_number(outcome.liquidity, 4)}")
    print(f"🪙 Token @ entry     : {format_number(outcome.initial_token_amount, 6)}")
    print(f"💵 Cash @ entry      : {format_currency(outcome.initial_cash_amount)}")
    print(f"🪙 Token now         : {format_number(outcome.token_amount, 6)}")
    print(f"💵 Cash now          : {format_currency(outcome.cash_amount)}")
    print(f"💰 LP value          : {format_currency(outcome.total_value)}")
    print(f"📦 HODL value        : {format_currency(outcome.hodl_value)}")
    print(f"📉 Impermanent loss  : {format_currency(outcome.impermanent_loss)}")
    print(f"📈 LP P&L            : {format_currency(lp_pnl)}")
    print(f"🛡️ Short P&L         : {format_currency(short_pnl)}")
    print(f"⚖️ Net P&L           : {format_currency(lp_pnl + short_pnl)}")
    return 0


def cmd_hedge(
    entry: float, deposit: float, lower: float, upper: float, denomination: str = "cash"
) -> int:
    params = _resolve_params(entry, deposit, lower, upper, 0.0, denomination=denomination)
    if params is None:
        return 1

    sizing = calculate_market_based_short_sizes(
        params.entry_price, params.deposit_amount, params.price_range
    )
    base = params.deposit_amount
    print(f"\n🛡️ Recommended short size (deposit {format_currency(base)})")
    print("=" * 55)
    for label, value in (("🐂 Bull", sizing.bull), ("⚖️ Normal", sizing.normal), ("🐻 Bear", sizing.bear)):
        print(f"   {label:<10} {format_currency(value):>14}  ({format_percent(value / base * 100, 1)} of deposit)")
    return 0


def cmd_table(
    entry: float, deposit: float, lower: float, upper: float,
    short: float = 0.0, sweep_range: str = "medium", step: str = "normal",
    fee_apr: float = 0.0, funding_rate: float = 0.0, days: float = 0.0,
    denomination: str = "cash",
) -> int:
    """Print the price-scenario table."""
    params = _resolve_params(entry, deposit, lower, upper, short, days, denomination)
    if params is None:
        return 1

    generator = TableDataGenerator(params.price_range)
    table = generator.generate(
        params.entry_price,
        params.deposit_amount,
        short,
        sweep_range=sweep_range,
        step=step,
        fee_apr=fee_apr,
        duration_days=days,
        funding_rate=funding_rate,
    )
    logger.debug("Generated %d scenario rows", len(table.rows))

    header = f"{'Price':>14} {'Chg':>8} {'Token':>12} {'Cash':>14} {'LP Value':>14} {'LP P&L':>13} {'Short P&L':>13} {'Net P&L':>13} {'Return':>9}"
    print(f"\n📊 Scenarios — range {lower:g}–{upper:g}, short {format_currency(short)}")
    if days:
        print(f"   ⏱️ {days:g} days: LP fees {format_currency(table.lp_fees)}, funding {format_currency(table.short_funding_pnl)}")
    print(header)
    print("-" * len(header))
    for row in table.rows:
        cells = format_scenario_row(row)
        print(
            f"{cells['price']:>14} {cells['change']:>8} {cells['token']:>12} {cells['cash']:>14} "
            f"{cells['value']:>14} {cells['lp_pnl']:>13} {cells['short_pnl']:>13} "
            f"{cells['net_pnl']:>13} {cells['return']:>9} {cells['marker']}"
        )
    return 0
