#!/usr/bin/env python3
"""
Scenario Table Generator
========================

Sweeps hypothetical prices around the entry price and values the
LP + short position at each point.

Per-row formulas:
  lp_pnl      = V_lp(P) − deposit
  short_pnl   = size · (1 − P/P_entry) + funding
  net_pnl     = lp_pnl + short_pnl + lp_fees
  return_pct  = net_pnl / deposit × 100

Time-based accrual (simple, not compounded):
  lp_fees = deposit · (fee_apr / 100 / 365) · days
  funding = short_size · (funding_rate / 100) · days
"""

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from hedge_cli.central_config import (
    CURRENT_PRICE_TOLERANCE_PCT,
    DEFAULT_PRICE_RANGE,
    DEFAULT_STEP_SIZE,
    PRICE_RANGES,
    STEP_SIZES,
)
from v3_hedge_math import RangeSpec, calculate_lp_position, calculate_short_pnl


@dataclass(frozen=True)
class PriceScenario:
    price: float
    change_percent: float


@dataclass(frozen=True)
class ScenarioRow:
    """Outcome of the hedged position at one swept price."""

    price: float
    price_change: float
    token_amount: float
    cash_amount: float
    total_value: float
    impermanent_loss: float
    lp_pnl: float
    short_pnl: float
    net_pnl: float
    return_pct: float
    is_current_price: bool


@dataclass(frozen=True)
class ScenarioTable:
    rows: Tuple[ScenarioRow, ...]
    entry_price: float
    deposit_amount: float
    short_size: float
    lp_fees: float = 0.0
    short_funding_pnl: float = 0.0
    notes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def current_row(self) -> ScenarioRow | None:
        return next((r for r in self.rows if r.is_current_price), None)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(r) for r in self.rows]


# ── Sweep Generation ────────────────────────────────────────────────────


def generate_price_scenarios(
    entry_price: float,
    price_range: str = DEFAULT_PRICE_RANGE,
    step: str = DEFAULT_STEP_SIZE,
) -> List[PriceScenario]:
    """
    Price points entry·(1 + k/100), k = −max … +max in `step` increments.

    Unknown class names fall back to ±50% / 5%. k is derived from an integer
    index so accumulated float error cannot drop the +max endpoint.
    """
    max_range = PRICE_RANGES.get(price_range, PRICE_RANGES[DEFAULT_PRICE_RANGE])
    step_size = STEP_SIZES.get(step, STEP_SIZES[DEFAULT_STEP_SIZE])

    count = int(round(2 * max_range / step_size))
    scenarios = []
    for i in range(count + 1):
        k = -max_range + i * step_size
        scenarios.append(PriceScenario(price=entry_price * (1 + k / 100), change_percent=k))
    return scenarios


def calculate_lp_fees(deposit_amount: float, fee_apr: float, duration_days: float) -> float:
    """Pro-rated LP fee income: deposit · APR/365 · days."""
    return deposit_amount * (fee_apr / 100 / 365) * duration_days


def calculate_funding_pnl(short_size: float, funding_rate: float, duration_days: float) -> float:
    """Funding on the short notional; `funding_rate` is % per day."""
    return short_size * (funding_rate / 100) * duration_days


def generate_table_data(
    entry_price: float,
    deposit_amount: float,
    price_range: RangeSpec,
    short_size: float,
    sweep_range: str = DEFAULT_PRICE_RANGE,
    step: str = DEFAULT_STEP_SIZE,
    fee_apr: float = 0.0,
    duration_days: float = 0.0,
    funding_rate: float = 0.0,
) -> ScenarioTable:
    """
    Build the scenario table. One lenient position valuation per price,
    so a failing point yields zeros instead of aborting the sweep.
    """
    scenarios = generate_price_scenarios(entry_price, sweep_range, step)

    lp_fees = calculate_lp_fees(deposit_amount, fee_apr, duration_days)
    short_funding_pnl = calculate_funding_pnl(short_size, funding_rate, duration_days)

    rows: List[ScenarioRow] = []
    for scenario in scenarios:
        lp_result = calculate_lp_position(
            scenario.price, entry_price, deposit_amount, price_range
        )
        short_pnl_from_price = calculate_short_pnl(scenario.price, entry_price, short_size)
        total_short_pnl = short_pnl_from_price + short_funding_pnl

        lp_pnl = lp_result.total_value - deposit_amount
        net_pnl = lp_pnl + total_short_pnl + lp_fees
        return_pct = (net_pnl / deposit_amount) * 100

        rows.append(
            ScenarioRow(
                price=scenario.price,
                price_change=scenario.change_percent,
                token_amount=lp_result.token_amount,
                cash_amount=lp_result.cash_amount,
                total_value=lp_result.total_value,
                impermanent_loss=lp_result.impermanent_loss,
                lp_pnl=lp_pnl,
                short_pnl=total_short_pnl,
                net_pnl=net_pnl,
                return_pct=return_pct,
                is_current_price=abs(scenario.change_percent) < CURRENT_PRICE_TOLERANCE_PCT,
            )
        )

    return ScenarioTable(
        rows=tuple(rows),
        entry_price=entry_price,
        deposit_amount=deposit_amount,
        short_size=short_size,
        lp_fees=lp_fees,
        short_funding_pnl=short_funding_pnl,
        notes=MappingProxyType(
            {"sweep_range": sweep_range, "step": step, "duration_days": duration_days}
        ),
    )


class TableDataGenerator:
    """Stateless facade over the sweep functions, bound to a price range."""

    def __init__(self, price_range: RangeSpec):
        self.price_range = price_range

    def generate(
        self,
        entry_price: float,
        deposit_amount: float,
        short_size: float,
        sweep_range: str = DEFAULT_PRICE_RANGE,
        step: str = DEFAULT_STEP_SIZE,
        fee_apr: float = 0.0,
        duration_days: float = 0.0,
        funding_rate: float = 0.0,
    ) -> ScenarioTable:
        return generate_table_data(
            entry_price,
            deposit_amount,
            self.price_range,
            short_size,
            sweep_range=sweep_range,
            step=step,
            fee_apr=fee_apr,
            duration_days=duration_days,
            funding_rate=funding_rate,
        )
