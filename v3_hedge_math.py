#!/usr/bin/env python3
"""
V3 Hedge Math Engine
====================

Uniswap V3 concentrated-liquidity math for a single LP position paired
with an offsetting short. Pure functions of user-supplied scalars.

FORMULA SOURCES:
──────────────────────────────────────────────
1. Uniswap V3 Core Whitepaper
   https://uniswap.org/whitepaper-v3.pdf
   - §6.2  Liquidity / virtual reserves
   - §6.4  Token amounts from L and √P

2. Uniswap V3 Development Book — Calculating Liquidity
   https://uniswapv3book.com/docs/milestone_1/calculating-liquidity/
   - x = L·(1/√P − 1/√Pb),  y = L·(√P − √Pa)

3. Deposit identity used for L (cash-denominated deposit D):
   D = x·P + y = L·(2√P − P/√Pb − √Pa)

Strict functions raise HedgeCalcError subclasses. The lenient wrappers
(no `_strict` suffix) log and return documented defaults so a scenario
sweep is never aborted by one bad point.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from hedge_cli.central_config import config
from hedge_cli.errors import DegenerateRangeError, HedgeCalcError, OutOfRangeError

logger = logging.getLogger(__name__)

# Errors the lenient wrappers absorb
_ARITHMETIC_ERRORS = (HedgeCalcError, ValueError, ZeroDivisionError, OverflowError)

# Denominators below this fraction of √P are treated as zero (collapsed range)
_DENOMINATOR_TOLERANCE = 1e-12


# ── Value Types ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RangeSpec:
    """Concentrated-liquidity price bounds (quote per token)."""

    lower_price: float
    upper_price: float

    @property
    def sqrt_lower(self) -> float:
        return math.sqrt(self.lower_price)

    @property
    def sqrt_upper(self) -> float:
        return math.sqrt(self.upper_price)

    def contains(self, price: float) -> bool:
        return self.lower_price <= price <= self.upper_price


class InputDenomination(Enum):
    """Which side of the deposit the user typed in."""

    TOKEN = "token"
    CASH = "cash"


class PriceRegime(Enum):
    """Where a price sits relative to the range.

    Shared by decomposition, impermanent loss and hedge delta so the
    three never disagree on a boundary.
    """

    BELOW_RANGE = "below"
    IN_RANGE = "in"
    ABOVE_RANGE = "above"


def classify_price(price: float, price_range: RangeSpec) -> PriceRegime:
    """Boundaries belong to the out-of-range regimes (price ≤ Pa, price ≥ Pb)."""
    if price <= price_range.lower_price:
        return PriceRegime.BELOW_RANGE
    if price >= price_range.upper_price:
        return PriceRegime.ABOVE_RANGE
    return PriceRegime.IN_RANGE


@dataclass(frozen=True)
class Decomposition:
    """Holdings at one observation price."""

    token_amount: float
    cash_amount: float
    total_value: float
    regime: PriceRegime


@dataclass(frozen=True)
class PositionOutcome:
    """Entry vs. current comparison for one LP position."""

    token_amount: float
    cash_amount: float
    total_value: float
    impermanent_loss: float
    hodl_value: float
    liquidity: float
    initial_token_amount: float
    initial_cash_amount: float
    initial_total_value: float

    @classmethod
    def safe_default(cls, deposit_amount: float) -> "PositionOutcome":
        """Zeroed result used when the strict computation fails."""
        return cls(
            token_amount=0.0,
            cash_amount=0.0,
            total_value=0.0,
            impermanent_loss=0.0,
            hodl_value=deposit_amount,
            liquidity=0.0,
            initial_token_amount=0.0,
            initial_cash_amount=0.0,
            initial_total_value=deposit_amount,
        )


@dataclass(frozen=True)
class SideDeposit:
    """Position sized from one side of the deposit."""

    token_amount: float
    cash_amount: float
    total_value: float
    liquidity: float


@dataclass(frozen=True)
class HedgeSizing:
    """Recommended short notional (cash units) per market regime."""

    bull: float
    normal: float
    bear: float


@dataclass(frozen=True)
class PositionParams:
    """
    User inputs for one LP position.

    With InputDenomination.CASH, `deposit_amount` is the total deposit in
    cash units. With InputDenomination.TOKEN it is a token quantity; the
    cash side is derived from the range and the total becomes the deposit.
    """

    entry_price: float
    deposit_amount: float
    price_range: RangeSpec
    input_denomination: InputDenomination = InputDenomination.CASH

    def deposit_value(self) -> float:
        """Total deposit in cash units. Raises on an invalid range."""
        if self.input_denomination is InputDenomination.CASH:
            return self.deposit_amount
        side = calculate_lp_from_side_amount_strict(
            self.entry_price,
            self.deposit_amount,
            self.price_range,
            InputDenomination.TOKEN,
        )
        return side.total_value


# ── Uniswap V3 Core Math ────────────────────────────────────────────────


def _check_positive_prices(*prices: float) -> None:
    if any(p <= 0 for p in prices):
        raise DegenerateRangeError("Prices must be positive")


def _check_range_ordered(price_range: RangeSpec) -> None:
    if price_range.lower_price >= price_range.upper_price:
        raise DegenerateRangeError("Lower price must be below upper price")


def _check_entry_in_range(entry_price: float, price_range: RangeSpec) -> None:
    if not price_range.contains(entry_price):
        raise OutOfRangeError("Entry price must be within the specified range")


def calculate_liquidity(
    entry_price: float, deposit_amount: float, price_range: RangeSpec
) -> float:
    """
    Liquidity L for a cash-denominated deposit.

    Formula:
        D = L·(2√P − P/√Pb − √Pa)  →  L = D / (2√P − P/√Pb − √Pa)

    The denominator is positive for any entry inside [Pa, Pb] with Pa < Pb.
    A denominator within float noise of zero raises DegenerateRangeError
    instead of yielding a huge L.
    """
    _check_positive_prices(entry_price, price_range.lower_price, price_range.upper_price)
    _check_range_ordered(price_range)
    _check_entry_in_range(entry_price, price_range)

    sqrt_p = math.sqrt(entry_price)
    denominator = 2 * sqrt_p - entry_price / price_range.sqrt_upper - price_range.sqrt_lower
    if denominator <= _DENOMINATOR_TOLERANCE * sqrt_p:
        raise DegenerateRangeError(
            f"Liquidity denominator is non-positive ({denominator:.3e}); range too narrow"
        )
    return deposit_amount / denominator


def calculate_token_distribution(
    price: float, liquidity: float, price_range: RangeSpec
) -> Decomposition:
    """
    Token/cash holdings of a position with fixed L at `price`.

      price ≤ Pa : x = L·(1/√Pa − 1/√Pb), y = 0            (all token)
      price ≥ Pb : x = 0,                 y = L·(√Pb − √Pa) (all cash)
      otherwise  : x = L·(1/√P − 1/√Pb),  y = L·(√P − √Pa)

    Amounts are clamped at zero to absorb float underflow on the bounds.
    Price 0 is valid and falls in the below-range branch.
    """
    if price < 0:
        raise DegenerateRangeError("Price cannot be negative")
    if liquidity < 0:
        raise DegenerateRangeError("Liquidity cannot be negative")

    sqrt_pa = price_range.sqrt_lower
    sqrt_pb = price_range.sqrt_upper
    regime = classify_price(price, price_range)

    if regime is PriceRegime.BELOW_RANGE:
        token_amount = liquidity * (1 / sqrt_pa - 1 / sqrt_pb)
        cash_amount = 0.0
    elif regime is PriceRegime.ABOVE_RANGE:
        token_amount = 0.0
        cash_amount = liquidity * (sqrt_pb - sqrt_pa)
    else:
        sqrt_p = math.sqrt(price)
        token_amount = liquidity * (1 / sqrt_p - 1 / sqrt_pb)
        cash_amount = liquidity * (sqrt_p - sqrt_pa)

    total_value = token_amount * price + cash_amount

    return Decomposition(
        token_amount=max(0.0, token_amount),
        cash_amount=max(0.0, cash_amount),
        total_value=total_value,
        regime=regime,
    )


# ── Side-Amount Sizing ──────────────────────────────────────────────────


def calculate_lp_from_side_amount_strict(
    entry_price: float,
    amount: float,
    price_range: RangeSpec,
    side: InputDenomination = InputDenomination.TOKEN,
) -> SideDeposit:
    """
    Size a position from the amount on one side, the way the Uniswap UI does.

      TOKEN : L = Δx / (1/√P − 1/√Pb),  y = L·(√P − √Pa)
      CASH  : L = Δy / (√P − √Pa),      x = L·(1/√P − 1/√Pb)

    At Pb (TOKEN) or Pa (CASH) the chosen side is empty and L is undefined.
    """
    _check_positive_prices(entry_price, price_range.lower_price, price_range.upper_price)
    _check_range_ordered(price_range)
    _check_entry_in_range(entry_price, price_range)

    sqrt_p = math.sqrt(entry_price)
    sqrt_pa = price_range.sqrt_lower
    sqrt_pb = price_range.sqrt_upper

    if side is InputDenomination.TOKEN:
        denominator = 1 / sqrt_p - 1 / sqrt_pb
        if denominator <= _DENOMINATOR_TOLERANCE / sqrt_p:
            raise DegenerateRangeError("No token side at the upper bound")
        liquidity = amount / denominator
        token_amount = amount
        cash_amount = liquidity * (sqrt_p - sqrt_pa)
    else:
        denominator = sqrt_p - sqrt_pa
        if denominator <= _DENOMINATOR_TOLERANCE * sqrt_p:
            raise DegenerateRangeError("No cash side at the lower bound")
        liquidity = amount / denominator
        token_amount = liquidity * (1 / sqrt_p - 1 / sqrt_pb)
        cash_amount = amount

    return SideDeposit(
        token_amount=token_amount,
        cash_amount=cash_amount,
        total_value=token_amount * entry_price + cash_amount,
        liquidity=liquidity,
    )


def calculate_lp_from_side_amount(
    entry_price: float,
    amount: float,
    price_range: RangeSpec,
    side: InputDenomination = InputDenomination.TOKEN,
) -> SideDeposit:
    """Lenient variant: all zeros on failure."""
    try:
        return calculate_lp_from_side_amount_strict(entry_price, amount, price_range, side)
    except _ARITHMETIC_ERRORS as exc:
        logger.error("LP side-amount calculation error: %s", exc)
        return SideDeposit(token_amount=0.0, cash_amount=0.0, total_value=0.0, liquidity=0.0)


# ── Position Outcome ────────────────────────────────────────────────────


def calculate_lp_position_strict(
    current_price: float,
    entry_price: float,
    deposit_amount: float,
    price_range: RangeSpec,
) -> PositionOutcome:
    """
    Value the position at `current_price` against holding its entry split.

    L is derived once from the entry and reused for the current price.

        HODL = x₀·P_current + y₀

    Impermanent loss follows the regime of the current price:
        below : (x_current − HODL/P_current) · P_current
        above : y_current − HODL
        in    : V_current − HODL

    Negative means the LP underperforms holding.
    """
    liquidity = calculate_liquidity(entry_price, deposit_amount, price_range)
    initial = calculate_token_distribution(entry_price, liquidity, price_range)
    current = calculate_token_distribution(current_price, liquidity, price_range)

    initial_total_value = initial.token_amount * entry_price + initial.cash_amount
    hodl_value = initial.token_amount * current_price + initial.cash_amount

    if current.regime is PriceRegime.BELOW_RANGE:
        if current_price > 0:
            # Reprice all of HODL into tokens and compare token counts
            hodl_tokens_equivalent = hodl_value / current_price
            impermanent_loss = (current.token_amount - hodl_tokens_equivalent) * current_price
        else:
            # Limit at P → 0: tokens are worthless, only the HODL cash remains
            impermanent_loss = -hodl_value
    elif current.regime is PriceRegime.ABOVE_RANGE:
        impermanent_loss = current.cash_amount - hodl_value
    else:
        impermanent_loss = current.total_value - hodl_value

    return PositionOutcome(
        token_amount=current.token_amount,
        cash_amount=current.cash_amount,
        total_value=current.total_value,
        impermanent_loss=impermanent_loss,
        hodl_value=hodl_value,
        liquidity=liquidity,
        initial_token_amount=initial.token_amount,
        initial_cash_amount=initial.cash_amount,
        initial_total_value=initial_total_value,
    )


def calculate_lp_position(
    current_price: float,
    entry_price: float,
    deposit_amount: float,
    price_range: RangeSpec,
) -> PositionOutcome:
    """Lenient variant used by the scenario sweep: safe default on failure."""
    try:
        return calculate_lp_position_strict(
            current_price, entry_price, deposit_amount, price_range
        )
    except _ARITHMETIC_ERRORS as exc:
        logger.error("LP position calculation error: %s", exc)
        return PositionOutcome.safe_default(deposit_amount)


# ── Short Leg ───────────────────────────────────────────────────────────


def calculate_short_pnl(current_price: float, entry_price: float, short_size: float) -> float:
    """
    Price P&L of a short with notional `short_size` (cash units).

        PnL = size · (1 − P_current / P_entry)

    Falling price → profit, rising price → loss.
    """
    if short_size <= 0:
        return 0.0
    return short_size * (1 - current_price / entry_price)


# ── Hedge Sizing ────────────────────────────────────────────────────────


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def calculate_optimal_short_size_strict(
    entry_price: float, deposit_amount: float, price_range: RangeSpec
) -> float:
    """
    Delta-neutral short notional at entry.

        delta  = x₀ (token units held at entry)
        normal = delta · P_entry, clamped to [20%, 80%] of the deposit
    """
    bands = config.hedge
    liquidity = calculate_liquidity(entry_price, deposit_amount, price_range)
    entry = calculate_token_distribution(entry_price, liquidity, price_range)
    delta = entry.token_amount
    optimal_short = delta * entry_price
    return _clamp(
        optimal_short,
        deposit_amount * bands.NORMAL_MIN,
        deposit_amount * bands.NORMAL_MAX,
    )


def calculate_optimal_short_size(
    entry_price: float, deposit_amount: float, price_range: RangeSpec
) -> float:
    try:
        return calculate_optimal_short_size_strict(entry_price, deposit_amount, price_range)
    except _ARITHMETIC_ERRORS as exc:
        logger.error("Optimal short calculation error: %s", exc)
        return deposit_amount * config.hedge.FALLBACK_NORMAL


def calculate_market_based_short_sizes_strict(
    entry_price: float, deposit_amount: float, price_range: RangeSpec
) -> HedgeSizing:
    """
    Bull / normal / bear short sizes.

        bull = 0.7 · normal, clamped to [10%, 60%] of the deposit
        bear = 1.4 · normal, clamped to [30%, 90%] of the deposit
    """
    bands = config.hedge
    normal = calculate_optimal_short_size_strict(entry_price, deposit_amount, price_range)
    bull = _clamp(
        normal * bands.BULL_MULTIPLIER,
        deposit_amount * bands.BULL_MIN,
        deposit_amount * bands.BULL_MAX,
    )
    bear = _clamp(
        normal * bands.BEAR_MULTIPLIER,
        deposit_amount * bands.BEAR_MIN,
        deposit_amount * bands.BEAR_MAX,
    )
    return HedgeSizing(bull=bull, normal=normal, bear=bear)


def calculate_market_based_short_sizes(
    entry_price: float, deposit_amount: float, price_range: RangeSpec
) -> HedgeSizing:
    """Lenient variant: fixed fractions of the deposit on failure."""
    try:
        return calculate_market_based_short_sizes_strict(
            entry_price, deposit_amount, price_range
        )
    except _ARITHMETIC_ERRORS as exc:
        logger.error("Market-based short calculation error: %s", exc)
        bands = config.hedge
        return HedgeSizing(
            bull=deposit_amount * bands.FALLBACK_BULL,
            normal=deposit_amount * bands.FALLBACK_NORMAL,
            bear=deposit_amount * bands.FALLBACK_BEAR,
        )
