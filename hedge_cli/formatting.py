"""
Display Formatting — numbers, currency, percentages
===================================================

Pure helpers that turn engine outputs into display strings.
Number style follows en-US grouping: 1,234.5 (trailing zeros dropped).
"""

from typing import Any, Dict

ZERO_EPSILON = 1e-10  # anything smaller renders as zero
TINY_THRESHOLD = 0.0001  # below this, fixed 6 decimals


def format_number(num: float, decimals: int = 2) -> str:
    """Thousands-separated with at most `decimals` fraction digits."""
    if abs(num) < ZERO_EPSILON:
        return "0"

    if abs(num) < TINY_THRESHOLD:
        return f"{num:.6f}"

    text = f"{num:,.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(num: float) -> str:
    """USD with 4 decimals below $1, 2 decimals otherwise ($1,234.56)."""
    if abs(num) < ZERO_EPSILON:
        return "$0"
    if abs(num) < 1:
        return f"${format_number(num, 4)}"
    return f"${format_number(num, 2)}"


def format_currency_compact(num: float) -> str:
    """Compact USD for tables: $1.25M, $12.5K, $950."""
    if abs(num) < ZERO_EPSILON:
        return "$0"
    if abs(num) >= 1_000_000:
        return f"${format_number(num / 1_000_000, 2)}M"
    if abs(num) >= 1000:
        return f"${format_number(num / 1000, 1)}K"
    return f"${format_number(num, 2)}"


def format_percent(num: float, decimals: int = 2) -> str:
    sign = "+" if num >= 0 else ""
    return f"{sign}{format_number(num, decimals)}%"


def get_color_class(value: float) -> str:
    """CSS-style class name for a signed value."""
    if value > 0:
        return "positive"
    if value < 0:
        return "negative"
    return "neutral"


def format_scenario_row(row: Any) -> Dict[str, str]:
    """Display strings for one ScenarioRow."""
    return {
        "price": format_currency(row.price),
        "change": format_percent(row.price_change, 1),
        "token": format_number(row.token_amount, 4),
        "cash": format_currency(row.cash_amount),
        "value": format_currency(row.total_value),
        "lp_pnl": format_currency(row.lp_pnl),
        "short_pnl": format_currency(row.short_pnl),
        "net_pnl": format_currency(row.net_pnl),
        "return": format_percent(row.return_pct),
        "marker": "◀" if row.is_current_price else "",
    }
