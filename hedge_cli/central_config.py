"""
Project Configuration — API endpoints, version, constants
==========================================================

Contains CoinGecko API configuration, the selectable token catalog,
scenario sweep classes, hedge clamp bands and project metadata.
Source: https://docs.coingecko.com/reference/simple-price
"""

import re
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path
from types import MappingProxyType
from typing import Tuple

# Version — single source of truth is pyproject.toml
try:
    PROJECT_VERSION = version("lp-hedge-cli")
except PackageNotFoundError:
    # Dev / CI: package not installed — read pyproject.toml directly
    _toml = Path(__file__).resolve().parent.parent / "pyproject.toml"
    _m = (
        re.search(r'version\s*=\s*"([^"]+)"', _toml.read_text())
        if _toml.exists()
        else None
    )
    PROJECT_VERSION = _m.group(1) if _m else "0.0.0-dev"
PROJECT_NAME = "LP Hedge CLI"


@dataclass(frozen=True)
class CoinGeckoAPI:
    """CoinGecko public API configuration (no key required)."""

    BASE_URL: str = "https://api.coingecko.com/api/v3"

    # {ids: {vs_currency: price}}
    SIMPLE_PRICE_ENDPOINT: str = "/simple/price"

    VS_CURRENCY: str = "usd"

    @classmethod
    def get_simple_price_url(cls) -> str:
        """URL of the simple-price endpoint (query params passed separately)."""
        return f"{cls.BASE_URL}{cls.SIMPLE_PRICE_ENDPOINT}"

    @classmethod
    def get_simple_price_params(cls, token_id: str) -> dict[str, str]:
        return {"ids": token_id, "vs_currencies": cls.VS_CURRENCY}


# ── Token Catalog ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class TokenInfo:
    """A selectable asset. `id` is the CoinGecko coin id."""

    id: str
    name: str
    symbol: str


CUSTOM_TOKEN_ID = "custom"  # user enters the price by hand, never fetched

TOKEN_LIST: Tuple[TokenInfo, ...] = (
    TokenInfo("ethereum", "Ethereum", "ETH"),
    TokenInfo("bitcoin", "Bitcoin", "BTC"),
    TokenInfo("sui", "Sui", "SUI"),
    TokenInfo("hyperliquid", "Hype", "HYPE"),
    TokenInfo("mantle", "Mantle", "MNT"),
    TokenInfo("solana", "Solana", "SOL"),
    TokenInfo(CUSTOM_TOKEN_ID, "Custom", "CUSTOM"),
)


# ── Scenario Sweep Classes ──────────────────────────────────────────────
# Values are percentage points around the entry price.

PRICE_RANGES = MappingProxyType(
    {
        "narrow": 25.0,  # ±25%
        "medium": 50.0,  # ±50%
        "wide": 75.0,  # ±75%
        "extreme": 100.0,  # ±100%
    }
)

STEP_SIZES = MappingProxyType(
    {
        "fine": 2.5,
        "normal": 5.0,
        "coarse": 10.0,
    }
)

DEFAULT_PRICE_RANGE = "medium"
DEFAULT_STEP_SIZE = "normal"

# |change| below this marks the current-price row
CURRENT_PRICE_TOLERANCE_PCT = 0.01


# ── Hedge Sizing Bands ──────────────────────────────────────────────────
# Fractions of the LP deposit. Bull under-hedges to keep upside,
# bear over-hedges for downside protection.


@dataclass(frozen=True)
class HedgeBands:
    NORMAL_MIN: float = 0.2
    NORMAL_MAX: float = 0.8

    BULL_MULTIPLIER: float = 0.7
    BULL_MIN: float = 0.1
    BULL_MAX: float = 0.6

    BEAR_MULTIPLIER: float = 1.4
    BEAR_MIN: float = 0.3
    BEAR_MAX: float = 0.9

    # Returned when the strict computation fails
    FALLBACK_BULL: float = 0.2
    FALLBACK_NORMAL: float = 0.25
    FALLBACK_BEAR: float = 0.35


# Unified configuration
class HedgeCliConfig:
    """Unified configuration."""

    api = CoinGeckoAPI()
    hedge = HedgeBands()


# Global instance
config = HedgeCliConfig()
