#!/usr/bin/env python3
"""
LP Hedge CLI — CoinGecko Price Client
=====================================
Based on the official documentation: https://docs.coingecko.com/reference/simple-price

Supplies a live spot price for the entry price. The math engine never
depends on it: its output is an ordinary float input.

One GET per call, no retry, transport-default timeout. Concurrent calls
are independent; use LatestPriceRequest to drop stale results.
"""

import asyncio
import logging
from typing import List, Optional

import httpx

from hedge_cli.central_config import TOKEN_LIST, TokenInfo, config
from hedge_cli.errors import FetchError

logger = logging.getLogger(__name__)


class CoinGeckoClient:
    """CoinGecko simple-price client."""

    def __init__(self):
        self.url = config.api.get_simple_price_url()
        self.vs_currency = config.api.VS_CURRENCY

    async def fetch_token_price(self, token_id: str) -> float:
        """
        Fetch the USD spot price for a CoinGecko coin id.

        Response shape: {"<token_id>": {"usd": <float>}}

        Raises FetchError on transport failure, non-2xx status,
        undecodable body, or a missing/zero price.
        """
        params = config.api.get_simple_price_params(token_id)
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Token price fetch error: %s", exc)
            raise FetchError(f"Price request failed: {exc}") from exc

        if not response.is_success:
            raise FetchError(f"HTTP error! status: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError("Price response is not valid JSON") from exc

        return self._extract_price(data, token_id)

    def _extract_price(self, data: object, token_id: str) -> float:
        entry = data.get(token_id) if isinstance(data, dict) else None
        price = entry.get(self.vs_currency) if isinstance(entry, dict) else None
        if not price:
            raise FetchError("Price data not found")
        try:
            return float(price)
        except (TypeError, ValueError) as exc:
            raise FetchError(f"Invalid price value: {price!r}") from exc


def get_token_list() -> List[TokenInfo]:
    """Selectable assets, in display order."""
    return list(TOKEN_LIST)


def find_token(token: str) -> Optional[TokenInfo]:
    """Look up a catalog entry by id or symbol (case-insensitive)."""
    key = token.strip().lower()
    for info in TOKEN_LIST:
        if info.id == key or info.symbol.lower() == key:
            return info
    return None


class LatestPriceRequest:
    """
    Last-write-wins guard for price fetches.

    Every fetch takes a new sequence number. When an older fetch finishes
    after a newer one has started, its result is dropped (returns None).
    Errors from a superseded fetch are dropped too.
    """

    def __init__(self, client: Optional[CoinGeckoClient] = None):
        self.client = client or CoinGeckoClient()
        self._latest = 0

    @property
    def latest_sequence(self) -> int:
        return self._latest

    async def fetch(self, token_id: str) -> Optional[float]:
        self._latest += 1
        sequence = self._latest
        try:
            price = await self.client.fetch_token_price(token_id)
        except FetchError:
            if sequence != self._latest:
                logger.debug("Dropping stale price error for %s (#%d)", token_id, sequence)
                return None
            raise
        if sequence != self._latest:
            logger.debug("Dropping stale price for %s (#%d)", token_id, sequence)
            return None
        return price


if __name__ == "__main__":
    # Usage: python -m hedge_cli.coingecko_client <token_id>
    import sys as _sys

    _token = _sys.argv[1] if len(_sys.argv) > 1 else "ethereum"
    print(f"💰 {_token}: ${asyncio.run(CoinGeckoClient().fetch_token_price(_token)):,.2f}")
