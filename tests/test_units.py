"""
Unit Tests for LP Hedge CLI Modules
===================================

Covers the support modules around the math engine:
  - formatting.py         (number / currency / percent display)
  - validation.py         (input checks, ValidationError)
  - central_config.py     (API config, token catalog, sweep classes)
  - coingecko_client.py   (price fetch error mapping, last-write-wins)
  - commands.py           (command handlers, entry price resolution)
  - run.py                (argparse parser structure, dispatch)

All tests are offline — no network calls. Mock-based where needed.
"""

import asyncio
from unittest.mock import patch, MagicMock, AsyncMock

import httpx
import pytest

# ═══════════════════════════════════════════════════════════════════════════
# 1. formatting.py
# ═══════════════════════════════════════════════════════════════════════════

from hedge_cli.formatting import (
    format_currency,
    format_currency_compact,
    format_number,
    format_percent,
    format_scenario_row,
    get_color_class,
)


class TestFormatNumber:
    @pytest.mark.parametrize("num,expected", [
        (1234.5678, "1,234.57"),
        (1000, "1,000"),
        (1000.5, "1,000.5"),
        (-1234.5, "-1,234.5"),
        (0.1234, "0.12"),
        (1_000_000, "1,000,000"),
    ])
    def test_grouping_and_trailing_zeros(self, num, expected):
        assert format_number(num) == expected

    def test_custom_decimals(self):
        assert format_number(2.378912, 4) == "2.3789"
        assert format_number(2.5, 0) == "2"

    def test_near_zero_is_zero(self):
        assert format_number(0) == "0"
        assert format_number(1e-11) == "0"
        assert format_number(-1e-12) == "0"

    def test_tiny_values_fixed_six(self):
        assert format_number(0.00005) == "0.000050"
        assert format_number(-0.00005) == "-0.000050"


class TestFormatCurrency:
    @pytest.mark.parametrize("num,expected", [
        (0, "$0"),
        (1e-11, "$0"),
        (0.5, "$0.5"),
        (0.12346, "$0.1235"),
        (12.3, "$12.3"),
        (1234.567, "$1,234.57"),
        (10_000, "$10,000"),
    ])
    def test_values(self, num, expected):
        assert format_currency(num) == expected

    def test_negative(self):
        assert format_currency(-500) == "$-500"


class TestFormatCurrencyCompact:
    @pytest.mark.parametrize("num,expected", [
        (0, "$0"),
        (950, "$950"),
        (12_500, "$12.5K"),
        (1_250_000, "$1.25M"),
        (-2_000_000, "$-2M"),
    ])
    def test_values(self, num, expected):
        assert format_currency_compact(num) == expected


class TestFormatPercent:
    def test_positive_has_plus(self):
        assert format_percent(5) == "+5%"
        assert format_percent(12.346) == "+12.35%"

    def test_negative(self):
        assert format_percent(-3.456) == "-3.46%"

    def test_zero_has_plus(self):
        assert format_percent(0) == "+0%"


class TestColorClass:
    def test_classes(self):
        assert get_color_class(1) == "positive"
        assert get_color_class(-0.01) == "negative"
        assert get_color_class(0) == "neutral"


class TestFormatScenarioRow:
    def test_row_strings(self):
        row = MagicMock(
            price=2200.0, price_change=10.0, token_amount=0.0, cash_amount=10_232.0,
            total_value=10_232.0, lp_pnl=232.0, short_pnl=-500.0, net_pnl=-268.0,
            return_pct=-2.68, is_current_price=False,
        )
        cells = format_scenario_row(row)
        assert cells["price"] == "$2,200"
        assert cells["change"] == "+10%"
        assert cells["token"] == "0"
        assert cells["net_pnl"] == "$-268"
        assert cells["return"] == "-2.68%"
        assert cells["marker"] == ""

    def test_current_marker(self):
        row = MagicMock(
            price=2000.0, price_change=0.0, token_amount=2.5, cash_amount=5000.0,
            total_value=10_000.0, lp_pnl=0.0, short_pnl=0.0, net_pnl=0.0,
            return_pct=0.0, is_current_price=True,
        )
        assert format_scenario_row(row)["marker"] == "◀"


# ═══════════════════════════════════════════════════════════════════════════
# 2. validation.py
# ═══════════════════════════════════════════════════════════════════════════

from hedge_cli.errors import FetchError, HedgeCalcError, ValidationError
from hedge_cli.validation import require_valid_inputs, validate_inputs


class TestValidateInputs:
    def test_valid(self):
        assert validate_inputs(2000, 10_000, 1800, 2200, 0) == []

    def test_swapped_range(self):
        errors = validate_inputs(2000, 10_000, 2200, 1800, 0)
        assert "Lower range must be below entry price" in errors
        assert "Lower range must be below upper range" in errors
        assert "Upper range must be above entry price" in errors

    def test_collects_every_violation(self):
        errors = validate_inputs(0, 0, 100, 50, -1, duration_days=-5)
        assert "Entry price must be positive" in errors
        assert "LP amount must be positive" in errors
        assert "Short size cannot be negative" in errors
        assert "Lower range must be below upper range" in errors
        assert "Duration cannot be negative" in errors

    def test_entry_on_boundary_rejected(self):
        assert "Lower range must be below entry price" in validate_inputs(1800, 10_000, 1800, 2200, 0)
        assert "Upper range must be above entry price" in validate_inputs(2200, 10_000, 1800, 2200, 0)

    def test_non_positive_lower(self):
        assert "Lower range must be positive" in validate_inputs(2000, 10_000, 0, 2200, 0)

    def test_require_raises_with_all_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            require_valid_inputs(2000, 10_000, 2200, 1800, 0)
        assert len(exc_info.value.errors) >= 2
        assert "Lower range must be below upper range" in str(exc_info.value)

    def test_require_passes(self):
        require_valid_inputs(2000, 10_000, 1800, 2200, 5000, 30)

    def test_error_hierarchy(self):
        assert issubclass(ValidationError, HedgeCalcError)
        assert issubclass(FetchError, HedgeCalcError)
        assert issubclass(FetchError, RuntimeError)


# ═══════════════════════════════════════════════════════════════════════════
# 3. central_config.py
# ═══════════════════════════════════════════════════════════════════════════

from hedge_cli.central_config import (
    PRICE_RANGES,
    PROJECT_VERSION,
    STEP_SIZES,
    TOKEN_LIST,
    CoinGeckoAPI,
    config,
)


class TestCentralConfig:
    def test_version_string(self):
        assert isinstance(PROJECT_VERSION, str) and PROJECT_VERSION

    def test_simple_price_url(self):
        assert CoinGeckoAPI.get_simple_price_url() == "https://api.coingecko.com/api/v3/simple/price"

    def test_simple_price_params(self):
        assert CoinGeckoAPI.get_simple_price_params("ethereum") == {
            "ids": "ethereum",
            "vs_currencies": "usd",
        }

    def test_token_catalog_order(self):
        assert [t.symbol for t in TOKEN_LIST] == ["ETH", "BTC", "SUI", "HYPE", "MNT", "SOL", "CUSTOM"]
        assert TOKEN_LIST[3].id == "hyperliquid"

    def test_sweep_classes(self):
        assert dict(PRICE_RANGES) == {"narrow": 25, "medium": 50, "wide": 75, "extreme": 100}
        assert dict(STEP_SIZES) == {"fine": 2.5, "normal": 5, "coarse": 10}

    def test_sweep_classes_immutable(self):
        with pytest.raises(TypeError):
            PRICE_RANGES["huge"] = 200

    def test_hedge_bands(self):
        bands = config.hedge
        assert bands.NORMAL_MIN < bands.NORMAL_MAX
        assert (bands.FALLBACK_BULL, bands.FALLBACK_NORMAL, bands.FALLBACK_BEAR) == (0.2, 0.25, 0.35)


# ═══════════════════════════════════════════════════════════════════════════
# 4. coingecko_client.py
# ═══════════════════════════════════════════════════════════════════════════

from hedge_cli.coingecko_client import (
    CoinGeckoClient,
    LatestPriceRequest,
    find_token,
    get_token_list,
)


def _mock_response(payload=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class TestCoinGeckoClientMocked:
    """fetch_token_price with mocked httpx responses."""

    def _run(self, response=None, get_error=None, token_id="ethereum"):
        with patch("hedge_cli.coingecko_client.httpx.AsyncClient") as MockClient:
            mock_client = AsyncMock()
            if get_error is not None:
                mock_client.get.side_effect = get_error
            else:
                mock_client.get.return_value = response
            MockClient.return_value.__aenter__ = AsyncMock(return_value=mock_client)
            MockClient.return_value.__aexit__ = AsyncMock(return_value=False)

            result = asyncio.run(CoinGeckoClient().fetch_token_price(token_id))
            return result, mock_client

    def test_successful_fetch(self):
        price, mock_client = self._run(_mock_response({"ethereum": {"usd": 3456.78}}))
        assert price == 3456.78
        mock_client.get.assert_awaited_once_with(
            "https://api.coingecko.com/api/v3/simple/price",
            params={"ids": "ethereum", "vs_currencies": "usd"},
        )

    def test_http_error_status(self):
        with pytest.raises(FetchError, match="status: 429"):
            self._run(_mock_response({}, status_code=429))

    def test_missing_token(self):
        with pytest.raises(FetchError, match="Price data not found"):
            self._run(_mock_response({"bitcoin": {"usd": 1.0}}))

    def test_missing_usd_field(self):
        with pytest.raises(FetchError, match="Price data not found"):
            self._run(_mock_response({"ethereum": {}}))

    def test_zero_price_is_missing(self):
        with pytest.raises(FetchError, match="Price data not found"):
            self._run(_mock_response({"ethereum": {"usd": 0}}))

    def test_invalid_json(self):
        with pytest.raises(FetchError, match="not valid JSON"):
            self._run(_mock_response(json_error=ValueError("bad json")))

    def test_transport_error_wrapped(self):
        with pytest.raises(FetchError) as exc_info:
            self._run(get_error=httpx.ConnectError("connection refused"))
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestTokenLookup:
    def test_token_list_is_copy(self):
        tokens = get_token_list()
        tokens.clear()
        assert len(get_token_list()) == 7

    @pytest.mark.parametrize("query,token_id", [
        ("ETH", "ethereum"),
        ("eth", "ethereum"),
        ("ethereum", "ethereum"),
        (" SOL ", "solana"),
        ("hype", "hyperliquid"),
    ])
    def test_find_by_symbol_or_id(self, query, token_id):
        assert find_token(query).id == token_id

    def test_unknown(self):
        assert find_token("DOGE") is None


class TestLatestPriceRequest:
    """Older in-flight fetches are discarded once a newer one starts."""

    def test_stale_result_dropped(self):
        async def _scenario():
            release = asyncio.Event()

            class SlowFirstClient:
                async def fetch_token_price(self, token_id):
                    if token_id == "bitcoin":
                        await release.wait()
                        return 60_000.0
                    return 3_000.0

            req = LatestPriceRequest(SlowFirstClient())
            slow = asyncio.create_task(req.fetch("bitcoin"))
            await asyncio.sleep(0)
            fresh = await req.fetch("ethereum")
            release.set()
            stale = await slow
            return fresh, stale, req.latest_sequence

        fresh, stale, seq = asyncio.run(_scenario())
        assert fresh == 3_000.0
        assert stale is None
        assert seq == 2

    def test_stale_error_dropped(self):
        async def _scenario():
            release = asyncio.Event()

            class FailingFirstClient:
                async def fetch_token_price(self, token_id):
                    if token_id == "bitcoin":
                        await release.wait()
                        raise FetchError("HTTP error! status: 500")
                    return 3_000.0

            req = LatestPriceRequest(FailingFirstClient())
            slow = asyncio.create_task(req.fetch("bitcoin"))
            await asyncio.sleep(0)
            await req.fetch("ethereum")
            release.set()
            return await slow

        assert asyncio.run(_scenario()) is None

    def test_latest_error_propagates(self):
        client = MagicMock()
        client.fetch_token_price = AsyncMock(side_effect=FetchError("Price data not found"))
        with pytest.raises(FetchError):
            asyncio.run(LatestPriceRequest(client).fetch("ethereum"))


# ═══════════════════════════════════════════════════════════════════════════
# 5. commands.py
# ═══════════════════════════════════════════════════════════════════════════

from hedge_cli.commands import (
    cmd_hedge,
    cmd_info,
    cmd_position,
    cmd_table,
    cmd_tokens,
    resolve_entry_price,
)


class TestResolveEntryPrice:
    def test_explicit_entry_wins(self):
        assert asyncio.run(resolve_entry_price(2000.0, "ETH")) == 2000.0

    def test_nothing_given(self, capsys):
        assert asyncio.run(resolve_entry_price(None, None)) is None
        assert "--entry" in capsys.readouterr().out

    def test_unknown_token(self):
        assert asyncio.run(resolve_entry_price(None, "DOGE")) is None

    def test_custom_token_not_fetched(self):
        with patch("hedge_cli.commands.CoinGeckoClient") as MockClient:
            assert asyncio.run(resolve_entry_price(None, "custom")) is None
            MockClient.assert_not_called()

    def test_live_fetch(self):
        with patch("hedge_cli.commands.CoinGeckoClient") as MockClient:
            MockClient.return_value.fetch_token_price = AsyncMock(return_value=2500.0)
            assert asyncio.run(resolve_entry_price(None, "ETH")) == 2500.0
            MockClient.return_value.fetch_token_price.assert_awaited_once_with("ethereum")

    def test_fetch_failure(self, capsys):
        with patch("hedge_cli.commands.CoinGeckoClient") as MockClient:
            MockClient.return_value.fetch_token_price = AsyncMock(side_effect=FetchError("HTTP error! status: 503"))
            assert asyncio.run(resolve_entry_price(None, "BTC")) is None
        assert "503" in capsys.readouterr().out


class TestCommands:
    def test_info(self, capsys):
        assert cmd_info() == 0
        assert "LP Hedge CLI" in capsys.readouterr().out

    def test_tokens(self, capsys):
        assert cmd_tokens() == 0
        out = capsys.readouterr().out
        assert "ETH" in out and "hyperliquid" in out

    def test_table(self, capsys):
        assert cmd_table(2000, 10_000, 1800, 2200, short=5000) == 0
        out = capsys.readouterr().out
        assert "◀" in out
        assert "$2,000" in out

    def test_table_with_accrual(self, capsys):
        assert cmd_table(2000, 10_000, 1800, 2200, short=5000, fee_apr=36.5, funding_rate=0.01, days=10) == 0
        assert "LP fees $100" in capsys.readouterr().out

    def test_table_rejects_swapped_range(self, capsys):
        assert cmd_table(2000, 10_000, 2200, 1800) == 1
        out = capsys.readouterr().out
        assert "Lower range must be below entry price" in out
        assert "Lower range must be below upper range" in out

    def test_position(self, capsys):
        assert cmd_position(2000, 10_000, 1800, 2200, current=2000) == 0
        out = capsys.readouterr().out
        assert "Impermanent loss" in out
        assert "$10,000" in out

    def test_position_rejects_zero_current(self):
        assert cmd_position(2000, 10_000, 1800, 2200, current=0) == 1

    def test_hedge(self, capsys):
        assert cmd_hedge(2000, 10_000, 1800, 2200) == 0
        out = capsys.readouterr().out
        assert "Bull" in out and "Normal" in out and "Bear" in out

    def test_hedge_token_denomination(self, capsys):
        assert cmd_hedge(2000, 2.0, 1800, 2200, denomination="token") == 0
        assert "tokens ≈" in capsys.readouterr().out


# ═══════════════════════════════════════════════════════════════════════════
# 6. run.py
# ═══════════════════════════════════════════════════════════════════════════

from run import create_parser, main


class TestParser:
    def test_table_defaults(self):
        args = create_parser().parse_args(
            ["table", "--entry", "2000", "--deposit", "10000", "--lower", "1800", "--upper", "2200"]
        )
        assert args.command == "table"
        assert args.entry == 2000.0
        assert args.short == 0.0
        assert args.sweep_range == "medium"
        assert args.step == "normal"
        assert args.denomination == "cash"

    def test_table_full(self):
        args = create_parser().parse_args([
            "table", "--token", "ETH", "--deposit", "10000", "--lower", "1800", "--upper", "2200",
            "--short", "5000", "--range", "wide", "--step", "fine",
            "--fee-apr", "30", "--funding-rate", "0.01", "--days", "14",
        ])
        assert args.entry is None
        assert args.token == "ETH"
        assert args.sweep_range == "wide"
        assert args.fee_apr == 30.0
        assert args.funding_rate == 0.01
        assert args.days == 14.0

    def test_invalid_range_choice(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(
                ["table", "--entry", "1", "--deposit", "1", "--lower", "0.5", "--upper", "2", "--range", "huge"]
            )

    def test_position_requires_current(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["position", "--entry", "2000", "--deposit", "1", "--lower", "1", "--upper", "3"])


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_tokens(self):
        assert main(["tokens"]) == 0

    def test_table(self):
        assert main(["table", "--entry", "2000", "--deposit", "10000", "--lower", "1800", "--upper", "2200"]) == 0

    def test_missing_entry_and_token(self):
        assert main(["hedge", "--deposit", "10000", "--lower", "1800", "--upper", "2200"]) == 1

    def test_validation_failure_exit_code(self):
        assert main(["table", "--entry", "2000", "--deposit", "-5", "--lower", "1800", "--upper", "2200"]) == 1
