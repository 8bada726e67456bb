from datetime import date, datetime, timezone

import pytest

from token_table.core.formatting import CellStyle, format_cell, format_token_cell
from token_table.core.records import TokenRecord

PURR_ID = "0xc1fb593aeffbeb02f85e0308e9956a90"
NOW = datetime(2024, 5, 16, 12, 0, tzinfo=timezone.utc)


def make_record(**fields) -> TokenRecord:
    data = {"token": "HFUN", "token_id": "0xbaf2", "market_cap": 1_000, "slippage": 0.2}
    data.update(fields)
    return TokenRecord.model_validate(data)


def test_negative_change_formats_with_hint():
    cell = format_cell("price_change_24h", -3.456)
    assert cell.text == "-3.46%"
    assert cell.style is CellStyle.NEGATIVE


def test_zero_change_is_positive():
    assert format_cell("price_change_24h", 0.0).style is CellStyle.POSITIVE


def test_market_cap_grouped_dollars():
    assert format_cell("market_cap", 1234567).text == "$1,234,567"
    assert format_cell("market_cap", 1234567.5).text == "$1,234,568"
    assert format_cell("total_ask_size_usd", 999.4).text == "$999"


def test_price_keeps_full_precision():
    assert format_cell("mark_price", 0.000123456).text == "$0.000123456"
    assert format_cell("mark_price", 12.0).text == "$12"
    assert format_cell("mark_price", 3.14159265).text == "$3.14159265"


def test_tiny_price_stays_positional():
    assert format_cell("mark_price", 0.0000123).text == "$0.0000123"
    assert format_cell("mark_price", 4.5e-09).text == "$0.0000000045"
    assert format_cell("mark_price", 1e-05).text == "$0.00001"


@pytest.mark.parametrize(
    "key",
    [
        "slippage",
        "holders.concentration.top1_share",
        "holders.concentration.top20_share",
        "holders.total_burned_percent",
        "holders.hip2.percent",
    ],
)
def test_percent_columns(key):
    cell = format_cell(key, 12.3)
    assert cell.text == "12.30%"
    assert cell.style is CellStyle.NEUTRAL


def test_percent_rounding_two_places():
    assert format_cell("slippage", 0.5).text == "0.50%"


def test_absent_value_renders_empty():
    assert format_cell("holders.concentration.top1_share", None).text == ""


def test_plain_numbers_and_strings():
    assert format_cell("holders_count", 1520).text == "1520"
    assert format_cell("token_id", "0xabc").text == "0xabc"


def test_age_renders_days():
    record = make_record(deploy_time="2024-05-01T00:00:00Z")
    assert format_cell("deploy_time", record.deploy_time, record, NOW).text == "15d"


def test_age_override():
    record = make_record(token_id=PURR_ID, deploy_time="2024-05-15T00:00:00Z")
    overrides = {PURR_ID: date(2024, 4, 16)}
    assert format_cell("deploy_time", record.deploy_time, record, NOW, overrides).text == "30d"


def test_unparseable_age_is_empty():
    record = make_record(deploy_time="soon")
    assert format_cell("deploy_time", record.deploy_time, record, NOW).text == ""


def test_token_cell_liquid():
    cell = format_token_cell(make_record(slippage=0.31))
    assert cell.liquid is True
    assert cell.text == "HFUN"
    assert cell.href == "https://app.hyperliquid.xyz/trade/0xbaf2"
    assert cell.tooltip == "Spread <= 0.31%"


def test_token_cell_illiquid_reports_spread():
    cell = format_token_cell(make_record(slippage=1.234), trade_url_base="https://example.test/t/")
    assert cell.liquid is False
    assert cell.tooltip == "Spread is 1.23%"
    assert cell.href == "https://example.test/t/0xbaf2"
