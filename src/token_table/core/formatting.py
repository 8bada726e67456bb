"""Cell formatting for the token table."""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from math import isfinite
from typing import Mapping

from pydantic import BaseModel, ConfigDict

from .ages import age_in_days
from .filters import LIQUID_SPREAD_THRESHOLD, is_liquid
from .records import TokenRecord

PRICE_KEYS = frozenset({"mark_price"})
PERCENT_KEYS = frozenset({"price_change_24h", "slippage"})
USD_AMOUNT_KEYS = frozenset({"market_cap", "fdv", "total_bid_size_usd", "total_ask_size_usd"})
SIGNED_KEYS = frozenset({"price_change_24h"})
AGE_KEY = "deploy_time"
TOKEN_KEY = "token"

DEFAULT_TRADE_URL_BASE = "https://app.hyperliquid.xyz/trade/"


class CellStyle(str, Enum):
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class FormattedCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    style: CellStyle = CellStyle.NEUTRAL


class TokenCell(FormattedCell):
    """The identity cell: a trade link plus the liquidity badge."""

    href: str
    liquid: bool
    tooltip: str


def _plain_number(value: float) -> str:
    """Shortest round-tripping digits, always in positional notation."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return format(Decimal(repr(value)), "f")
    return str(value)


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def format_usd_amount(value: float) -> str:
    whole = Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"${whole:,}"


def format_price(value: float) -> str:
    return f"${_plain_number(value)}"


def _is_percent_key(key: str) -> bool:
    return key in PERCENT_KEYS or "percent" in key or "share" in key


def format_cell(
    key: str,
    value: object,
    record: TokenRecord | None = None,
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
) -> FormattedCell:
    """Render one resolved value for the column ``key``."""

    if key == AGE_KEY:
        if record is None:
            return FormattedCell(text="")
        days = age_in_days(record, now, overrides)
        return FormattedCell(text="" if days is None else f"{days}d")

    if value is None:
        return FormattedCell(text="")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not isfinite(value):
        return FormattedCell(text=str(value))

    style = CellStyle.NEUTRAL
    if key in SIGNED_KEYS:
        style = CellStyle.POSITIVE if value >= 0 else CellStyle.NEGATIVE

    if key in PRICE_KEYS:
        text = format_price(value)
    elif _is_percent_key(key):
        text = format_percent(value)
    elif key in USD_AMOUNT_KEYS:
        text = format_usd_amount(value)
    else:
        text = _plain_number(value)
    return FormattedCell(text=text, style=style)


def format_token_cell(record: TokenRecord, trade_url_base: str = DEFAULT_TRADE_URL_BASE) -> TokenCell:
    liquid = is_liquid(record.slippage)
    if liquid:
        tooltip = f"Spread <= {LIQUID_SPREAD_THRESHOLD}%"
    else:
        tooltip = f"Spread is {record.slippage:.2f}%"
    return TokenCell(
        text=record.token,
        href=f"{trade_url_base}{record.token_id}",
        liquid=liquid,
        tooltip=tooltip,
    )
