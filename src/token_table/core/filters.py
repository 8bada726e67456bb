"""Row filtering: search text, liquidity class and market-cap bounds."""
from __future__ import annotations

from enum import Enum
from math import inf, isnan
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from .records import IndexedRecord, TokenRecord

# Tokens whose spread indicator does not exceed this value are treated as
# liquid. Inclusive on purpose: 0.31 itself is liquid.
LIQUID_SPREAD_THRESHOLD = 0.31


class LiquidityClass(str, Enum):
    ALL = "all"
    HYPERLIQUID = "hyperliquid"
    NON_HYPERLIQUID = "non-hyperliquid"


class FilterState(BaseModel):
    """User-controlled filter inputs, kept in their raw textual form."""

    model_config = ConfigDict(frozen=True)

    search: str = Field(default="", description="Case-insensitive substring matched against the symbol.")
    liquidity: LiquidityClass = Field(default=LiquidityClass.ALL)
    mc_min: str = Field(default="", description="Raw minimum market-cap input.")
    mc_max: str = Field(default="", description="Raw maximum market-cap input.")


def is_liquid(slippage: float | None) -> bool:
    return slippage is not None and slippage <= LIQUID_SPREAD_THRESHOLD


def parse_bound(raw: object) -> float | None:
    """Leniently parse a numeric bound; blank or malformed input means unbounded."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if isnan(value):
        return None
    return value


def market_cap_bounds(state: FilterState) -> tuple[float, float]:
    low = parse_bound(state.mc_min)
    high = parse_bound(state.mc_max)
    return (0.0 if low is None else low, inf if high is None else high)


def matches(record: TokenRecord | IndexedRecord, state: FilterState) -> bool:
    """Return True when the record passes every active filter."""

    if isinstance(record, IndexedRecord):
        record = record.record

    if state.search and state.search.lower() not in record.token.lower():
        return False

    if state.liquidity is not LiquidityClass.ALL:
        liquid = is_liquid(record.slippage)
        if state.liquidity is LiquidityClass.HYPERLIQUID and not liquid:
            return False
        if state.liquidity is LiquidityClass.NON_HYPERLIQUID and liquid:
            return False

    low, high = market_cap_bounds(state)
    return low <= record.market_cap <= high


def apply_filters(records: Iterable[IndexedRecord], state: FilterState) -> tuple[IndexedRecord, ...]:
    """Keep records passing ``state`` in their incoming order."""

    return tuple(record for record in records if matches(record, state))
