"""Field accessors shared by filtering, sorting and formatting.

Every column the table knows about has a typed accessor in ``ACCESSORS``.
Paths outside that table fall back to a generic dotted walk, so a column
such as ``holders.concentration.top5_share`` resolves the same way no matter
which stage asks for it. A missing link anywhere on the path yields ``None``.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping

from .records import IndexedRecord, TokenRecord

Accessor = Callable[[TokenRecord], Any]


def _concentration(record: TokenRecord):
    holders = record.holders
    return holders.concentration if holders is not None else None


def _top_share(name: str) -> Accessor:
    def accessor(record: TokenRecord) -> float | None:
        concentration = _concentration(record)
        return getattr(concentration, name) if concentration is not None else None

    return accessor


def _burned(record: TokenRecord) -> float | None:
    return record.holders.total_burned_percent if record.holders is not None else None


def _hip2(record: TokenRecord) -> float | None:
    holders = record.holders
    if holders is None or holders.hip2 is None:
        return None
    return holders.hip2.percent


ACCESSORS: dict[str, Accessor] = {
    "token": lambda r: r.token,
    "token_id": lambda r: r.token_id,
    "slippage": lambda r: r.slippage,
    "mark_price": lambda r: r.mark_price,
    "price_change_24h": lambda r: r.price_change_24h,
    "holders_count": lambda r: r.holders_count,
    "fdv": lambda r: r.fdv,
    "market_cap": lambda r: r.market_cap,
    "deploy_time": lambda r: r.deploy_time,
    "total_bid_size": lambda r: r.total_bid_size,
    "total_ask_size": lambda r: r.total_ask_size,
    "total_bid_size_usd": lambda r: r.total_bid_size_usd,
    "total_ask_size_usd": lambda r: r.total_ask_size_usd,
    "holders.concentration.top1_share": _top_share("top1_share"),
    "holders.concentration.top5_share": _top_share("top5_share"),
    "holders.concentration.top20_share": _top_share("top20_share"),
    "holders.total_burned_percent": _burned,
    "holders.hip2.percent": _hip2,
}


def resolve_path(obj: Any, path: str) -> Any:
    """Walk ``path`` segment by segment over mappings and attributes."""

    current = obj
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def get_value(record: TokenRecord | IndexedRecord, path: str) -> Any:
    """Resolve a column path against a record, returning ``None`` when absent."""

    if isinstance(record, IndexedRecord):
        if path == "index":
            return record.index
        record = record.record
    accessor = ACCESSORS.get(path)
    if accessor is not None:
        return accessor(record)
    return resolve_path(record, path)
