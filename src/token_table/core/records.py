"""Data models for spot token records as delivered by the snapshot feed."""
from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

_FROZEN = ConfigDict(frozen=True, extra="ignore")


class HolderConcentration(BaseModel):
    """Share of supply held by the largest holders, in percent."""

    model_config = _FROZEN

    top1_share: float | None = Field(None, description="Share held by the top holder.")
    top5_share: float | None = Field(None, description="Share held by the top 5 holders.")
    top20_share: float | None = Field(None, description="Share held by the top 20 holders.")


class Hip2Block(BaseModel):
    model_config = _FROZEN

    percent: float | None = Field(None, description="Share of supply in the HIP-2 liquidity strategy.")


class HoldersBlock(BaseModel):
    """Nested holder statistics attached to every token."""

    model_config = _FROZEN

    concentration: HolderConcentration | None = None
    total_burned_percent: float | None = Field(None, description="Share of supply sent to burn addresses.")
    hip2: Hip2Block | None = None


class TokenRecord(BaseModel):
    """Immutable view of one tradable spot token."""

    model_config = _FROZEN

    token: str = Field(..., description="Display symbol.")
    token_id: str = Field("", description="Token identifier (hex).")
    slippage: float = Field(..., description="Spread indicator in percent.")
    mark_price: float | None = Field(None, description="Current mark price in USD.")
    price_change_24h: float | None = Field(None, description="24h price change in percent.")
    holders_count: int | None = Field(None, description="Number of holder addresses.")
    fdv: float | None = Field(None, description="Fully diluted valuation in USD.")
    market_cap: float = Field(..., description="Circulating market capitalisation in USD.")
    holders: HoldersBlock | None = None
    deploy_time: str | None = Field(None, description="ISO8601 deployment timestamp.")
    total_bid_size: float | None = Field(None, description="Resting bid size in tokens.")
    total_ask_size: float | None = Field(None, description="Resting ask size in tokens.")
    total_bid_size_usd: float | None = Field(None, description="Resting bid size in USD.")
    total_ask_size_usd: float | None = Field(None, description="Resting ask size in USD.")


class IndexedRecord(BaseModel):
    """A record tagged with its 1-based position in the delivered collection."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1)
    record: TokenRecord


def index_records(records: Iterable[TokenRecord]) -> tuple[IndexedRecord, ...]:
    """Attach the original 1-based position to every record of a snapshot."""

    return tuple(
        IndexedRecord(index=position, record=record)
        for position, record in enumerate(records, start=1)
    )
