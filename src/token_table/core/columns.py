"""Ordered column registry with per-column visibility."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field

LOGGER = logging.getLogger(__name__)


class ColumnDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Field path, dotted for nested values.")
    label: str = Field(..., description="Header text.")
    visible: bool = True
    required: bool = Field(default=False, description="Required columns can never be hidden.")


DEFAULT_COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor(key="token", label="Token", visible=True, required=True),
    ColumnDescriptor(key="price_change_24h", label="24h %", visible=True, required=True),
    ColumnDescriptor(key="mark_price", label="Price", visible=True, required=True),
    ColumnDescriptor(key="market_cap", label="MC", visible=True, required=True),
    ColumnDescriptor(key="holders_count", label="Holders", visible=True),
    ColumnDescriptor(key="slippage", label="Spread", visible=False),
    ColumnDescriptor(key="holders.concentration.top1_share", label="Top holder %", visible=True),
    ColumnDescriptor(key="holders.concentration.top5_share", label="Top 5 holders %", visible=True),
    ColumnDescriptor(key="holders.concentration.top20_share", label="Top 20 holders %", visible=True),
    ColumnDescriptor(key="holders.total_burned_percent", label="Burned %", visible=False),
    ColumnDescriptor(key="holders.hip2.percent", label="HIP-2 %", visible=False),
    ColumnDescriptor(key="deploy_time", label="Age", visible=True),
    ColumnDescriptor(key="total_bid_size", label="Total Bid Size", visible=False),
    ColumnDescriptor(key="total_ask_size", label="Total Ask Size", visible=False),
    ColumnDescriptor(key="total_bid_size_usd", label="Total Bid Size (USD)", visible=False),
    ColumnDescriptor(key="total_ask_size_usd", label="Total Ask Size (USD)", visible=False),
)


class ColumnRegistry:
    """Fixed-order set of columns. Only visibility changes after construction."""

    def __init__(self, columns: Iterable[ColumnDescriptor] = DEFAULT_COLUMNS) -> None:
        self._defaults: tuple[ColumnDescriptor, ...] = tuple(
            col.model_copy(update={"visible": True}) if col.required else col for col in columns
        )
        keys = [col.key for col in self._defaults]
        if len(set(keys)) != len(keys):
            raise ValueError("Column keys must be unique")
        self._columns: tuple[ColumnDescriptor, ...] = self._defaults

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, key: object) -> bool:
        return any(col.key == key for col in self._columns)

    @property
    def columns(self) -> tuple[ColumnDescriptor, ...]:
        return self._columns

    def get(self, key: str) -> ColumnDescriptor | None:
        for col in self._columns:
            if col.key == key:
                return col
        return None

    def visible_columns(self) -> tuple[ColumnDescriptor, ...]:
        return tuple(col for col in self._columns if col.visible)

    def toggle(self, key: str) -> bool:
        """Flip a column's visibility. Returns False when nothing changed."""

        col = self.get(key)
        if col is None:
            LOGGER.debug("Ignoring toggle for unknown column %s", key)
            return False
        if col.required:
            return False
        flipped = col.model_copy(update={"visible": not col.visible})
        self._columns = tuple(flipped if c.key == key else c for c in self._columns)
        return True

    def reset(self) -> None:
        self._columns = self._defaults
