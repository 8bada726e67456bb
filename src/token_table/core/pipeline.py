"""View pipeline: index, filter, sort, then project visible columns into cells."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .ages import next_age_change
from .columns import ColumnDescriptor
from .fields import get_value
from .filters import FilterState, apply_filters
from .formatting import (
    DEFAULT_TRADE_URL_BASE,
    TOKEN_KEY,
    FormattedCell,
    TokenCell,
    format_cell,
    format_token_cell,
)
from .records import IndexedRecord, TokenRecord, index_records
from .sorting import AGE_KEY, SortState, sort_records


class TableRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., description="1-based position in the delivered snapshot.")
    position: int = Field(..., description="1-based position after filtering and sorting.")
    record: TokenRecord
    cells: dict[str, TokenCell | FormattedCell] = Field(default_factory=dict)


class TableView(BaseModel):
    model_config = ConfigDict(frozen=True)

    columns: list[ColumnDescriptor]
    rows: list[TableRow]
    total: int = Field(..., description="Records in the snapshot.")
    filtered: int = Field(..., description="Records passing the filters.")
    filters: FilterState
    sort: SortState


def compute_view(
    records: Iterable[IndexedRecord],
    filter_state: FilterState,
    sort_state: SortState,
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
) -> tuple[IndexedRecord, ...]:
    """Filter then stable-sort an indexed collection. Inputs are left untouched."""

    return sort_records(apply_filters(records, filter_state), sort_state, now, overrides)


def build_rows(
    ordered: Sequence[IndexedRecord],
    columns: Sequence[ColumnDescriptor],
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
    trade_url_base: str = DEFAULT_TRADE_URL_BASE,
) -> list[TableRow]:
    rows: list[TableRow] = []
    for position, item in enumerate(ordered, start=1):
        cells: dict[str, TokenCell | FormattedCell] = {}
        for col in columns:
            if col.key == TOKEN_KEY:
                cells[col.key] = format_token_cell(item.record, trade_url_base)
            else:
                cells[col.key] = format_cell(col.key, get_value(item, col.key), item.record, now, overrides)
        rows.append(TableRow(index=item.index, position=position, record=item.record, cells=cells))
    return rows


class ViewPipeline:
    """Memoizing wrapper around :func:`compute_view`.

    The indexed collection is rebuilt only when a new snapshot is ingested.
    The filtered stage is cached on the filter state and the sorted stage on
    the filter state and sort state. Age ordering stays cached until the
    first record crosses into its next whole day.
    """

    def __init__(self, overrides: Mapping[str, date] | None = None) -> None:
        self._overrides = dict(overrides or {})
        self._indexed: tuple[IndexedRecord, ...] = ()
        self._generation = 0
        self._filtered_key: tuple | None = None
        self._filtered: tuple[IndexedRecord, ...] = ()
        self._sorted_key: tuple | None = None
        self._sorted: tuple[IndexedRecord, ...] = ()
        self._age_window: tuple[datetime, datetime | None] | None = None
        self.recomputations = 0

    @property
    def indexed(self) -> tuple[IndexedRecord, ...]:
        return self._indexed

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def overrides(self) -> dict[str, date]:
        return self._overrides

    def ingest(self, records: Iterable[TokenRecord]) -> tuple[IndexedRecord, ...]:
        """Replace the whole collection and attach original positions."""

        self._indexed = index_records(records)
        self._generation += 1
        self._filtered_key = None
        self._sorted_key = None
        return self._indexed

    def filtered(self, filter_state: FilterState) -> tuple[IndexedRecord, ...]:
        key = (self._generation, filter_state)
        if key != self._filtered_key:
            self._filtered = apply_filters(self._indexed, filter_state)
            self._filtered_key = key
        return self._filtered

    def view(
        self,
        filter_state: FilterState,
        sort_state: SortState,
        now: datetime | None = None,
    ) -> tuple[IndexedRecord, ...]:
        moment = now or datetime.now(timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        key = (self._generation, filter_state, sort_state)
        if key != self._sorted_key or not self._age_window_covers(moment):
            filtered = self.filtered(filter_state)
            self._sorted = sort_records(filtered, sort_state, moment, self._overrides)
            self._sorted_key = key
            self._age_window = self._age_window_for(filtered, sort_state, moment)
            self.recomputations += 1
        return self._sorted

    def _age_window_for(
        self,
        records: Sequence[IndexedRecord],
        sort_state: SortState,
        moment: datetime,
    ) -> tuple[datetime, datetime | None] | None:
        # Age ordering only changes when some record's whole-day age ticks over.
        if sort_state.key != AGE_KEY:
            return None
        changes = [
            change
            for change in (next_age_change(item.record, moment, self._overrides) for item in records)
            if change is not None
        ]
        return moment, min(changes) if changes else None

    def _age_window_covers(self, moment: datetime) -> bool:
        if self._age_window is None:
            return True
        start, expires = self._age_window
        return start <= moment and (expires is None or moment < expires)
