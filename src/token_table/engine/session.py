"""Table session: the view state plus the commands that mutate it."""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Mapping

from ..config import get_settings
from ..core.columns import ColumnDescriptor, ColumnRegistry
from ..core.filters import FilterState, LiquidityClass
from ..core.formatting import DEFAULT_TRADE_URL_BASE
from ..core.pipeline import TableView, ViewPipeline, build_rows
from ..core.records import TokenRecord
from ..core.sorting import DEFAULT_SORT, SortState, next_sort
from ..observability import record_view_latency

LOGGER = logging.getLogger(__name__)


def _bound_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


class TableSession:
    """Owns one table's records and view state.

    Every mutation replaces an immutable state object, and :meth:`view`
    always derives from the complete current state, so a view never mixes
    a new filter with a stale sort or a half-loaded snapshot.
    """

    def __init__(
        self,
        columns: ColumnRegistry | None = None,
        overrides: Mapping[str, date] | None = None,
        trade_url_base: str = DEFAULT_TRADE_URL_BASE,
    ) -> None:
        self.columns = columns or ColumnRegistry()
        self.pipeline = ViewPipeline(overrides)
        self.trade_url_base = trade_url_base
        self.filters = FilterState()
        self.sort: SortState = DEFAULT_SORT
        self.loaded = False
        self.load_error: str | None = None
        self.loaded_at: datetime | None = None

    @classmethod
    def from_settings(cls) -> "TableSession":
        settings = get_settings()
        return cls(overrides=settings.deploy_date_overrides, trade_url_base=settings.trade_url_base)

    # -- data source ---------------------------------------------------

    def load(self, records: Iterable[TokenRecord]) -> int:
        """Swap in a complete snapshot. Returns the number of records."""

        indexed = self.pipeline.ingest(records)
        self.loaded = True
        self.load_error = None
        self.loaded_at = datetime.now(timezone.utc)
        LOGGER.debug("Loaded snapshot with %d records", len(indexed))
        return len(indexed)

    def fail(self, error: str | BaseException) -> None:
        """Record a failed refresh. Previously loaded records stay in place."""

        self.load_error = str(error) or error.__class__.__name__
        LOGGER.warning("Snapshot refresh failed: %s", self.load_error)

    @property
    def loading(self) -> bool:
        return not self.loaded and self.load_error is None

    # -- user commands -------------------------------------------------

    def set_search(self, text: str) -> FilterState:
        self.filters = self.filters.model_copy(update={"search": text or ""})
        return self.filters

    def set_liquidity_filter(self, liquidity: LiquidityClass | str) -> FilterState:
        self.filters = self.filters.model_copy(update={"liquidity": LiquidityClass(liquidity)})
        return self.filters

    def set_market_cap_bounds(self, minimum: object = None, maximum: object = None) -> FilterState:
        self.filters = self.filters.model_copy(
            update={"mc_min": _bound_text(minimum), "mc_max": _bound_text(maximum)}
        )
        return self.filters

    def set_sort(self, key: str) -> SortState:
        self.sort = next_sort(self.sort, key)
        return self.sort

    def toggle_column(self, key: str) -> bool:
        return self.columns.toggle(key)

    def visible_columns(self) -> tuple[ColumnDescriptor, ...]:
        return self.columns.visible_columns()

    # -- output --------------------------------------------------------

    def view(self, now: datetime | None = None) -> TableView:
        moment = now or datetime.now(timezone.utc)
        filters, sort, columns = self.filters, self.sort, self.columns.visible_columns()
        with record_view_latency():
            ordered = self.pipeline.view(filters, sort, moment)
            rows = build_rows(ordered, columns, moment, self.pipeline.overrides, self.trade_url_base)
        return TableView(
            columns=list(columns),
            rows=rows,
            total=len(self.pipeline.indexed),
            filtered=len(ordered),
            filters=filters,
            sort=sort,
        )


_session: TableSession | None = None


def get_session() -> TableSession:
    global _session
    if _session is None:
        _session = TableSession.from_settings()
    return _session


def reset_session(session: TableSession | None = None) -> TableSession:
    global _session
    _session = session or TableSession.from_settings()
    return _session
