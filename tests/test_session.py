from datetime import datetime, timezone

import pytest

from token_table.core.filters import LiquidityClass
from token_table.core.records import TokenRecord
from token_table.core.sorting import SortDirection
from token_table.engine.session import TableSession

NOW = datetime(2024, 5, 16, 12, 0, tzinfo=timezone.utc)


def make_record(token: str, market_cap: float, slippage: float = 0.2) -> TokenRecord:
    return TokenRecord(token=token, token_id=f"0x{token.lower()}", market_cap=market_cap, slippage=slippage)


@pytest.fixture
def session() -> TableSession:
    table = TableSession()
    table.load([make_record("AAA", 100, 0.2), make_record("BBB", 50, 0.5)])
    return table


def tokens(view) -> list[str]:
    return [row.record.token for row in view.rows]


def test_initial_state_is_loading():
    table = TableSession()
    assert table.loading is True
    view = table.view(NOW)
    assert view.rows == []
    assert view.total == 0


def test_default_view_and_header_click(session):
    assert tokens(session.view(NOW)) == ["AAA", "BBB"]
    session.set_sort("market_cap")
    assert session.sort.direction is SortDirection.ASC
    assert tokens(session.view(NOW)) == ["BBB", "AAA"]


def test_market_cap_bounds_command(session):
    session.set_market_cap_bounds(60)
    view = session.view(NOW)
    assert tokens(view) == ["AAA"]
    assert view.filtered == 1
    assert view.total == 2

    session.set_market_cap_bounds("garbage", None)
    assert tokens(session.view(NOW)) == ["AAA", "BBB"]


def test_search_and_liquidity_commands(session):
    session.set_search("b")
    assert tokens(session.view(NOW)) == ["BBB"]
    session.set_search("")
    session.set_liquidity_filter("hyperliquid")
    assert session.filters.liquidity is LiquidityClass.HYPERLIQUID
    assert tokens(session.view(NOW)) == ["AAA"]


def test_unknown_liquidity_class_rejected(session):
    with pytest.raises(ValueError):
        session.set_liquidity_filter("sometimes")


def test_toggle_column_changes_cells(session):
    assert "slippage" not in session.view(NOW).rows[0].cells
    assert session.toggle_column("slippage") is True
    view = session.view(NOW)
    assert view.rows[0].cells["slippage"].text == "0.20%"
    assert session.toggle_column("token") is False


def test_failed_refresh_keeps_previous_records(session):
    session.fail(RuntimeError("bucket unreachable"))
    assert session.load_error == "bucket unreachable"
    assert session.loading is False
    assert tokens(session.view(NOW)) == ["AAA", "BBB"]

    session.load([make_record("CCC", 5)])
    assert session.load_error is None
    view = session.view(NOW)
    assert tokens(view) == ["CCC"]
    assert view.rows[0].index == 1


def test_view_carries_state(session):
    session.set_search("a")
    view = session.view(NOW)
    assert view.filters.search == "a"
    assert view.sort.key == "market_cap"
    assert [col.key for col in view.columns] == [col.key for col in session.visible_columns()]
