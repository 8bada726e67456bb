import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from token_table.core.records import TokenRecord
from token_table.engine.session import TableSession
from token_table.routers import health as health_router
from token_table.routers import table as table_router


def make_record(token: str, market_cap: float, slippage: float, change: float) -> TokenRecord:
    return TokenRecord(
        token=token,
        token_id=f"0x{token.lower()}",
        market_cap=market_cap,
        slippage=slippage,
        price_change_24h=change,
        mark_price=1.5,
    )


@pytest.fixture
def session() -> TableSession:
    table = TableSession()
    table.load([make_record("AAA", 100, 0.2, 1.0), make_record("BBB", 50, 0.5, -3.456)])
    return table


@pytest.fixture
def app(session):
    app = FastAPI()
    app.include_router(table_router.router)
    app.dependency_overrides[table_router.session_dependency] = lambda: session
    return app


def row_tokens(payload) -> list[str]:
    return [row["record"]["token"] for row in payload["view"]["rows"]]


@pytest.mark.asyncio
async def test_read_table(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/table")
    assert response.status_code == 200
    data = response.json()
    assert data["loading"] is False
    assert row_tokens(data) == ["AAA", "BBB"]
    cells = data["view"]["rows"][1]["cells"]
    assert cells["price_change_24h"] == {"text": "-3.46%", "style": "negative"}
    assert cells["market_cap"]["text"] == "$50"
    assert cells["token"]["tooltip"] == "Spread is 0.50%"
    assert data["view"]["sort"] == {"key": "market_cap", "direction": "desc"}


@pytest.mark.asyncio
async def test_sort_and_filter_commands(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        sort = await client.post("/table/sort", json={"key": "market_cap"})
        assert sort.json()["direction"] == "asc"
        data = (await client.get("/table")).json()
        assert row_tokens(data) == ["BBB", "AAA"]

        bounds = await client.post("/table/market-cap", json={"min": "60", "max": "oops"})
        assert bounds.status_code == 200
        assert row_tokens((await client.get("/table")).json()) == ["AAA"]

        await client.post("/table/market-cap", json={})
        await client.post("/table/search", json={"text": "bb"})
        assert row_tokens((await client.get("/table")).json()) == ["BBB"]

        await client.post("/table/search", json={"text": ""})
        liquidity = await client.post("/table/liquidity", json={"liquidity": "hyperliquid"})
        assert liquidity.json()["liquidity"] == "hyperliquid"
        assert row_tokens((await client.get("/table")).json()) == ["AAA"]


@pytest.mark.asyncio
async def test_invalid_liquidity_is_422(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/table/liquidity", json={"liquidity": "sometimes"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_sort_key_is_404(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/table/sort", json={"key": "nope"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_toggle_columns(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        optional = await client.post("/table/columns/slippage/toggle")
        required = await client.post("/table/columns/token/toggle")
        missing = await client.post("/table/columns/nope/toggle")
        columns = (await client.get("/table/columns")).json()
    assert optional.json() == {
        "changed": True,
        "column": {"key": "slippage", "label": "Spread", "visible": True, "required": False},
    }
    assert required.json()["changed"] is False
    assert required.json()["column"]["visible"] is True
    assert missing.status_code == 404
    assert [col["key"] for col in columns][:2] == ["token", "price_change_24h"]


@pytest.mark.asyncio
async def test_health(monkeypatch, session):
    monkeypatch.setattr(health_router, "get_session", lambda: session)
    monkeypatch.setattr(health_router, "get_health_state", lambda: {"cycle_count": 3, "last_error": None})

    app = FastAPI()
    app.include_router(health_router.router)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["data_ok"] is True
    assert data["refresh"]["cycle_count"] == 3
