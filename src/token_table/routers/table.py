"""Table router: current view plus the user-action commands."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.columns import ColumnDescriptor
from ..core.filters import FilterState, LiquidityClass
from ..core.pipeline import TableView
from ..core.sorting import SortState
from ..engine.session import TableSession, get_session

router = APIRouter(prefix="/table", tags=["table"])


class SearchPayload(BaseModel):
    text: str = Field(default="", max_length=200)


class LiquidityPayload(BaseModel):
    liquidity: LiquidityClass


class MarketCapPayload(BaseModel):
    # Kept as raw text: anything unparseable is treated as "no bound".
    min: str | float | None = None
    max: str | float | None = None


class SortPayload(BaseModel):
    key: str = Field(..., min_length=1, max_length=128)


class TableResponse(BaseModel):
    loading: bool
    error: str | None = None
    loaded_at: str | None = None
    view: TableView


class ToggleResponse(BaseModel):
    changed: bool
    column: ColumnDescriptor


def session_dependency() -> TableSession:
    return get_session()


@router.get("", response_model=TableResponse)
async def read_table(session: TableSession = Depends(session_dependency)) -> TableResponse:
    return TableResponse(
        loading=session.loading,
        error=session.load_error,
        loaded_at=session.loaded_at.isoformat() if session.loaded_at else None,
        view=session.view(),
    )


@router.get("/columns", response_model=list[ColumnDescriptor])
async def list_columns(session: TableSession = Depends(session_dependency)) -> list[ColumnDescriptor]:
    return list(session.columns)


@router.post("/search", response_model=FilterState)
async def set_search(payload: SearchPayload, session: TableSession = Depends(session_dependency)) -> FilterState:
    return session.set_search(payload.text)


@router.post("/liquidity", response_model=FilterState)
async def set_liquidity(payload: LiquidityPayload, session: TableSession = Depends(session_dependency)) -> FilterState:
    return session.set_liquidity_filter(payload.liquidity)


@router.post("/market-cap", response_model=FilterState)
async def set_market_cap(payload: MarketCapPayload, session: TableSession = Depends(session_dependency)) -> FilterState:
    return session.set_market_cap_bounds(payload.min, payload.max)


@router.post("/sort", response_model=SortState)
async def set_sort(payload: SortPayload, session: TableSession = Depends(session_dependency)) -> SortState:
    if payload.key not in session.columns:
        raise HTTPException(status_code=404, detail=f"Unknown column '{payload.key}'")
    return session.set_sort(payload.key)


@router.post("/columns/{key}/toggle", response_model=ToggleResponse)
async def toggle_column(key: str, session: TableSession = Depends(session_dependency)) -> ToggleResponse:
    column = session.columns.get(key)
    if column is None:
        raise HTTPException(status_code=404, detail=f"Unknown column '{key}'")
    changed = session.toggle_column(key)
    return ToggleResponse(changed=changed, column=session.columns.get(key))
