from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from ..engine.session import get_session
from ..jobs.refresh import get_health_state

router = APIRouter()


@router.get("/health")
async def health():
    """
    Refresh-loop health.

    Returns:
        - data_ok: True once a snapshot has been loaded and the latest refresh succeeded
        - loaded: True if any snapshot has ever been loaded
        - refresh: last success/error, failure streak, cycle count
        - asof: ISO8601 timestamp
    """
    session = get_session()
    state = get_health_state()
    return {
        "data_ok": session.loaded and session.load_error is None,
        "loaded": session.loaded,
        "refresh": state,
        "asof": datetime.now(timezone.utc).isoformat(),
    }
