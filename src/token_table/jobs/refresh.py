"""Background refresh loop that keeps the table session supplied with snapshots."""
from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

from ..config import get_settings
from ..engine.session import TableSession
from ..feeds.spot import FeedError, SpotFeed
from ..observability import record_refresh

LOGGER = logging.getLogger(__name__)

_FORCE_EVENT: asyncio.Event | None = None

_HEALTH_STATE: dict[str, Any] = {
    "last_cycle_ms": 0.0,
    "last_success": None,
    "last_error": None,
    "failure_streak": 0,
    "cycle_count": 0,
    "backoff_sec": 0.0,
    "records": 0,
    "cycle_history_ms": [],
}


def backoff_delay(interval: float, failure_streak: int, cap: float) -> float:
    """Exponential retry delay after ``failure_streak`` consecutive failures."""

    if failure_streak <= 0:
        return interval
    return min(interval * (2 ** failure_streak), cap)


def request_refresh() -> None:
    """Wake the loop so the next refresh starts without waiting out the interval."""

    if _FORCE_EVENT is not None:
        _FORCE_EVENT.set()


async def run_cycle(session: TableSession, feed: SpotFeed) -> int:
    """Fetch one snapshot and hand it to the session in a single swap."""

    records = await feed.fetch()
    return session.load(records)


async def _wait(event: asyncio.Event, timeout: float) -> None:
    if timeout <= 0:
        return
    try:
        await asyncio.wait_for(event.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        pass
    event.clear()


async def refresh_loop(
    session: TableSession,
    feed: SpotFeed | None = None,
    stop_event: asyncio.Event | None = None,
) -> None:
    global _FORCE_EVENT
    settings = get_settings()
    feed = feed or SpotFeed()
    failure_streak = 0
    force_event = _FORCE_EVENT = asyncio.Event()

    try:
        while True:
            started = time.perf_counter()
            try:
                count = await run_cycle(session, feed)
            except Exception as exc:
                failure_streak += 1
                wait = backoff_delay(settings.refresh_interval_sec, failure_streak, settings.max_backoff_sec)
                if isinstance(exc, FeedError):
                    LOGGER.warning("Refresh failed (%s). Retrying in %.1fs", exc, wait)
                else:  # pragma: no cover
                    LOGGER.exception("Unexpected refresh error: %s", exc)
                session.fail(exc)
                record_refresh(time.perf_counter() - started, 0, 1)
                _HEALTH_STATE.update(
                    {
                        "last_error": str(exc),
                        "failure_streak": failure_streak,
                        "backoff_sec": wait,
                    }
                )
                if stop_event and stop_event.is_set():
                    return
                await _wait(force_event, wait)
                continue

            failure_streak = 0
            elapsed = time.perf_counter() - started
            duration_ms = elapsed * 1000
            ts_iso = datetime.now(timezone.utc).isoformat()
            record_refresh(elapsed, count, 0)

            history = _HEALTH_STATE["cycle_history_ms"]
            history.append(round(duration_ms, 2))
            if len(history) > 120:
                del history[: len(history) - 120]

            LOGGER.info(
                "refresh_cycle %s",
                json.dumps({"cycle_ms": round(duration_ms, 2), "records": count, "timestamp": ts_iso}),
            )
            _HEALTH_STATE.update(
                {
                    "last_cycle_ms": duration_ms,
                    "last_success": ts_iso,
                    "last_error": None,
                    "failure_streak": 0,
                    "cycle_count": _HEALTH_STATE.get("cycle_count", 0) + 1,
                    "backoff_sec": 0.0,
                    "records": count,
                }
            )

            if stop_event and stop_event.is_set():
                return
            await _wait(force_event, max(settings.refresh_interval_sec - elapsed, 0.0))
    finally:
        await feed.close()


def get_health_state() -> dict[str, Any]:
    return json.loads(json.dumps(_HEALTH_STATE))


__all__ = [
    "backoff_delay",
    "get_health_state",
    "refresh_loop",
    "request_refresh",
    "run_cycle",
]
