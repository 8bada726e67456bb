"""HTTP client for the spot token snapshot."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import get_settings
from ..core.records import TokenRecord

LOGGER = logging.getLogger(__name__)


class FeedError(RuntimeError):
    """Raised when a complete snapshot cannot be obtained."""


def parse_snapshot(payload: Any) -> tuple[TokenRecord, ...]:
    """Validate a decoded JSON payload into records, skipping malformed rows."""

    if not isinstance(payload, list):
        raise FeedError(f"Snapshot must be a JSON list, got {type(payload).__name__}")
    records: list[TokenRecord] = []
    skipped = 0
    for position, row in enumerate(payload, start=1):
        try:
            records.append(TokenRecord.model_validate(row))
        except ValidationError as exc:
            skipped += 1
            LOGGER.warning("Skipping malformed snapshot row %d: %s", position, exc.errors()[0].get("msg"))
    if payload and not records:
        raise FeedError(f"All {skipped} snapshot rows failed validation")
    return tuple(records)


class SpotFeed:
    """Fetches the full token snapshot from a JSON endpoint."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self.url = url or settings.feed_url
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_sec
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "SpotFeed":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def fetch(self) -> tuple[TokenRecord, ...]:
        client = self._get_client()
        try:
            response = await client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise FeedError(f"Snapshot request failed with HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FeedError(f"Snapshot request failed: {exc}") from exc
        except ValueError as exc:
            raise FeedError("Snapshot body is not valid JSON") from exc
        return parse_snapshot(payload)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


__all__ = ["FeedError", "SpotFeed", "parse_snapshot"]
