"""Deployment age helpers."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from math import floor
from typing import Mapping

from .records import TokenRecord

SECONDS_PER_DAY = 86_400.0


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO8601 timestamp; naive values are taken as UTC."""

    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(raw))
    except ValueError:
        return None


def deploy_moment(
    record: TokenRecord,
    overrides: Mapping[str, date] | None = None,
) -> datetime | None:
    """Return the deployment instant, honouring the per-token override table."""

    if overrides and record.token_id in overrides:
        return parse_timestamp(overrides[record.token_id])
    return parse_timestamp(record.deploy_time)


def age_in_days(
    record: TokenRecord,
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
) -> int | None:
    """Whole days elapsed since deployment, floored; ``None`` when unknown."""

    deployed = deploy_moment(record, overrides)
    if deployed is None:
        return None
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return floor((current - deployed).total_seconds() / SECONDS_PER_DAY)


def next_age_change(
    record: TokenRecord,
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
) -> datetime | None:
    """First instant after ``now`` at which the record's whole-day age ticks over."""

    deployed = deploy_moment(record, overrides)
    if deployed is None:
        return None
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    days = age_in_days(record, current, overrides)
    return deployed + timedelta(days=days + 1)
