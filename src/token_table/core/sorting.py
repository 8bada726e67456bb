"""Single-key, type-aware, stable row ordering."""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from functools import cmp_to_key
from numbers import Real
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .ages import age_in_days
from .fields import get_value
from .records import IndexedRecord

AGE_KEY = "deploy_time"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortState(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(default="market_cap", description="Column path of the active sort key.")
    direction: SortDirection = Field(default=SortDirection.DESC)


DEFAULT_SORT = SortState()


def next_sort(current: SortState, key: str) -> SortState:
    """Header-click transition: re-selecting an ascending key flips it, anything else sorts ascending."""

    if current.key == key and current.direction is SortDirection.ASC:
        return SortState(key=key, direction=SortDirection.DESC)
    return SortState(key=key, direction=SortDirection.ASC)


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _collation_key(text: str) -> tuple[str, str]:
    # Letters order case-insensitively first; on a tie lowercase precedes uppercase.
    return text.casefold(), text.swapcase()


def compare_strings(a: str, b: str) -> int:
    left, right = _collation_key(a), _collation_key(b)
    return (left > right) - (left < right)


def compare_values(a: object, b: object) -> int:
    """Ascending comparison of two resolved values; mixed or absent values tie."""

    if _is_number(a) and _is_number(b):
        return _sign(a - b)
    if isinstance(a, str) and isinstance(b, str):
        return compare_strings(a, b)
    return 0


def compare(
    a: IndexedRecord,
    b: IndexedRecord,
    state: SortState,
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
) -> int:
    """Order two records under ``state``. Negative means ``a`` comes first."""

    if state.key == AGE_KEY:
        moment = now or datetime.now(timezone.utc)
        result = compare_values(
            age_in_days(a.record, moment, overrides),
            age_in_days(b.record, moment, overrides),
        )
    else:
        result = compare_values(get_value(a, state.key), get_value(b, state.key))
    return -result if state.direction is SortDirection.DESC else result


def sort_records(
    records: Iterable[IndexedRecord],
    state: SortState,
    now: datetime | None = None,
    overrides: Mapping[str, date] | None = None,
) -> tuple[IndexedRecord, ...]:
    """Stable sort; ties keep their incoming relative order."""

    moment = now or datetime.now(timezone.utc)
    key = cmp_to_key(lambda a, b: compare(a, b, state, moment, overrides))
    return tuple(sorted(records, key=key))
