import math
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, TypeVar


DECAY_DAYS = 30.0
FIELD_BONUS = 0.05
MAX_MULTIPLIER = 1.15
QUALITY_FIELDS = ("skill", "category", "experience_level")

T = TypeVar("T")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def freshness_score(created_at: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Exponential decay e^(-days_old / 30).

    A day-old question scores ~0.97, a month-old one ~0.37. Missing or
    unusable timestamps score 0 so they sink to the bottom.
    """
    if not isinstance(created_at, datetime):
        return 0.0
    now = now or datetime.now(timezone.utc)
    days_old = (_as_utc(now) - _as_utc(created_at)).total_seconds() / 86400.0
    if not math.isfinite(days_old):
        return 0.0
    # future timestamps (clock skew) count as brand new
    days_old = max(days_old, 0.0)
    return max(math.exp(-days_old / DECAY_DAYS), 0.0)


def _filled(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def quality_multiplier(record: Any) -> float:
    # +0.05 per filled metadata field, capped at 1.15
    multiplier = 1.0
    for field in QUALITY_FIELDS:
        if _filled(getattr(record, field, None)):
            multiplier += FIELD_BONUS
    return min(multiplier, MAX_MULTIPLIER)


def ranking_score(record: Any, now: Optional[datetime] = None) -> float:
    return freshness_score(getattr(record, "created_at", None), now) * quality_multiplier(record)


def sort_by_rank(records: Iterable[T], now: Optional[datetime] = None) -> list[T]:
    """Return a new list ordered by descending ranking score.

    Python's sort is stable, so equal scores keep their input order.
    """
    now = now or datetime.now(timezone.utc)
    return sorted(records, key=lambda r: ranking_score(r, now), reverse=True)
