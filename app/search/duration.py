"""
app/search/duration.py

Per-episode runtime bucketing, applied after a page has been fetched.

Neither backend stores a normalised runtime, so the value is derived per
hit from whichever field happens to carry it. Totals reported after this
filter are estimates scaled by the page's keep ratio.
"""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Sequence, TypeVar

from app.core.constants import DEFAULT_DURATION_MINUTES, DURATION_BUCKETS
from app.core.exceptions import InvalidSearchParameterError

T = TypeVar("T")

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_MINUTES_RE = re.compile(r"(\d+)\s*phút", re.IGNORECASE)

#: Fields holding a runtime in minutes, most explicit first.
_RUNTIME_FIELDS = ("duration", "time", "runtime")


def _read(hit: Any, name: str) -> Any:
    # hits are dicts on the catalog path and RankedHit models (extras as attributes) on the index path
    if isinstance(hit, dict):
        return hit.get(name)
    return getattr(hit, name, None)


def _leading_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def derive_duration(hit: Any) -> int:
    """
    Best-effort runtime in minutes for one hit.

    Tries ``duration``, ``time`` and ``runtime`` (leading integer, so
    "45 phút/tập" reads as 45), then a "<n> phút" fragment inside
    ``episode_current``. Falls back to DEFAULT_DURATION_MINUTES when
    nothing positive is found.
    """
    for name in _RUNTIME_FIELDS:
        minutes = _leading_int(_read(hit, name))
        if minutes is not None and minutes > 0:
            return minutes

    episode_current = _read(hit, "episode_current")
    if isinstance(episode_current, str):
        match = _MINUTES_RE.search(episode_current)
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

    return DEFAULT_DURATION_MINUTES


def bucket_range(bucket: str) -> tuple[int, int]:
    try:
        return DURATION_BUCKETS[bucket]
    except KeyError as exc:
        raise InvalidSearchParameterError(
            f"Unknown duration '{bucket}'. Expected one of: {', '.join(DURATION_BUCKETS)}."
        ) from exc


def filter_by_duration(hits: Sequence[T], bucket: str) -> List[T]:
    """Keep hits whose derived runtime lies inside ``bucket``'s inclusive range."""
    low, high = bucket_range(bucket)
    return [h for h in hits if low <= derive_duration(h) <= high]


def estimate_total(total: int, fetched: int, kept: int) -> int:
    """
    Scale ``total`` by the keep ratio observed on the fetched page.

    An empty page carries no ratio, so the total is returned unchanged.
    """
    if fetched <= 0:
        return total
    return math.ceil(total * kept / fetched)
