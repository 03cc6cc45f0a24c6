"""
app/search_index/adapter.py

The single place that knows what the Elasticsearch client returns.

The client wraps bodies in ``ObjectApiResponse`` / ``HeadApiResponse``
objects and reports errors through ``ApiError.body``; everything here
turns those into the application's own shapes so no other module
branches on client-library details.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from app.models.search_models import RankedHit, SearchResult


def unwrap(response: Any) -> Any:
    """Return the plain body behind a client response object."""
    return getattr(response, "body", response)


def to_search_result(response: Any) -> SearchResult:
    """Normalise a ``search`` response into a SearchResult."""
    body = unwrap(response) or {}
    hits_block: Dict[str, Any] = body.get("hits") or {}

    total = hits_block.get("total", 0)
    if isinstance(total, dict):
        total = total.get("value", 0)

    hits: List[RankedHit] = []
    for raw in hits_block.get("hits") or []:
        source = dict(raw.get("_source") or {})
        source.pop("id", None)
        source.pop("score", None)
        hits.append(
            RankedHit(
                **source,
                id=str(raw.get("_id")),
                score=float(raw.get("_score") or 0.0),
                highlight=raw.get("highlight"),
            )
        )

    return SearchResult(
        hits=hits,
        total=int(total or 0),
        max_score=float(hits_block.get("max_score") or 0.0),
    )


def to_raw_hits(response: Any) -> List[Dict[str, Any]]:
    """Return ``[{"score": float, **_source}]`` for callers that only need sources."""
    body = unwrap(response) or {}
    return [
        {**(raw.get("_source") or {}), "score": float(raw.get("_score") or 0.0)}
        for raw in (body.get("hits") or {}).get("hits") or []
    ]


def to_count(response: Any) -> int:
    """Normalise a ``count`` response into an int."""
    body = unwrap(response) or {}
    return int(body.get("count", 0))


def to_bool(response: Any) -> bool:
    """Normalise a HEAD-style response (``indices.exists``) into a bool."""
    if isinstance(response, bool):
        return response
    status = getattr(getattr(response, "meta", None), "status", None)
    if status is not None:
        return status == 200
    return bool(response)


def error_type(exc: BaseException) -> Optional[str]:
    """Return the server-side error type (``resource_already_exists_exception``…)."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("type")
        if isinstance(error, str):
            return error
    return None


def describe_error(exc: BaseException) -> str:
    """One-line diagnostic combining status, error type and message."""
    parts = [type(exc).__name__]
    status = getattr(exc, "status_code", None) or getattr(getattr(exc, "meta", None), "status", None)
    if isinstance(status, int):
        parts.append(f"status={status}")
    kind = error_type(exc)
    if kind:
        parts.append(f"type={kind}")
    parts.append(str(exc))
    return " ".join(parts)
