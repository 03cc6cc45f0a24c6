"""
app/search/suggestions.py

Autocomplete: the suggestion query and the ranking of raw hits into a
short list of completion strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple

from app.core.constants import (
    SUGGESTION_HINT_MAX_PARTIAL,
    SUGGESTION_MAX_HITS,
    SUGGESTION_MAX_NAME_LENGTH,
)

# Higher sorts first.
KIND_PRIORITY: Dict[str, int] = {
    "movie": 5,
    "original_name": 4,
    "category": 3,
    "actor": 2,
    "director": 1,
}

#: Category completions offered for very short input, keyed by two-letter prefix.
CATEGORY_HINTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("ph", ("Phim hành động", "Phim tình cảm", "Phim kinh dị")),
    ("ha", ("Hành động", "Hài hước")),
    ("ki", ("Kinh dị",)),
    ("ti", ("Tình cảm",)),
    ("ho", ("Hoạt hình", "Hài hước")),
    ("vi", ("Viễn tưởng",)),
    ("co", ("Cổ trang",)),
    ("vo", ("Võ thuật",)),
    ("ch", ("Chiến tranh",)),
    ("am", ("Âm nhạc",)),
)

SUGGESTION_SOURCE_FIELDS = ["name", "origin_name", "slug", "actor", "director", "category", "country"]

_WILDCARD_SPECIAL_RE = re.compile(r"([*?\\])")


@dataclass(frozen=True)
class Suggestion:
    text: str
    kind: str
    score: float


def _escape_wildcard(text: str) -> str:
    """Make user-typed ``*``, ``?`` and ``\\`` literal inside a wildcard pattern."""
    return _WILDCARD_SPECIAL_RE.sub(r"\\\1", text)


def build_suggestion_query(text: str, limit: int) -> Dict[str, Any]:
    """
    Request body for the suggestion search.

    Clauses are alternatives with descending boosts: title prefix first,
    then original-title prefix, fuzzy titles, people, and finally a
    substring wildcard on the title.
    """
    return {
        "size": min(SUGGESTION_MAX_HITS, limit * 5),
        "query": {
            "bool": {
                "should": [
                    {"match_phrase_prefix": {"name": {"query": text, "max_expansions": 20, "boost": 10}}},
                    {"match_phrase_prefix": {"origin_name": {"query": text, "max_expansions": 15, "boost": 8}}},
                    {"match": {"name": {"query": text, "fuzziness": "AUTO", "boost": 6}}},
                    {"match": {"origin_name": {"query": text, "fuzziness": "AUTO", "boost": 5}}},
                    {"match_phrase_prefix": {"actor": {"query": text, "max_expansions": 10, "boost": 4}}},
                    {"match_phrase_prefix": {"director": {"query": text, "max_expansions": 10, "boost": 4}}},
                    {"wildcard": {"name": {"value": f"*{_escape_wildcard(text.lower())}*", "boost": 3}}},
                ],
                "filter": [{"bool": {"must_not": [{"term": {"isHidden": True}}]}}],
            }
        },
        "source": SUGGESTION_SOURCE_FIELDS,
        "sort": ["_score", {"view": {"order": "desc"}}],
    }


def _names(value: Any) -> List[str]:
    """People fields arrive either as a list or as one comma-separated string."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    if isinstance(value, (list, tuple)):
        return [str(part).strip() for part in value if part]
    return []


def _category_hints(text: str) -> Iterable[str]:
    lowered = text.lower()
    for prefix, hints in CATEGORY_HINTS:
        if lowered.startswith(prefix):
            yield from hints


def rank_suggestions(text: str, hits: Iterable[Mapping[str, Any]], limit: int) -> List[str]:
    """
    Turn raw ``{"score": float, **_source}`` hits into completion strings.

    Args:
        text  : The partial query, already stripped.
        hits  : Hits in backend order.
        limit : Maximum number of strings to return.

    Returns:
        Case-insensitively unique strings ordered by kind priority, then score.
    """
    seen: Set[str] = set()
    found: List[Suggestion] = []
    lowered = text.lower()

    def add(candidate: str, kind: str, score: float) -> None:
        key = candidate.lower()
        if candidate and key not in seen:
            seen.add(key)
            found.append(Suggestion(candidate, kind, score))

    for hit in hits:
        score = float(hit.get("score") or 0.0)
        name = hit.get("name") or ""
        origin_name = hit.get("origin_name") or ""

        add(name, "movie", score)
        if origin_name and origin_name != name:
            add(origin_name, "original_name", score * 0.8)

        if len(text) < 2:
            continue
        for kind in ("actor", "director"):
            for person in _names(hit.get(kind)):
                if 1 < len(person) <= SUGGESTION_MAX_NAME_LENGTH and lowered in person.lower():
                    add(person, kind, score * 0.6)

    if len(text) <= SUGGESTION_HINT_MAX_PARTIAL:
        for hint in _category_hints(text):
            add(hint, "category", 1.0)

    found.sort(key=lambda s: (-KIND_PRIORITY[s.kind], -s.score))
    return [s.text for s in found[:limit]]
