"""
app/core/constants.py

Application-wide fixed constants.

These are business rules that are part of the system's contract and are
NOT configurable via environment variables.
"""

from typing import Dict, Tuple

# ── Field prefixes ─────────────────────────────────────────────────────────────

#: Prefixes accepted in ``q`` as ``field:value``, in the order they are tried.
SUPPORTED_SEARCH_FIELDS: Tuple[str, ...] = (
    "name",
    "origin_name",
    "actor",
    "director",
    "content",
    "category",
    "country",
    "year",
    "lang",
    "status",
    "type",
    "slug",
)

#: Analyzed text fields, matched fuzzily in the index, by substring in the catalog.
TEXT_FIELDS: Tuple[str, ...] = ("name", "origin_name", "content", "actor", "director")

#: Enumerated fields, always matched exactly.
KEYWORD_FIELDS: Tuple[str, ...] = ("lang", "status", "type", "slug")

#: Object-array fields holding ``{id, name, slug}`` entries.
NESTED_FIELDS: Tuple[str, ...] = ("category", "country")

# ── Duration buckets ───────────────────────────────────────────────────────────

#: Inclusive minute ranges per bucket.
DURATION_BUCKETS: Dict[str, Tuple[int, int]] = {
    "short": (0, 59),
    "medium": (60, 120),
    "long": (121, 99999),
}

#: Assumed per-episode runtime when a record carries no usable duration.
DEFAULT_DURATION_MINUTES: int = 90

# ── Suggestions ────────────────────────────────────────────────────────────────

#: Upper bound on raw hits fetched to build a suggestion list.
SUGGESTION_MAX_HITS: int = 50

#: Longest actor / director name offered as a suggestion.
SUGGESTION_MAX_NAME_LENGTH: int = 50

#: Partials of this length or less also receive category hints.
SUGGESTION_HINT_MAX_PARTIAL: int = 3

# ── Index projection ───────────────────────────────────────────────────────────

#: Record keys never copied into the search index.
INDEX_EXCLUDED_FIELDS: Tuple[str, ...] = ("_id", "id", "episodes", "__v")
