"""app/search/__init__.py — public API of the search package."""

from app.search.duration import derive_duration, estimate_total, filter_by_duration
from app.search.intent import (
    IntentExtractor,
    IntentType,
    QueryIntent,
    intent_extractor,
    split_field_prefix,
)
from app.search.query_builder import (
    VISIBLE_ONLY,
    IndexQueryBuilder,
    QueryBuilder,
    SearchSpec,
    StoreQuery,
    StoreQueryBuilder,
)
from app.search.suggestions import build_suggestion_query, rank_suggestions

__all__ = [
    "derive_duration",
    "estimate_total",
    "filter_by_duration",
    "IntentExtractor",
    "IntentType",
    "QueryIntent",
    "intent_extractor",
    "split_field_prefix",
    "VISIBLE_ONLY",
    "IndexQueryBuilder",
    "QueryBuilder",
    "SearchSpec",
    "StoreQuery",
    "StoreQueryBuilder",
    "build_suggestion_query",
    "rank_suggestions",
]
