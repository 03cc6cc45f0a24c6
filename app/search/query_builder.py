"""
app/search/query_builder.py

Translates a SearchSpec (intent + explicit field + caller filters) into a
backend query.

Two implementations share the same input:

    IndexQueryBuilder  → Elasticsearch request body (query / sort / highlight)
    StoreQueryBuilder  → MongoDB filter document for the catalog fallback

Both exclude hidden records and treat extracted intent values and caller
filters as hard constraints. When intent was extracted, the catalog text
predicate matches any word of the original query, as the index multi_match
does; plain text is matched as one substring. Only the index variant ranks;
catalog results come back in insertion order.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.catalog.base import Record, SortSpec
from app.core.constants import KEYWORD_FIELDS, NESTED_FIELDS, TEXT_FIELDS
from app.models.search_models import SearchFilters
from app.search.intent import IntentType, QueryIntent

#: Catalog predicate excluding hidden records.
VISIBLE_ONLY: Record = {"isHidden": {"$ne": True}}

_HIDDEN_EXCLUSION: Dict[str, Any] = {"bool": {"must_not": [{"term": {"isHidden": True}}]}}

INDEX_SORT: List[Any] = [
    "_score",
    {"tmdb.vote_average": {"order": "desc"}},
    {"view": {"order": "desc"}},
]

INDEX_HIGHLIGHT: Dict[str, Any] = {
    "fields": {
        "name": {"number_of_fragments": 3},
        "origin_name": {"number_of_fragments": 3},
        "content": {"fragment_size": 150, "number_of_fragments": 3},
    },
    "pre_tags": ["<em>"],
    "post_tags": ["</em>"],
}


@dataclass
class SearchSpec:
    """Everything a builder needs to describe one search."""

    intent: QueryIntent
    explicit_field: Optional[str] = None
    filters: SearchFilters = field(default_factory=SearchFilters)

    @property
    def text(self) -> str:
        return self.intent.processed

    def has_structured_intent(self) -> bool:
        return self.explicit_field is None and self.intent.intent is not IntentType.GENERAL


class QueryBuilder(ABC):
    """Common interface so the executor can swap backends without branching."""

    @abstractmethod
    def build(self, spec: SearchSpec) -> Any:
        """Return the backend-specific query for ``spec``."""


# ── Search index ───────────────────────────────────────────────────────────────

def _nested_named(path: str, value: str) -> Dict[str, Any]:
    """Match a category / country entry by display name or slug."""
    return {
        "nested": {
            "path": path,
            "query": {
                "bool": {
                    "should": [
                        {"match": {f"{path}.name": value}},
                        {"match": {f"{path}.slug": value}},
                    ]
                }
            },
        }
    }


def _phrase(field_name: str, text: str, boost: float, slop: int) -> Dict[str, Any]:
    return {"match_phrase": {field_name: {"query": text, "boost": boost, "slop": slop}}}


class IndexQueryBuilder(QueryBuilder):
    """Builds weighted Elasticsearch queries."""

    def build(self, spec: SearchSpec) -> Dict[str, Any]:
        """
        Returns:
            ``{"query": ..., "sort": ..., "highlight": ...}`` ready to be
            splatted into ``Elasticsearch.search``.
        """
        must: List[Dict[str, Any]] = []
        should: List[Dict[str, Any]] = []
        filters: List[Dict[str, Any]] = [_HIDDEN_EXCLUSION]

        if spec.explicit_field:
            must.append(self._field_clause(spec.explicit_field, spec.text))
        elif spec.text:
            must_clause, boosts = self._scored_clauses(spec.intent, spec.filters.search_description)
            must.append(must_clause)
            should.extend(boosts)

        if spec.has_structured_intent():
            filters.extend(self._intent_filters(spec.intent))
        filters.extend(self._caller_filters(spec.filters))

        bool_query: Dict[str, Any] = {"filter": filters}
        if must:
            bool_query["must"] = must
        if should:
            bool_query["should"] = should

        return {
            "query": {"bool": bool_query},
            "sort": list(INDEX_SORT),
            "highlight": INDEX_HIGHLIGHT,
        }

    # ── Clause helpers ─────────────────────────────────────────────────────────

    @staticmethod
    def _field_clause(field_name: str, text: str) -> Dict[str, Any]:
        if field_name == "content":
            return {"match": {"content": {"query": text, "boost": 5}}}
        if field_name == "year":
            return {"term": {"year": int(text)}}
        if field_name in NESTED_FIELDS:
            return _nested_named(field_name, text)
        if field_name in KEYWORD_FIELDS:
            return {"term": {field_name: text}}
        return {"match": {field_name: {"query": text, "fuzziness": "AUTO"}}}

    @staticmethod
    def _scored_clauses(intent: QueryIntent, search_description: bool):
        """
        Fuzzy multi-field match plus additive phrase boosts.

        The multi_match is required; the phrase clauses only add score, so
        a hit matching on several axes ranks above one matching on a single
        axis.
        """
        query_text = intent.original or intent.processed
        must_clause = {
            "multi_match": {
                "query": query_text,
                "fields": [
                    "name^4",
                    "origin_name^3",
                    f"content^{3 if search_description else 1}",
                    "actor^2",
                    "director^2",
                ],
                "type": "best_fields",
                "fuzziness": "AUTO",
                "prefix_length": 1,
            }
        }

        boosts: List[Dict[str, Any]] = []
        texts = [query_text]
        if intent.processed and intent.processed != query_text:
            texts.append(intent.processed)

        for text in texts:
            boosts.extend(
                [
                    _phrase("name", text, boost=5, slop=1),
                    _phrase("name", text, boost=3, slop=2),
                    _phrase("origin_name", text, boost=2.5, slop=2),
                    _phrase("actor", text, boost=4, slop=0),
                    _phrase("director", text, boost=4, slop=0),
                ]
            )
            if search_description:
                boosts.append({"match": {"content": {"query": text, "boost": 1.5}}})
                boosts.append(_phrase("content", text, boost=2, slop=3))

        return must_clause, boosts

    @staticmethod
    def _intent_filters(intent: QueryIntent) -> List[Dict[str, Any]]:
        clauses: List[Dict[str, Any]] = []
        if intent.year is not None:
            clauses.append({"term": {"year": intent.year}})
        if intent.genre:
            clauses.append(_nested_named("category", intent.genre))
        if intent.country:
            clauses.append(_nested_named("country", intent.country))
        if intent.director:
            clauses.append({"match": {"director": intent.director}})
        if intent.actor:
            clauses.append({"match": {"actor": intent.actor}})
        return clauses

    @staticmethod
    def _caller_filters(filters: SearchFilters) -> List[Dict[str, Any]]:
        clauses: List[Dict[str, Any]] = []
        if filters.year is not None:
            clauses.append({"term": {"year": filters.year}})
        if filters.category:
            clauses.append(_nested_named("category", filters.category))
        if filters.country:
            clauses.append(_nested_named("country", filters.country))
        if filters.type:
            clauses.append({"term": {"type": filters.type}})
        if filters.status:
            clauses.append({"term": {"status": filters.status}})
        return clauses


# ── Catalog fallback ───────────────────────────────────────────────────────────

@dataclass
class StoreQuery:
    """A catalog filter document plus optional sort."""

    filter: Record
    sort: Optional[SortSpec] = None


def _contains(text: str) -> Dict[str, Any]:
    """Case-insensitive substring predicate; user text is matched literally."""
    return {"$regex": re.escape(text), "$options": "i"}


def _named_entry(path: str, value: str) -> Record:
    return {"$or": [{f"{path}.name": _contains(value)}, {f"{path}.slug": value}]}


def _distinct_words(text: str) -> List[str]:
    seen: set = set()
    words: List[str] = []
    for word in text.split():
        if word.lower() not in seen:
            seen.add(word.lower())
            words.append(word)
    return words


class StoreQueryBuilder(QueryBuilder):
    """Reproduces the index query's filter semantics as a MongoDB filter."""

    def build(self, spec: SearchSpec) -> StoreQuery:
        clauses: List[Record] = [VISIBLE_ONLY]

        if spec.explicit_field:
            clauses.append(self._field_clause(spec.explicit_field, spec.text))
        elif spec.text:
            text_fields = list(TEXT_FIELDS) + [f"{path}.name" for path in NESTED_FIELDS]
            if spec.has_structured_intent():
                # after extraction processed holds leftovers only; match any word of the full query
                terms = _distinct_words(spec.intent.original or spec.text)
            else:
                terms = [spec.text]
            clauses.append({"$or": [{f: _contains(t)} for t in terms for f in text_fields]})

        if spec.has_structured_intent():
            clauses.extend(self._intent_clauses(spec.intent))
        clauses.extend(self._filter_clauses(spec.filters))

        query = clauses[0] if len(clauses) == 1 else {"$and": clauses}
        return StoreQuery(filter=query)

    @staticmethod
    def _field_clause(field_name: str, text: str) -> Record:
        if field_name == "year":
            return {"year": int(text)}
        if field_name in NESTED_FIELDS:
            return _named_entry(field_name, text)
        if field_name in KEYWORD_FIELDS:
            return {field_name: text}
        return {field_name: _contains(text)}

    @staticmethod
    def _intent_clauses(intent: QueryIntent) -> List[Record]:
        clauses: List[Record] = []
        if intent.year is not None:
            clauses.append({"year": intent.year})
        if intent.genre:
            clauses.append(_named_entry("category", intent.genre))
        if intent.country:
            clauses.append(_named_entry("country", intent.country))
        if intent.director:
            clauses.append({"director": _contains(intent.director)})
        if intent.actor:
            clauses.append({"actor": _contains(intent.actor)})
        return clauses

    @staticmethod
    def _filter_clauses(filters: SearchFilters) -> List[Record]:
        clauses: List[Record] = []
        if filters.year is not None:
            clauses.append({"year": filters.year})
        if filters.category:
            clauses.append(_named_entry("category", filters.category))
        if filters.country:
            clauses.append(_named_entry("country", filters.country))
        if filters.type:
            clauses.append({"type": filters.type})
        if filters.status:
            clauses.append({"status": filters.status})
        return clauses
