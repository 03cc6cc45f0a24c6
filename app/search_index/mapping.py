"""
app/search_index/mapping.py

Field mapping of the movie index, its idempotent creation, and the
record → document projection.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from elasticsearch import BadRequestError, Elasticsearch

from app.core.constants import INDEX_EXCLUDED_FIELDS
from app.core.logger import get_logger
from app.search_index.adapter import error_type, to_bool

logger = get_logger(__name__)

_NAMED_ENTRY = {
    "type": "nested",
    "properties": {
        "id": {"type": "keyword"},
        "name": {
            "type": "text",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
        },
        "slug": {"type": "keyword"},
    },
}

MOVIE_INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        # analyzed text
        "name": {"type": "text"},
        "origin_name": {"type": "text"},
        "content": {"type": "text"},
        "actor": {"type": "text"},
        "director": {"type": "text"},
        # exact-match enums
        "slug": {"type": "keyword"},
        "type": {"type": "keyword"},
        "status": {"type": "keyword"},
        "quality": {"type": "keyword"},
        "lang": {"type": "keyword"},
        # numbers
        "year": {"type": "integer"},
        "view": {"type": "integer"},
        # flags
        "is_copyright": {"type": "boolean"},
        "chieurap": {"type": "boolean"},
        "sub_docquyen": {"type": "boolean"},
        "isHidden": {"type": "boolean"},
        # external metadata
        "tmdb": {
            "properties": {
                "vote_average": {"type": "float"},
                "vote_count": {"type": "integer"},
            }
        },
        "imdb": {"properties": {"id": {"type": "keyword"}}},
        "createdAt": {"type": "date"},
        "updatedAt": {"type": "date"},
        # object arrays
        "category": _NAMED_ENTRY,
        "country": _NAMED_ENTRY,
    }
}


def to_index_document(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Project a catalog record onto the index schema.

    The record's identifier travels as the index document id, and the
    episode / playback-link structure is never needed for ranking, so
    both are dropped from the body.
    """
    return {k: v for k, v in record.items() if k not in INDEX_EXCLUDED_FIELDS}


def record_id(record: Mapping[str, Any]) -> str | None:
    """Return the record's stable id as a string, or None when it has none."""
    value = record.get("id") or record.get("_id")
    return str(value) if value else None


def ensure_index(client: Elasticsearch, index: str) -> bool:
    """
    Create ``index`` with the movie mapping unless it already exists.

    Safe to call repeatedly and from concurrent processes: losing the
    creation race to another node is treated as success.

    Returns:
        True when this call created the index, False when it already existed.

    Raises:
        elasticsearch.ApiError / TransportError: Any other backend failure.
    """
    if to_bool(client.indices.exists(index=index)):
        return False

    try:
        client.indices.create(index=index, mappings=MOVIE_INDEX_MAPPINGS)
    except BadRequestError as exc:
        if error_type(exc) == "resource_already_exists_exception":
            logger.info("Index '%s' was created concurrently; reusing it.", index)
            return False
        raise

    logger.info("Created search index '%s' with movie mapping.", index)
    return True
