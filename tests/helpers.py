"""
tests/helpers.py

Plain helper functions shared by several test modules.
"""

from typing import Any, Dict, List


def es_search_response(sources: List[Dict[str, Any]], total: int | None = None) -> Dict[str, Any]:
    """Build a search response body the way Elasticsearch returns it."""
    hits = [
        {
            "_id": src.get("id", f"doc-{i}"),
            "_score": 10.0 - i,
            "_source": {k: v for k, v in src.items() if k != "id"},
        }
        for i, src in enumerate(sources)
    ]
    return {
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "max_score": hits[0]["_score"] if hits else None,
            "hits": hits,
        }
    }
