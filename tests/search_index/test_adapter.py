"""
tests/search_index/test_adapter.py

Unit tests for the client-response adapter.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

from app.search_index.adapter import (
    error_type,
    to_bool,
    to_count,
    to_raw_hits,
    to_search_result,
)
from tests.helpers import es_search_response


class TestToSearchResult:

    def test_maps_hits_total_and_max_score(self, endgame_record) -> None:
        result = to_search_result(es_search_response([endgame_record], total=42))

        assert result.total == 42
        assert result.max_score == 10.0
        hit = result.hits[0]
        assert hit.id == endgame_record["id"]
        assert hit.score == 10.0
        assert hit.name == "Avengers: Endgame"

    def test_unwraps_response_objects(self, endgame_record) -> None:
        """Client response wrappers expose the payload as ``.body``."""
        wrapped = SimpleNamespace(body=es_search_response([endgame_record]))
        assert to_search_result(wrapped).total == 1

    def test_integer_total_and_missing_max_score(self) -> None:
        body = {"hits": {"total": 3, "max_score": None, "hits": []}}
        result = to_search_result(body)
        assert result.total == 3
        assert result.max_score == 0.0

    def test_highlight_carried(self, endgame_record) -> None:
        body = es_search_response([endgame_record])
        body["hits"]["hits"][0]["highlight"] = {"name": ["<em>Endgame</em>"]}
        assert to_search_result(body).hits[0].highlight == {"name": ["<em>Endgame</em>"]}


def test_to_raw_hits_adds_score(endgame_record) -> None:
    raw = to_raw_hits(es_search_response([endgame_record]))
    assert raw[0]["score"] == 10.0
    assert raw[0]["name"] == "Avengers: Endgame"


def test_to_count() -> None:
    assert to_count({"count": 7}) == 7
    assert to_count(SimpleNamespace(body={"count": 3})) == 3


def test_to_bool() -> None:
    assert to_bool(True) is True
    assert to_bool(SimpleNamespace(meta=SimpleNamespace(status=404))) is False
    assert to_bool(SimpleNamespace(meta=SimpleNamespace(status=200))) is True


def test_error_type() -> None:
    exc = MagicMock(body={"error": {"type": "resource_already_exists_exception"}})
    assert error_type(exc) == "resource_already_exists_exception"
    assert error_type(ValueError("plain")) is None
