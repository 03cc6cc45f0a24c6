"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

Fixtures defined here are auto-discovered by pytest — no import needed.
"""

from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.main import app
from tests.helpers import es_search_response


# ── Core client fixture ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    A synchronous TestClient wrapping the FastAPI app.

    session-scoped so the app is instantiated once per test run.
    The lifespan context (startup/shutdown events) is entered automatically.
    """
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ── Sample catalog records ─────────────────────────────────────────────────────

@pytest.fixture
def endgame_record() -> Dict[str, Any]:
    """A visible catalog record as returned by CatalogStore (string ``id``)."""
    return {
        "id": "64b7f0c2a1b2c3d4e5f60718",
        "name": "Avengers: Endgame",
        "origin_name": "Avengers: Endgame",
        "slug": "avengers-endgame",
        "content": "The Avengers assemble once more to undo Thanos' snap.",
        "type": "single",
        "status": "completed",
        "year": 2019,
        "view": 1200,
        "time": "181 phút",
        "actor": ["Robert Downey Jr.", "Chris Evans"],
        "director": ["Anthony Russo", "Joe Russo"],
        "category": [{"id": "c1", "name": "Hành Động", "slug": "hanh-dong"}],
        "country": [{"id": "k1", "name": "Âu Mỹ", "slug": "au-my"}],
        "tmdb": {"vote_average": 8.3, "vote_count": 24000},
        "isHidden": False,
    }


@pytest.fixture
def hidden_record(endgame_record) -> Dict[str, Any]:
    return {**endgame_record, "isHidden": True}


# ── Search index stand-ins ─────────────────────────────────────────────────────

@pytest.fixture
def es_client() -> MagicMock:
    """A mock Elasticsearch client with an empty search response by default."""
    client = MagicMock()
    client.search.return_value = es_search_response([])
    client.count.return_value = {"count": 0}
    return client


@pytest.fixture
def ready_backend(es_client) -> MagicMock:
    """A SearchBackendHandle stand-in whose index is up."""
    backend = MagicMock()
    backend.ensure_ready.return_value = es_client
    backend.index_name = "movies-test"
    backend.is_disabled.return_value = False
    return backend


@pytest.fixture
def disabled_backend() -> MagicMock:
    """A SearchBackendHandle stand-in whose index is disabled."""
    backend = MagicMock()
    backend.ensure_ready.return_value = None
    backend.index_name = "movies-test"
    backend.is_disabled.return_value = True
    return backend
