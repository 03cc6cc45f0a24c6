"""
app/services/search_service.py

Orchestrates the movie search pipeline:

    raw query (+ optional field prefix, filters)
      └─ IntentExtractor.extract()        → QueryIntent
           └─ QueryBuilder.build()        → index body | catalog filter
                └─ Elasticsearch.search() ─┐ on any failure
                   CatalogStore.find()   ◄─┘
                     └─ duration post-filter → SearchResult

The search index is preferred; the catalog answers whenever the index is
disabled or a single query against it fails. Only a catalog failure is
surfaced to the caller.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from pydantic import ValidationError

from app.catalog.base import CatalogStore
from app.catalog.mongo_store import MongoCatalogStore
from app.core.config import settings
from app.core.exceptions import InvalidSearchParameterError, SearchError, SearchIndexError
from app.core.logger import clip, get_logger
from app.models.search_models import RankedHit, SearchFilters, SearchResult
from app.search.duration import estimate_total, filter_by_duration
from app.search.intent import IntentExtractor, QueryIntent, intent_extractor
from app.search.query_builder import (
    VISIBLE_ONLY,
    IndexQueryBuilder,
    SearchSpec,
    StoreQueryBuilder,
)
from app.search_index.adapter import describe_error, to_search_result
from app.search_index.handle import SearchBackendHandle, search_backend

logger = get_logger(__name__)

_NEWEST_FIRST = [("createdAt", -1)]


def clamp_size(size: Optional[int]) -> int:
    """Bound a page size to [1, search_max_size]; None means the default."""
    if size is None:
        return settings.search_default_size
    return max(1, min(settings.search_max_size, int(size)))


def clamp_offset(offset: Optional[int]) -> int:
    return max(0, int(offset or 0))


class SearchService:
    """
    Runs searches against the index with a per-request catalog fallback.

    Every collaborator is constructor-injected; the module-level singleton
    wires in the shared backend handle and the MongoDB catalog.
    """

    def __init__(
        self,
        backend: SearchBackendHandle | None = None,
        catalog: CatalogStore | None = None,
        extractor: IntentExtractor | None = None,
        index_builder: IndexQueryBuilder | None = None,
        store_builder: StoreQueryBuilder | None = None,
    ) -> None:
        self._backend: SearchBackendHandle = backend or search_backend
        self._catalog: CatalogStore = catalog or MongoCatalogStore()
        self._extractor: IntentExtractor = extractor or intent_extractor
        self._index_builder: IndexQueryBuilder = index_builder or IndexQueryBuilder()
        self._store_builder: StoreQueryBuilder = store_builder or StoreQueryBuilder()

    # ── Public API ─────────────────────────────────────────────────────────────

    async def search(
        self,
        raw_query: str,
        explicit_field: Optional[str] = None,
        size: Optional[int] = None,
        offset: Optional[int] = 0,
        filters: Optional[SearchFilters] = None,
    ) -> SearchResult:
        """
        Search the catalog.

        Args:
            raw_query      : Free text, already stripped of any ``field:`` prefix.
            explicit_field : Field named by the prefix, if there was one.
            size           : Page size, clamped to [1, 100].
            offset         : Number of hits to skip, clamped to >= 0.
            filters        : Caller-supplied filters.

        Returns:
            SearchResult with the same shape whichever backend answered.

        Raises:
            InvalidSearchParameterError : Malformed input (e.g. ``year:abc``).
            CatalogStoreError           : The catalog failed; no fallback is left.
            SearchError                 : A catalog record could not be turned into a hit.
        """
        filters = filters or SearchFilters()
        size = clamp_size(size)
        offset = clamp_offset(offset)
        text = (raw_query or "").strip()

        # ── 1. Interpret ───────────────────────────────────────────────────────
        if explicit_field:
            if explicit_field == "year" and not text.isdigit():
                raise InvalidSearchParameterError(f"Year must be numeric, got '{text}'.")
            intent = QueryIntent.literal(text)
        else:
            intent = self._extractor.extract(text)

        spec = SearchSpec(intent=intent, explicit_field=explicit_field, filters=filters)
        logger.debug(
            "Searching — text='%s'  field=%s  intent=%s  size=%d  offset=%d",
            clip(text),
            explicit_field or "*",
            intent.intent.value,
            size,
            offset,
        )

        # ── 2. Execute ─────────────────────────────────────────────────────────
        # Both clients block; they run on worker threads, off the event loop.
        result = await asyncio.to_thread(self._search_index, spec, size, offset)
        if result is None:
            result = await asyncio.to_thread(self._search_catalog, spec, size, offset)

        # ── 3. Post-filter ─────────────────────────────────────────────────────
        if filters.duration:
            kept = filter_by_duration(result.hits, filters.duration)
            result = SearchResult(
                hits=kept,
                total=estimate_total(result.total, len(result.hits), len(kept)),
                max_score=result.max_score,
            )

        logger.info(
            "Search complete — text='%s', %d hit(s) of %d.",
            clip(text, 80),
            len(result.hits),
            result.total,
        )
        return result

    async def browse_latest(self, size: Optional[int] = None, offset: Optional[int] = 0) -> SearchResult:
        """
        Newest-first listing of visible records, used when there is nothing to search for.

        Raises:
            CatalogStoreError: The catalog failed.
        """
        result = await asyncio.to_thread(self._browse_catalog, clamp_size(size), clamp_offset(offset))
        logger.info("Browse listing — %d of %d record(s).", len(result.hits), result.total)
        return result

    # ── Backends (blocking; called through asyncio.to_thread) ──────────────────

    def _search_index(self, spec: SearchSpec, size: int, offset: int) -> Optional[SearchResult]:
        """Query the index; None tells the caller to fall back to the catalog."""
        client = self._backend.ensure_ready()
        if client is None:
            return None

        try:
            return self._query_index(client, spec, size, offset)
        except SearchIndexError as exc:
            logger.warning("Index query failed, answering from the catalog: %s", exc)
            return None

    def _query_index(self, client, spec: SearchSpec, size: int, offset: int) -> SearchResult:
        """
        Raises:
            SearchIndexError: The request failed or its response could not be mapped.
        """
        try:
            body = self._index_builder.build(spec)
            response = client.search(
                index=self._backend.index_name,
                from_=offset,
                size=size,
                **body,
            )
            return to_search_result(response)
        except Exception as exc:  # noqa: BLE001
            raise SearchIndexError(describe_error(exc)) from exc

    def _search_catalog(self, spec: SearchSpec, size: int, offset: int) -> SearchResult:
        query = self._store_builder.build(spec)
        records = self._catalog.find(query.filter, skip=offset, limit=size, sort=query.sort)
        total = self._catalog.count(query.filter)

        try:
            hits = [RankedHit(**{**record, "score": 1.0}) for record in records]
        except ValidationError as exc:
            raise SearchError(f"Malformed catalog record: {exc.errors()[0]['msg']}") from exc
        return SearchResult(hits=hits, total=total, max_score=1.0 if hits else 0.0)

    def _browse_catalog(self, size: int, offset: int) -> SearchResult:
        records = self._catalog.find(VISIBLE_ONLY, skip=offset, limit=size, sort=_NEWEST_FIRST)
        total = self._catalog.count(VISIBLE_ONLY)
        return SearchResult(hits=[RankedHit(**record) for record in records], total=total, max_score=1.0)


# ── Module-level singleton ─────────────────────────────────────────────────────
# Controllers import this instance. Tests construct SearchService directly
# with injected mocks.

search_service = SearchService()
