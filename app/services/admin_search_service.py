"""
app/services/admin_search_service.py

Search for the admin movie list, plus an operator view of index health.

The index can hold near-duplicate documents for the same movie, so the
admin listing fetches a window twice the page size, drops repeated ids
and slugs, and scales the reported totals by the duplicate ratio it saw.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Set

from app.core.config import settings
from app.core.logger import clip, get_logger
from app.models.admin_models import (
    AdminMovieSearchResponse,
    AdminPagination,
    IndexStatusResponse,
)
from app.models.search_models import RankedHit, SearchFilters
from app.search_index.adapter import describe_error, to_count
from app.search_index.handle import SearchBackendHandle, search_backend
from app.services.search_service import SearchService, search_service

logger = get_logger(__name__)


def dedupe_hits(hits: List[RankedHit]) -> List[Dict[str, Any]]:
    """
    Drop hits whose id or slug was already seen, keeping the first occurrence.

    Each surviving hit is returned as a plain dict with ``_id`` mirrored from ``id``.
    """
    seen_ids: Set[str] = set()
    seen_slugs: Set[str] = set()
    unique: List[Dict[str, Any]] = []

    for hit in hits:
        movie = hit.model_dump(mode="json")
        movie_id = movie.get("id")
        slug = movie.get("slug")
        if (movie_id and movie_id in seen_ids) or (slug and slug in seen_slugs):
            continue
        if movie_id:
            seen_ids.add(movie_id)
        if slug:
            seen_slugs.add(slug)
        unique.append({"_id": movie_id, **movie})

    return unique


class AdminSearchService:
    """Admin-facing wrapper around SearchService and the backend handle."""

    def __init__(
        self,
        searcher: SearchService | None = None,
        backend: SearchBackendHandle | None = None,
    ) -> None:
        self._searcher: SearchService = searcher or search_service
        self._backend: SearchBackendHandle = backend or search_backend

    async def search_movies(
        self,
        term: Optional[str],
        page: int = 1,
        limit: Optional[int] = None,
        filters: Optional[SearchFilters] = None,
    ) -> AdminMovieSearchResponse:
        """
        One page of the admin movie list.

        Args:
            term    : Free-text search; blank lists everything visible.
            page    : 1-based page number (values below 1 read as 1).
            limit   : Page size, clamped to [1, admin_max_limit].
            filters : Category / status / year / type / is_hidden filters.

        Returns:
            AdminMovieSearchResponse whose pagination totals are estimates.

        Raises:
            InvalidSearchParameterError, CatalogStoreError: As SearchService.search.
        """
        filters = filters or SearchFilters()
        page = max(1, page)
        limit = max(1, min(settings.admin_max_limit, limit or settings.admin_default_limit))

        # hidden records are never served by search, so this view is always empty
        if filters.is_hidden:
            logger.info("Admin search for hidden movies — empty by construction.")
            return AdminMovieSearchResponse(
                movies=[],
                pagination=AdminPagination(
                    total_items=0, total_pages=0, current_page=page, items_per_page=limit
                ),
            )

        result = await self._searcher.search(
            term or "",
            size=limit * 2,
            offset=(page - 1) * limit,
            filters=filters,
        )

        unique = dedupe_hits(result.hits)
        if result.hits:
            total_items = math.floor(result.total * len(unique) / len(result.hits))
        else:
            total_items = result.total

        logger.info(
            "Admin search — term='%s', %d hit(s), %d unique.",
            clip(term or ""),
            len(result.hits),
            len(unique),
        )
        return AdminMovieSearchResponse(
            movies=unique[:limit],
            pagination=AdminPagination(
                total_items=total_items,
                total_pages=math.ceil(total_items / limit),
                current_page=page,
                items_per_page=limit,
            ),
        )

    def index_status(self) -> IndexStatusResponse:
        """Report whether the index is reachable and how many documents it holds."""
        client = self._backend.ensure_ready()
        if client is None:
            return IndexStatusResponse(
                status="inactive",
                message="Search index is not available or disabled.",
            )

        try:
            count = to_count(client.count(index=self._backend.index_name))
        except Exception as exc:  # noqa: BLE001
            logger.error("Index status check failed: %s", describe_error(exc))
            return IndexStatusResponse(
                status="error",
                message=f"Error querying search index: {exc}",
            )

        return IndexStatusResponse(
            status="active",
            message="Search index is connected and working properly.",
            document_count=count,
        )


# ── Module-level singleton ─────────────────────────────────────────────────────

admin_search_service = AdminSearchService()
