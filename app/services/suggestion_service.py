"""
app/services/suggestion_service.py

Autocomplete suggestions, served from the search index only.

Suggestions are a convenience: when the index is disabled or errors, the
caller gets an empty list rather than a catalog fallback or an error.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from app.core.config import settings
from app.core.logger import clip, get_logger
from app.search.suggestions import build_suggestion_query, rank_suggestions
from app.search_index.adapter import describe_error, to_raw_hits
from app.search_index.handle import SearchBackendHandle, search_backend

logger = get_logger(__name__)


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.suggestion_default_limit
    return max(1, min(settings.suggestion_max_limit, int(limit)))


class SuggestionService:
    """Builds the suggestion query, runs it, and ranks the hits into strings."""

    def __init__(self, backend: SearchBackendHandle | None = None) -> None:
        self._backend: SearchBackendHandle = backend or search_backend

    async def suggest(self, partial: str, limit: Optional[int] = None) -> List[str]:
        """
        Return up to ``limit`` completions for ``partial``.

        Args:
            partial : What the user has typed so far.
            limit   : Max suggestions, clamped to [1, suggestion_max_limit].

        Returns:
            A (possibly empty) list of strings. Never raises.
        """
        text = (partial or "").strip()
        if not text:
            return []

        client = await asyncio.to_thread(self._backend.ensure_ready)
        if client is None:
            logger.debug("Search index disabled — no suggestions for '%s'.", clip(text))
            return []

        limit = clamp_limit(limit)
        try:
            response = await asyncio.to_thread(
                client.search,
                index=self._backend.index_name,
                **build_suggestion_query(text, limit),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Suggestion query failed for '%s': %s", clip(text), describe_error(exc))
            return []

        suggestions = rank_suggestions(text, to_raw_hits(response), limit)
        logger.debug("%d suggestion(s) for '%s'.", len(suggestions), clip(text))
        return suggestions


# ── Module-level singleton ─────────────────────────────────────────────────────

suggestion_service = SuggestionService()
