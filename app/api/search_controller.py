"""
app/api/search_controller.py

Handles the public search endpoints:

  GET /search               Ranked movie search (or newest-first listing).
  GET /search/suggestions   Autocomplete strings for a partial query.

This layer is responsible only for HTTP concerns:
  - Reading query parameters and splitting an optional ``field:`` prefix
    off ``q``.
  - Deciding between a search and the plain listing (no text, no filters).
  - Translating service-level errors into the standard error envelope.

Responses:
  200  ``{success, hits, total, maxScore}`` / ``{success, suggestions}``.
       An index outage is invisible here; the catalog answers instead.
  400  Malformed input, e.g. ``year:abc`` or an unknown duration bucket.
  500  The catalog failed too, or something unexpected broke.
"""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.exceptions import (
    AppBaseException,
    CatalogStoreError,
    InvalidSearchParameterError,
)
from app.core.logger import clip, get_logger
from app.models.search_models import (
    ErrorResponse,
    SearchFilters,
    SearchResponse,
    SearchResult,
    SuggestionResponse,
)
from app.search.intent import split_field_prefix
from app.services.search_service import clamp_size, search_service
from app.services.suggestion_service import suggestion_service

logger = get_logger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])


# ── Helpers ────────────────────────────────────────────────────────────────────

def _err(message: str, status: int = 400, error: Optional[str] = None) -> JSONResponse:
    """Return a JSON error response with the standard error envelope."""
    body = ErrorResponse(message=message, error=error)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


def _ok(result: SearchResult) -> JSONResponse:
    body = SearchResponse(hits=result.hits, total=result.total, max_score=result.max_score)
    return JSONResponse(status_code=200, content=body.model_dump(mode="json", by_alias=True))


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.get("", response_model=SearchResponse, summary="Search movies")
async def search(
    q: str = "",
    page: int = 1,
    size: int = 20,
    category: Optional[str] = None,
    country: Optional[str] = None,
    year: Optional[int] = None,
    type: Optional[str] = None,
    duration: Optional[str] = None,
    search_description: bool = False,
) -> JSONResponse:
    """
    Query parameters:

      q        (optional) — free text, or ``field:value`` to search a single
                            field (name, origin_name, actor, director, content,
                            category, country, year, lang, status, type, slug).
      page     (optional) — 1-based page; values below 1 read as 1.
      size     (optional) — hits per page, clamped to [1, 100]. Default 20.
      category, country, year, type
               (optional) — exact filters applied on top of the text.
      duration (optional) — short (< 60 min), medium (60–120) or long (> 120)
                            per-episode runtime; the total becomes an estimate.
      search_description
               (optional) — weight the synopsis more heavily.

    With neither text nor filters the newest visible movies are listed.
    """
    try:
        filters = SearchFilters(
            category=category,
            country=country,
            year=year,
            type=type,
            duration=duration,
            search_description=search_description,
        )
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        logger.warning("Invalid search filters: %s", reason)
        return _err("Invalid search parameters.", error=reason)

    field, text = split_field_prefix(q)
    page = max(1, page)
    offset = (page - 1) * clamp_size(size)

    logger.info(
        "Search request — q='%s'  field=%s  page=%d  size=%d",
        clip(text),
        field or "*",
        page,
        size,
    )

    # ── Delegate to service ────────────────────────────────────────────────────
    try:
        if not text and not filters.has_listing_filters():
            result = await search_service.browse_latest(size=size, offset=offset)
        else:
            result = await search_service.search(
                text,
                explicit_field=field,
                size=size,
                offset=offset,
                filters=filters,
            )

    except InvalidSearchParameterError as exc:
        logger.warning("Search rejected: %s", exc)
        return _err(str(exc))

    except CatalogStoreError as exc:
        logger.exception("Catalog unavailable during search: %s", exc)
        return _err("An error occurred during search operation.", status=500, error=str(exc))

    except AppBaseException as exc:
        logger.exception("Application error during search: %s", exc)
        return _err("An error occurred during search operation.", status=500, error=str(exc))

    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during search: %s", exc)
        return _err("An error occurred during search operation.", status=500)

    return _ok(result)


@router.get("/suggestions", response_model=SuggestionResponse, summary="Autocomplete suggestions")
async def suggestions(q: str = "", limit: int = 5) -> JSONResponse:
    """
    Returns up to ``limit`` (clamped to 1–10, default 5) completion strings.

    Fewer than two characters of input yields an empty list, not an error.
    """
    text = q.strip()
    if len(text) < 2:
        return JSONResponse(status_code=200, content=SuggestionResponse(suggestions=[]).model_dump())

    try:
        found = await suggestion_service.suggest(text, limit=limit)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while building suggestions: %s", exc)
        return _err("An error occurred while fetching search suggestions.", status=500)

    return JSONResponse(status_code=200, content=SuggestionResponse(suggestions=found).model_dump())
