"""
app/api/admin_search_controller.py

Admin-only search endpoints (bearer token, see app/api/dependencies.py):

  GET /admin/search/movies   Deduplicated movie list for the admin table.
  GET /admin/search/status   Search index reachability and document count.

Responses:
  200  Movies page / status report. Index problems show up in the status
       body, never as an HTTP error.
  400  Malformed input.
  401  No bearer token.   403  Wrong token.
  500  The catalog fallback failed as well.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.dependencies import require_admin
from app.core.exceptions import AppBaseException, InvalidSearchParameterError
from app.core.logger import clip, get_logger
from app.models.admin_models import AdminMovieSearchResponse, IndexStatusResponse
from app.models.search_models import ErrorResponse, SearchFilters
from app.services.admin_search_service import admin_search_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/admin/search",
    tags=["Admin Search"],
    dependencies=[Depends(require_admin)],
)


def _err(message: str, status: int = 400, error: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(message=message, error=error)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


@router.get("/movies", response_model=AdminMovieSearchResponse, summary="Admin movie search")
async def search_movies(
    search: str = "",
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    status: Optional[str] = None,
    year: Optional[int] = None,
    type: Optional[str] = None,
    is_hidden: Optional[bool] = Query(default=None, alias="isHidden"),
    sort: str = "updatedAt",
    order: str = "desc",
) -> JSONResponse:
    """
    Lists movies for the admin table.

    ``status=all`` means no status filter. ``sort`` / ``order`` are accepted
    for compatibility with the admin UI; results stay in relevance order.
    The pagination totals are estimates corrected for duplicate documents.
    """
    filters = SearchFilters(
        category=category,
        status=None if status == "all" else status,
        year=year,
        type=type,
        is_hidden=is_hidden,
    )
    logger.info(
        "Admin search request — search='%s'  page=%d  limit=%d  sort=%s %s",
        clip(search),
        page,
        limit,
        sort,
        order,
    )

    try:
        result = await admin_search_service.search_movies(
            search.strip() or None,
            page=page,
            limit=limit,
            filters=filters,
        )

    except InvalidSearchParameterError as exc:
        logger.warning("Admin search rejected: %s", exc)
        return _err(str(exc))

    except AppBaseException as exc:
        logger.exception("Admin search failed: %s", exc)
        return _err("Error while searching movies.", status=500, error=str(exc))

    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during admin search: %s", exc)
        return _err("Error while searching movies.", status=500)

    return JSONResponse(status_code=200, content=result.model_dump(mode="json", by_alias=True))


@router.get("/status", response_model=IndexStatusResponse, summary="Search index status")
async def index_status() -> JSONResponse:
    """Reports ``active`` (with document count), ``inactive`` or ``error``."""
    report = await asyncio.to_thread(admin_search_service.index_status)
    logger.info("Index status — %s", report.status)
    return JSONResponse(
        status_code=200,
        content=report.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
