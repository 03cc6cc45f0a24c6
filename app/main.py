"""
app/main.py

FastAPI application entry point.

Responsibilities:
  - Create the FastAPI app with metadata from config
  - Register all API routers
  - Map validation, HTTP and uncaught application errors onto the
    ``{success: false, message, error?}`` envelope
  - Expose a /health endpoint for liveness probes
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.admin_search_controller import router as admin_search_router
from app.api.search_controller import router as search_router
from app.core.config import settings
from app.core.exceptions import AppBaseException
from app.core.logger import get_logger
from app.models.search_models import ErrorResponse
from app.search_index.handle import search_backend

logger = get_logger(__name__)

# ── App instance ───────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Movie search: intent-aware full-text search over the catalog, "
        "with a database fallback and autocomplete suggestions."
    ),
)

# ── Routers ────────────────────────────────────────────────────────────────────

app.include_router(search_router)
app.include_router(admin_search_router)

# ── Exception handlers ─────────────────────────────────────────────────────────

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters (e.g. ``year=abc``) → 400 envelope."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "query")
    reason = first.get("msg", "Invalid request.")
    logger.warning("Rejected request to %s: %s %s", request.url.path, location, reason)
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            message="Invalid request parameters.",
            error=f"{location}: {reason}" if location else reason,
        ).model_dump(exclude_none=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework HTTP errors (401, 403, 404, 405…) in the standard envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(AppBaseException)
async def app_exception_handler(request: Request, exc: AppBaseException) -> JSONResponse:
    """
    Safety-net for any AppBaseException that escapes controller-level handling.
    """
    logger.exception("Unhandled application error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(message="Internal server error.", error=str(exc)).model_dump(exclude_none=True),
    )


# ── Health endpoint ────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health() -> dict:
    """
    Returns 200 OK when the service is running.

    ``searchIndex`` is ``pending`` until the first search touches the index,
    then ``active`` or ``disabled`` for the rest of the process lifetime.
    """
    return {
        "status": "ok",
        "version": settings.app_version,
        "searchIndex": search_backend.state(),
    }
