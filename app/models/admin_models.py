"""
app/models/admin_models.py

Pydantic DTOs for the admin search endpoints.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AdminPagination(BaseModel):
    """
    Pagination block of the admin listing.

    ``total_items`` / ``total_pages`` are estimates scaled by the duplicate
    ratio observed in the fetched window, not exact counts.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_items: int = Field(alias="totalItems")
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")
    items_per_page: int = Field(alias="itemsPerPage")


class AdminMovieSearchResponse(BaseModel):
    """Successful response for GET /admin/search/movies."""

    movies: List[Dict[str, Any]]
    pagination: AdminPagination


class IndexStatusResponse(BaseModel):
    """
    Response for GET /admin/search/status.

        { "success": true, "status": "active", "message": "...", "documentCount": 1200 }
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    status: Literal["active", "inactive", "error"]
    message: str
    document_count: Optional[int] = Field(default=None, alias="documentCount")
