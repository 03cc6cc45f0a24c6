"""app/search_index/__init__.py — public API of the search_index package."""

from app.search_index.handle import SearchBackendHandle, search_backend
from app.search_index.mapping import MOVIE_INDEX_MAPPINGS, ensure_index, to_index_document
from app.search_index.sync import DocumentSync

__all__ = [
    "SearchBackendHandle",
    "search_backend",
    "MOVIE_INDEX_MAPPINGS",
    "ensure_index",
    "to_index_document",
    "DocumentSync",
]
