"""
app/core/exceptions.py

Custom exception hierarchy for the application.

Raising typed exceptions from services lets controllers catch specific
cases and return the correct HTTP status code without leaking internals.
"""


class AppBaseException(Exception):
    """Root exception — catch-all for any application-level error."""


# ── Request exceptions ─────────────────────────────────────────────────────────

class InvalidSearchParameterError(AppBaseException):
    """Raised when caller input is malformed (bad year, duration bucket, id…)."""


# ── Search index exceptions ────────────────────────────────────────────────────

class SearchIndexError(AppBaseException):
    """Raised when a call against the search index fails."""


class SearchIndexUnavailableError(SearchIndexError):
    """Raised when an operation without a fallback needs a disabled index."""


# ── Catalog exceptions ─────────────────────────────────────────────────────────

class CatalogStoreError(AppBaseException):
    """Raised when an interaction with the catalog database fails."""


# ── Search exceptions ──────────────────────────────────────────────────────────

class SearchError(AppBaseException):
    """Raised when the search pipeline fails for an unexpected reason."""
