"""
app/catalog/base.py

Abstract interface for the catalog store — the source of truth for movie
records.

Design goals:
  - Services depend only on this interface, never on pymongo.
  - Records cross the boundary as plain dicts with a string ``id``; the
    backend's own identifier type never leaks out.
  - Filters and sorts use MongoDB's query-document shape, which is what the
    catalog query builder produces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

Record = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]


class CatalogStore(ABC):
    """Contract every catalog backend must fulfil."""

    @abstractmethod
    def find(
        self,
        query: Record,
        skip: int = 0,
        limit: int = 20,
        sort: Optional[SortSpec] = None,
    ) -> List[Record]:
        """
        Return one page of records matching ``query``.

        The heavy ``episodes`` substructure is never included. Without a
        ``sort`` the backend's natural (insertion) order is used.

        Raises:
            CatalogStoreError: If the backend operation fails.
        """

    @abstractmethod
    def count(self, query: Record) -> int:
        """Count records matching ``query``."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[Record]:
        """
        Fetch a single full record by id, or None when it does not exist.

        Raises:
            InvalidSearchParameterError: If ``record_id`` is malformed.
            CatalogStoreError: If the backend operation fails.
        """

    @abstractmethod
    def save(self, record: Record) -> Record:
        """
        Insert a record (no ``id``) or update the record with that ``id``.

        Returns:
            The stored record, including its ``id``.
        """

    @abstractmethod
    def delete(self, record_id: str) -> Optional[Record]:
        """Delete a record by id and return it, or None when it did not exist."""

    @abstractmethod
    def iter_all(self, batch_size: int = 500) -> Iterator[Record]:
        """Stream every record (hidden ones included) for bulk maintenance jobs."""
