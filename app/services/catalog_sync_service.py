"""
app/services/catalog_sync_service.py

Catalog write path and its mirror into the search index:

    CatalogRecord
      └─ CatalogStore.save() / delete()     (must succeed)
           └─ DocumentSync.upsert() / remove()  (best-effort, logged)

plus ``resync_all`` which rebuilds the index from the whole catalog to
close any gap left by failed best-effort writes.

``save_movie`` / ``delete_movie`` are the hooks for the catalog admin write
path, which lives outside this service and calls them after validating a
request; ``resync_all`` is driven by ``scripts/sync_index.py``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from elasticsearch.helpers import bulk

from app.catalog.base import CatalogStore, Record
from app.catalog.mongo_store import MongoCatalogStore
from app.core.config import settings
from app.core.exceptions import SearchIndexUnavailableError
from app.core.logger import get_logger
from app.models.catalog_models import CatalogRecord
from app.search_index.handle import SearchBackendHandle, search_backend
from app.search_index.mapping import record_id, to_index_document
from app.search_index.sync import DocumentSync

logger = get_logger(__name__)


class CatalogSyncService:
    """Saves and deletes catalog records and keeps the index in step."""

    def __init__(
        self,
        catalog: CatalogStore | None = None,
        backend: SearchBackendHandle | None = None,
        sync: DocumentSync | None = None,
    ) -> None:
        self._catalog: CatalogStore = catalog or MongoCatalogStore()
        self._backend: SearchBackendHandle = backend or search_backend
        self._sync: DocumentSync = sync or DocumentSync(self._backend)

    # ── Single-record writes ───────────────────────────────────────────────────

    def save_movie(self, payload: Dict[str, Any]) -> Record:
        """
        Validate, persist and index one movie.

        Raises:
            pydantic.ValidationError : ``payload`` is not a valid record.
            CatalogStoreError        : The catalog write failed.
        """
        record = CatalogRecord.model_validate(payload)
        saved = self._catalog.save(record.model_dump(exclude_none=True))
        self._sync.upsert(saved)
        return saved

    def delete_movie(self, movie_id: str) -> Optional[Record]:
        """
        Delete one movie and drop it from the index.

        Returns:
            The deleted record, or None when it did not exist.
        """
        deleted = self._catalog.delete(movie_id)
        self._sync.remove(movie_id)
        return deleted

    # ── Full resync ────────────────────────────────────────────────────────────

    def _actions(self, index: str) -> Iterator[Dict[str, Any]]:
        for record in self._catalog.iter_all(batch_size=settings.resync_batch_size):
            doc_id = record_id(record)
            if doc_id is None:
                continue
            yield {
                "_op_type": "index",
                "_index": index,
                "_id": doc_id,
                "_source": to_index_document(record),
            }

    def resync_all(self) -> Dict[str, int]:
        """
        Re-index every catalog record, overwriting documents by id.

        Returns:
            ``{"indexed": n, "failed": m}``

        Raises:
            SearchIndexUnavailableError : The index is disabled.
            CatalogStoreError           : Reading the catalog failed.
        """
        client = self._backend.ensure_ready()
        if client is None:
            raise SearchIndexUnavailableError("Search index is disabled; cannot resync.")

        index = self._backend.index_name
        logger.info("Resyncing catalog into index '%s'…", index)

        indexed, errors = bulk(
            client,
            self._actions(index),
            chunk_size=settings.resync_batch_size,
            raise_on_error=False,
            stats_only=False,
        )
        failed = len(errors)
        for error in errors[:5]:
            logger.warning("Resync item failed: %s", error)

        logger.info("Resync complete — %d indexed, %d failed.", indexed, failed)
        return {"indexed": indexed, "failed": failed}


# ── Module-level singleton ─────────────────────────────────────────────────────

catalog_sync_service = CatalogSyncService()
