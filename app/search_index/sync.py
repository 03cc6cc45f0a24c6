"""
app/search_index/sync.py

Mirrors individual catalog writes into the search index.

Sync is best-effort: neither method ever raises. A failed write leaves
the index behind the catalog until the next full resync
(``python -m scripts.sync_index``).
"""

from __future__ import annotations

from typing import Any, Mapping

from elasticsearch import NotFoundError

from app.core.logger import get_logger
from app.search_index.adapter import describe_error
from app.search_index.handle import SearchBackendHandle
from app.search_index.mapping import record_id, to_index_document

logger = get_logger(__name__)


class DocumentSync:
    """Upserts and removes single documents through a SearchBackendHandle."""

    def __init__(self, backend: SearchBackendHandle) -> None:
        self._backend = backend

    def upsert(self, record: Mapping[str, Any]) -> bool:
        """
        Write ``record``'s current state under its own id.

        Keyed by the record id, so repeated upserts overwrite one document.

        Returns:
            True when the index accepted the document.
        """
        client = self._backend.ensure_ready()
        if client is None:
            logger.debug("Search index disabled — skipping upsert.")
            return False

        doc_id = record_id(record)
        if doc_id is None:
            logger.warning("Record without an id cannot be indexed: slug=%s", record.get("slug"))
            return False

        try:
            client.index(
                index=self._backend.index_name,
                id=doc_id,
                document=to_index_document(record),
                refresh=False,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to index movie %s: %s", doc_id, describe_error(exc))
            return False

        logger.debug("Indexed movie %s.", doc_id)
        return True

    def remove(self, doc_id: str) -> bool:
        """
        Delete the document with ``doc_id``. A missing document counts as removed.

        Returns:
            True when the document is gone from the index.
        """
        client = self._backend.ensure_ready()
        if client is None:
            logger.debug("Search index disabled — skipping delete.")
            return False

        try:
            client.delete(index=self._backend.index_name, id=str(doc_id), refresh=False)
        except NotFoundError:
            logger.debug("Movie %s was not in the index.", doc_id)
            return True
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to remove movie %s from index: %s", doc_id, describe_error(exc))
            return False

        logger.debug("Removed movie %s from index.", doc_id)
        return True
