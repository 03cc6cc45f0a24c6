"""
app/search_index/handle.py

Process-wide access point to the Elasticsearch cluster.

The handle makes exactly one attempt to connect. Success memoizes the
client for the process lifetime; failure (or a missing node setting)
latches the handle into the disabled state, after which every caller gets
``None`` straight away and uses the catalog instead. Re-enabling the
index requires a restart.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

from elasticsearch import Elasticsearch

from app.core.config import settings
from app.core.logger import get_logger
from app.search_index.adapter import describe_error, unwrap
from app.search_index.mapping import ensure_index

logger = get_logger(__name__)

ClientFactory = Callable[..., Elasticsearch]


class SearchBackendHandle:
    """
    Lazily connected, single-attempt Elasticsearch handle.

    Constructing the handle does no I/O. The first ``ensure_ready()`` call
    connects, checks the cluster and creates the index if needed; the
    outcome of that call is final.
    """

    def __init__(
        self,
        node: str | None = None,
        api_key: str | None = None,
        index_name: str | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """
        Args:
            node           : Cluster URL. Defaults to ``settings.elasticsearch_node``;
                             when both are empty the handle starts out disabled.
            api_key        : API key. Defaults to ``settings.elasticsearch_api_key``.
            index_name     : Index holding movie documents.
                             Defaults to ``settings.elasticsearch_index``.
            client_factory : Callable building the client (tests inject a mock).
        """
        self._node = node if node is not None else settings.elasticsearch_node
        self._api_key = api_key if api_key is not None else settings.elasticsearch_api_key
        self._index_name = index_name or settings.elasticsearch_index
        self._client_factory: ClientFactory = client_factory or Elasticsearch

        self._lock = threading.Lock()
        self._client: Optional[Elasticsearch] = None
        self._disabled = False

    # ── Properties ─────────────────────────────────────────────────────────────

    @property
    def index_name(self) -> str:
        return self._index_name

    def is_disabled(self) -> bool:
        """True once the single connection attempt has failed."""
        return self._disabled

    def state(self) -> str:
        """``active``, ``disabled`` or ``pending`` (not attempted yet)."""
        if self._client is not None:
            return "active"
        if self._disabled:
            return "disabled"
        return "pending"

    # ── Lifecycle ──────────────────────────────────────────────────────────────

    def ensure_ready(self) -> Optional[Elasticsearch]:
        """
        Return the live client, connecting on first use.

        Returns:
            The memoized client, or None when the index is disabled.
            Never raises.
        """
        if self._client is not None or self._disabled:
            return self._client

        with self._lock:
            # another thread may have finished the attempt while we waited
            if self._client is not None or self._disabled:
                return self._client
            self._client = self._connect()
            self._disabled = self._client is None
            return self._client

    def _connect(self) -> Optional[Elasticsearch]:
        if not self._node:
            logger.warning(
                "ELASTICSEARCH_NODE is not set — search runs on the catalog only."
            )
            return None

        logger.info("Connecting to search index — node=%s  index=%s", self._node, self._index_name)

        options: Dict[str, Any] = {
            "request_timeout": settings.elasticsearch_request_timeout,
            "max_retries": settings.elasticsearch_max_retries,
            "verify_certs": settings.elasticsearch_verify_certs,
        }
        if self._api_key:
            options["api_key"] = self._api_key

        try:
            client = self._client_factory(self._node, **options)
            info = client.info()
            ensure_index(client, self._index_name)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Search index unavailable, falling back to the catalog for this process: %s",
                describe_error(exc),
            )
            return None

        version = (unwrap(info) or {}).get("version", {}).get("number", "?")
        logger.info("Search index ready — cluster version %s.", version)
        return client


# ── Module-level singleton ─────────────────────────────────────────────────────
# Every service shares this handle so the connect-once outcome is global.

search_backend = SearchBackendHandle()
