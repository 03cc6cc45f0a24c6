"""
app/catalog/mongo_store.py

MongoDB implementation of the CatalogStore interface.

All driver-specific details are contained here — the rest of the
application never imports from ``pymongo`` or ``bson`` directly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.catalog.base import CatalogStore, Record, SortSpec
from app.core.config import settings
from app.core.exceptions import CatalogStoreError, InvalidSearchParameterError
from app.core.logger import get_logger

logger = get_logger(__name__)

#: Projection used by every listing read.
_WITHOUT_EPISODES = {"episodes": 0}


def to_object_id(record_id: Any) -> ObjectId:
    """Parse a caller-supplied id, rejecting anything that is not an ObjectId."""
    if isinstance(record_id, ObjectId):
        return record_id
    try:
        return ObjectId(str(record_id))
    except (InvalidId, TypeError) as exc:
        raise InvalidSearchParameterError(f"Invalid movie id: '{record_id}'") from exc


def _to_record(document: Record) -> Record:
    """Replace Mongo's ``_id`` with a string ``id`` and drop driver internals."""
    record = {k: v for k, v in document.items() if k not in ("_id", "__v")}
    record["id"] = str(document["_id"])
    return record


class MongoCatalogStore(CatalogStore):
    """
    CatalogStore backed by a single MongoDB collection.

    ``MongoClient`` connects lazily, so constructing the store never blocks;
    the first query pays the connection cost (bounded by the server
    selection timeout).
    """

    def __init__(
        self,
        uri: str | None = None,
        database: str | None = None,
        collection_name: str | None = None,
        collection: Collection | None = None,
    ) -> None:
        """
        Args:
            uri             : Connection string. Defaults to ``settings.mongodb_uri``.
            database        : Database name. Defaults to ``settings.mongodb_database``.
            collection_name : Collection name. Defaults to ``settings.mongodb_collection``.
            collection      : Pre-built collection (tests inject a mock here).
        """
        if collection is not None:
            self._collection = collection
            return

        client = MongoClient(
            uri or settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        )
        db = client[database or settings.mongodb_database]
        self._collection = db[collection_name or settings.mongodb_collection]
        logger.info(
            "MongoCatalogStore configured — database=%s  collection=%s",
            db.name,
            self._collection.name,
        )

    # ── Reads ──────────────────────────────────────────────────────────────────

    def find(
        self,
        query: Record,
        skip: int = 0,
        limit: int = 20,
        sort: Optional[SortSpec] = None,
    ) -> List[Record]:
        try:
            cursor = self._collection.find(query, _WITHOUT_EPISODES)
            if sort:
                cursor = cursor.sort(list(sort))
            documents = list(cursor.skip(skip).limit(limit))
        except PyMongoError as exc:
            raise CatalogStoreError(f"find failed: {exc}") from exc

        logger.debug("Catalog find returned %d record(s).", len(documents))
        return [_to_record(d) for d in documents]

    def count(self, query: Record) -> int:
        try:
            return self._collection.count_documents(query)
        except PyMongoError as exc:
            raise CatalogStoreError(f"count failed: {exc}") from exc

    def get(self, record_id: str) -> Optional[Record]:
        oid = to_object_id(record_id)
        try:
            document = self._collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise CatalogStoreError(f"get failed: {exc}") from exc
        return _to_record(document) if document else None

    def iter_all(self, batch_size: int = 500) -> Iterator[Record]:
        try:
            for document in self._collection.find({}, batch_size=batch_size):
                yield _to_record(document)
        except PyMongoError as exc:
            raise CatalogStoreError(f"scan failed: {exc}") from exc

    # ── Writes ─────────────────────────────────────────────────────────────────

    def save(self, record: Record) -> Record:
        now = datetime.now(timezone.utc)
        fields = {k: v for k, v in record.items() if k not in ("id", "_id", "createdAt")}
        fields["updatedAt"] = now
        record_id = record.get("id") or record.get("_id")

        try:
            if record_id:
                document = self._collection.find_one_and_update(
                    {"_id": to_object_id(record_id)},
                    {"$set": fields, "$setOnInsert": {"createdAt": now}},
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
            else:
                fields["createdAt"] = now
                inserted = self._collection.insert_one(fields)
                document = {**fields, "_id": inserted.inserted_id}
        except PyMongoError as exc:
            raise CatalogStoreError(f"save failed: {exc}") from exc

        saved = _to_record(document)
        logger.debug("Saved catalog record %s.", saved["id"])
        return saved

    def delete(self, record_id: str) -> Optional[Record]:
        oid = to_object_id(record_id)
        try:
            document = self._collection.find_one_and_delete({"_id": oid})
        except PyMongoError as exc:
            raise CatalogStoreError(f"delete failed: {exc}") from exc
        return _to_record(document) if document else None
