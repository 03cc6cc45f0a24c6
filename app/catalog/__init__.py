"""app/catalog/__init__.py — public API of the catalog package."""

from app.catalog.base import CatalogStore, Record
from app.catalog.mongo_store import MongoCatalogStore

__all__ = [
    "CatalogStore",
    "Record",
    "MongoCatalogStore",
]
