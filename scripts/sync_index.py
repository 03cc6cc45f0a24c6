"""
scripts/sync_index.py

Rebuild the search index from the catalog, or just check connectivity.

Per-record sync on the write path is best-effort, so the index can fall
behind the catalog; this job closes that gap by re-indexing every record
under its own id (existing documents are overwritten, never duplicated).

Usage:
    python -m scripts.sync_index           # full resync
    python -m scripts.sync_index --check   # report index status and exit

Exit codes: 0 success, 1 index unavailable or items failed, 2 catalog error.
"""

import argparse
import sys
import time

from app.core.exceptions import CatalogStoreError, SearchIndexUnavailableError
from app.core.logger import get_logger
from app.services.admin_search_service import admin_search_service
from app.services.catalog_sync_service import catalog_sync_service

logger = get_logger("scripts.sync_index")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[1])
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report whether the search index is reachable.",
    )
    return parser.parse_args(argv)


def check() -> int:
    report = admin_search_service.index_status()
    logger.info("Search index status: %s — %s", report.status, report.message)
    if report.document_count is not None:
        logger.info("Documents in index: %d", report.document_count)
    return 0 if report.status == "active" else 1


def resync() -> int:
    logger.info("=" * 60)
    logger.info("Resync catalog → search index")
    logger.info("=" * 60)

    started = time.perf_counter()
    try:
        stats = catalog_sync_service.resync_all()
    except SearchIndexUnavailableError as exc:
        logger.error("%s", exc)
        return 1
    except CatalogStoreError as exc:
        logger.error("Catalog read failed: %s", exc)
        return 2

    logger.info(
        "Done in %.1fs — %d indexed, %d failed.",
        time.perf_counter() - started,
        stats["indexed"],
        stats["failed"],
    )
    return 0 if stats["failed"] == 0 else 1


def main(argv=None) -> int:
    args = _parse_args(argv)
    return check() if args.check else resync()


if __name__ == "__main__":
    sys.exit(main())
