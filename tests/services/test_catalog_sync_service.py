"""
tests/services/test_catalog_sync_service.py

Unit tests for CatalogSyncService — catalog writes mirrored into the index.

``elasticsearch.helpers.bulk`` is patched where the service imports it.
"""

from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from app.core.exceptions import CatalogStoreError, SearchIndexUnavailableError
from app.services.catalog_sync_service import CatalogSyncService

_BULK = "app.services.catalog_sync_service.bulk"


def _make_service(backend, catalog=None, sync=None) -> CatalogSyncService:
    return CatalogSyncService(
        catalog=catalog or MagicMock(),
        backend=backend,
        sync=sync or MagicMock(),
    )


class TestSaveAndDelete:

    def test_save_persists_then_indexes(self, ready_backend, endgame_record) -> None:
        catalog, sync = MagicMock(), MagicMock()
        catalog.save.return_value = endgame_record
        service = _make_service(ready_backend, catalog, sync)

        saved = service.save_movie({k: v for k, v in endgame_record.items() if k != "id"})

        stored = catalog.save.call_args.args[0]
        assert stored["name"] == "Avengers: Endgame"
        assert stored["category"][0]["slug"] == "hanh-dong"
        sync.upsert.assert_called_once_with(endgame_record)
        assert saved is endgame_record

    def test_invalid_payload_rejected_before_write(self, ready_backend) -> None:
        catalog = MagicMock()
        with pytest.raises(ValidationError):
            _make_service(ready_backend, catalog).save_movie({"slug": "no-name"})
        catalog.save.assert_not_called()

    def test_catalog_failure_skips_index(self, ready_backend, endgame_record) -> None:
        catalog, sync = MagicMock(), MagicMock()
        catalog.save.side_effect = CatalogStoreError("write failed")

        with pytest.raises(CatalogStoreError):
            _make_service(ready_backend, catalog, sync).save_movie(endgame_record)
        sync.upsert.assert_not_called()

    def test_delete_removes_from_both(self, ready_backend, endgame_record) -> None:
        catalog, sync = MagicMock(), MagicMock()
        catalog.delete.return_value = endgame_record

        deleted = _make_service(ready_backend, catalog, sync).delete_movie(endgame_record["id"])

        assert deleted is endgame_record
        sync.remove.assert_called_once_with(endgame_record["id"])


class TestResyncAll:

    def test_bulk_indexes_every_record(self, ready_backend, es_client, endgame_record) -> None:
        catalog = MagicMock()
        catalog.iter_all.return_value = iter([endgame_record, {"name": "no id"}])

        with patch(_BULK) as bulk:
            bulk.side_effect = lambda client, actions, **kw: (len(list(actions)), [])
            stats = _make_service(ready_backend, catalog).resync_all()

        assert stats == {"indexed": 1, "failed": 0}
        assert bulk.call_args.args[0] is es_client

    def test_actions_overwrite_by_id(self, ready_backend, endgame_record) -> None:
        catalog = MagicMock()
        catalog.iter_all.return_value = iter([endgame_record])
        captured = []

        def _capture(client, actions, **kw):
            captured.extend(actions)
            return len(captured), []

        with patch(_BULK, side_effect=_capture):
            _make_service(ready_backend, catalog).resync_all()

        action = captured[0]
        assert action["_op_type"] == "index"
        assert action["_index"] == "movies-test"
        assert action["_id"] == endgame_record["id"]
        assert "id" not in action["_source"]

    def test_failures_counted(self, ready_backend) -> None:
        with patch(_BULK, return_value=(3, [{"index": {"error": "x"}}, {"index": {"error": "y"}}])):
            stats = _make_service(ready_backend).resync_all()
        assert stats == {"indexed": 3, "failed": 2}

    def test_disabled_index_raises(self, disabled_backend) -> None:
        with pytest.raises(SearchIndexUnavailableError):
            _make_service(disabled_backend).resync_all()
