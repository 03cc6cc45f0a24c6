"""
tests/search_index/test_sync.py

Unit tests for DocumentSync — best-effort upsert / remove.
"""

from unittest.mock import MagicMock

from elasticsearch import NotFoundError

from app.search_index.mapping import to_index_document
from app.search_index.sync import DocumentSync


def _not_found() -> NotFoundError:
    return NotFoundError(
        message="not_found",
        meta=MagicMock(status=404),
        body={"result": "not_found"},
    )


class TestUpsert:

    def test_indexes_under_record_id(self, ready_backend, es_client, endgame_record) -> None:
        assert DocumentSync(ready_backend).upsert(endgame_record) is True

        kwargs = es_client.index.call_args.kwargs
        assert kwargs["index"] == "movies-test"
        assert kwargs["id"] == endgame_record["id"]
        assert "id" not in kwargs["document"]

    def test_repeated_upserts_target_same_document(self, ready_backend, es_client, endgame_record) -> None:
        """Upserting twice overwrites one document id, never creates a second."""
        sync = DocumentSync(ready_backend)
        sync.upsert(endgame_record)
        sync.upsert(endgame_record)

        ids = {c.kwargs["id"] for c in es_client.index.call_args_list}
        assert ids == {endgame_record["id"]}

    def test_episodes_and_internal_ids_stripped(self, endgame_record) -> None:
        record = {**endgame_record, "_id": "raw", "__v": 3, "episodes": [{"server_name": "#1"}]}
        document = to_index_document(record)
        assert not {"_id", "id", "__v", "episodes"} & set(document)
        assert document["name"] == "Avengers: Endgame"

    def test_disabled_index_is_noop(self, disabled_backend, endgame_record) -> None:
        assert DocumentSync(disabled_backend).upsert(endgame_record) is False

    def test_backend_error_is_swallowed(self, ready_backend, es_client, endgame_record) -> None:
        es_client.index.side_effect = ConnectionError("timeout")
        assert DocumentSync(ready_backend).upsert(endgame_record) is False

    def test_record_without_id_skipped(self, ready_backend, es_client, endgame_record) -> None:
        record = {k: v for k, v in endgame_record.items() if k != "id"}
        assert DocumentSync(ready_backend).upsert(record) is False
        es_client.index.assert_not_called()


class TestRemove:

    def test_deletes_by_id(self, ready_backend, es_client) -> None:
        assert DocumentSync(ready_backend).remove("abc") is True
        es_client.delete.assert_called_once_with(index="movies-test", id="abc", refresh=False)

    def test_missing_document_counts_as_removed(self, ready_backend, es_client) -> None:
        es_client.delete.side_effect = _not_found()
        assert DocumentSync(ready_backend).remove("abc") is True

    def test_other_errors_swallowed(self, ready_backend, es_client) -> None:
        es_client.delete.side_effect = RuntimeError("boom")
        assert DocumentSync(ready_backend).remove("abc") is False

    def test_disabled_index_is_noop(self, disabled_backend) -> None:
        assert DocumentSync(disabled_backend).remove("abc") is False
