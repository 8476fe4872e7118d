"""Unit tests for JSON snapshot persistence."""

import orjson
import pytest

from minisearch.search.errors import IndexIOError, SnapshotParseError
from minisearch.search.models import Document
from minisearch.search.snapshot import load_snapshot, save_snapshot
from minisearch.search.store import InvertedIndexStore


pytestmark = pytest.mark.unit


def _write(path, payload) -> None:
    path.write_bytes(orjson.dumps(payload))


class TestSaveSnapshot:
    def test_round_trip_preserves_store(self, scenario_store, tmp_path):
        path = save_snapshot(scenario_store, tmp_path / "index.json")

        restored = load_snapshot(path)

        assert restored == scenario_store
        assert restored.get_postings("dog") == {0: 1, 1: 2}
        assert restored.get_document(2) == Document(id=2, name="d2", length=3)

    def test_file_uses_string_keys(self, scenario_store, tmp_path):
        path = save_snapshot(scenario_store, tmp_path / "index.json")

        data = orjson.loads(path.read_bytes())

        assert set(data) == {"index", "documents"}
        assert data["index"]["dog"] == {"0": 1, "1": 2}
        assert data["documents"]["1"] == {"name": "d1", "length": 3}

    def test_empty_store(self, store, tmp_path):
        path = save_snapshot(store, tmp_path / "empty.json")

        assert orjson.loads(path.read_bytes()) == {"index": {}, "documents": {}}
        assert load_snapshot(path) == store

    def test_documents_without_postings_are_kept(self, scenario_store, tmp_path):
        scenario_store.remove_term("cat")
        scenario_store.remove_term("dog")

        restored = load_snapshot(save_snapshot(scenario_store, tmp_path / "index.json"))

        assert restored.document_count == 3
        assert restored.get_document(0).length == 2

    def test_overwrites_atomically_without_leftovers(self, scenario_store, store, tmp_path):
        path = tmp_path / "index.json"
        save_snapshot(store, path)
        save_snapshot(scenario_store, path)

        assert load_snapshot(path) == scenario_store
        assert sorted(p.name for p in tmp_path.iterdir()) == ["index.json"]

    def test_unwritable_destination(self, scenario_store, tmp_path):
        destination = tmp_path / "missing-dir" / "index.json"

        with pytest.raises(IndexIOError) as excinfo:
            save_snapshot(scenario_store, destination)

        assert excinfo.value.path == destination
        assert not (tmp_path / "missing-dir").exists()


class TestLoadSnapshot:
    def test_missing_file(self, tmp_path):
        with pytest.raises(IndexIOError):
            load_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SnapshotParseError) as excinfo:
            load_snapshot(path)

        assert isinstance(excinfo.value, ValueError)
        assert "broken.json" in str(excinfo.value)

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"index": {}},
            {"index": [], "documents": {}},
            {"index": {"a": {"0": "1"}}, "documents": {"0": {"name": "d", "length": 1}}},
            {"index": {"a": {"0": 0}}, "documents": {"0": {"name": "d", "length": 1}}},
            {"index": {}, "documents": {"0": {"name": "d"}}},
            {"index": {}, "documents": {"x": {"name": "d", "length": 1}}},
            {"index": {}, "documents": {"0": {"name": "d", "length": -1}}},
            {"index": {}, "documents": {"0": {"name": "a", "length": 1}, "01": {"name": "b", "length": 1}}},
            {"index": {"a": {"+0": 1}}, "documents": {"0": {"name": "d", "length": 1}}},
            {"index": {}, "documents": {" 0": {"name": "d", "length": 1}}},
        ],
        ids=[
            "not-an-object",
            "missing-documents",
            "index-not-a-map",
            "string-count",
            "zero-count",
            "missing-length",
            "non-numeric-id",
            "negative-length",
            "zero-padded-id",
            "signed-posting-id",
            "padded-id",
        ],
    )
    def test_rejects_unexpected_structure(self, tmp_path, payload):
        path = tmp_path / "index.json"
        _write(path, payload)

        with pytest.raises(SnapshotParseError):
            load_snapshot(path)

    def test_rejects_postings_for_unknown_documents(self, tmp_path):
        path = tmp_path / "index.json"
        _write(path, {"index": {"a": {"5": 1}}, "documents": {"0": {"name": "d", "length": 1}}})

        with pytest.raises(SnapshotParseError, match="unknown document ids"):
            load_snapshot(path)

    def test_drops_empty_posting_lists(self, tmp_path):
        path = tmp_path / "index.json"
        _write(path, {"index": {"a": {"0": 1}, "b": {}}, "documents": {"0": {"name": "d", "length": 1}}})

        store = load_snapshot(path)

        assert store.terms() == ["a"]

    def test_loaded_store_accepts_new_documents(self, scenario_store, tmp_path):
        restored = load_snapshot(save_snapshot(scenario_store, tmp_path / "index.json"))

        assert restored.index_document("fresh text", "d3") == 3
        assert isinstance(restored, InvertedIndexStore)

    def test_zero_padded_ids_cannot_replace_documents(self, tmp_path):
        path = tmp_path / "index.json"
        _write(
            path,
            {
                "index": {"a": {"1": 1}, "b": {"01": 4}},
                "documents": {
                    "0": {"name": "x", "length": 1},
                    "1": {"name": "y", "length": 1},
                    "01": {"name": "z", "length": 4},
                },
            },
        )

        with pytest.raises(SnapshotParseError):
            load_snapshot(path)

    def test_rejects_gaps_in_document_ids(self, tmp_path):
        path = tmp_path / "index.json"
        _write(
            path,
            {
                "index": {"b": {"2": 3}},
                "documents": {"0": {"name": "x", "length": 1}, "2": {"name": "keep", "length": 3}},
            },
        )

        with pytest.raises(SnapshotParseError, match="not contiguous"):
            load_snapshot(path)

    def test_document_ids_may_appear_in_any_order(self, tmp_path):
        path = tmp_path / "index.json"
        _write(
            path,
            {
                "index": {"a": {"1": 2, "0": 1}},
                "documents": {"1": {"name": "second", "length": 2}, "0": {"name": "first", "length": 1}},
            },
        )

        store = load_snapshot(path)

        assert store.get_document(1).name == "second"
        assert store.index_document("fresh", "third") == 2
