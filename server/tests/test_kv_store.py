"""
Key-Value Substrate Tests

Memory and JSON-file stores: basic get/set/remove/keys, the byte quota, and
JSON-file persistence across instances.

Run:
----
    pytest server/tests/test_kv_store.py -v
"""

import json

import pytest

from server.services import JsonFileKeyValueStore, MemoryKeyValueStore, StorageError, StorageQuotaExceeded


class TestMemoryStore:

    def test_get_set_remove(self):
        store = MemoryKeyValueStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        assert store.keys() == ["k"]
        store.remove("k")
        store.remove("k")
        assert store.get("k") is None

    def test_quota_rejects_oversized_write(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set("a", "12345")
        with pytest.raises(StorageQuotaExceeded):
            store.set("b", "123456")
        assert store.keys() == ["a"]

    def test_quota_counts_utf8_bytes(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        # 1 + 5 * 2 bytes is over the quota even though it is only 6 characters
        with pytest.raises(StorageQuotaExceeded):
            store.set("k", "\u00e9\u00e9\u00e9\u00e9\u00e9")
        store.set("k", "\u00e9\u00e9\u00e9\u00e9")
        assert store.get("k") == "\u00e9" * 4

    def test_overwrite_counts_only_new_value(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set("a", "123456789")
        store.set("a", "987654321")
        assert store.get("a") == "987654321"


class TestJsonFileStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "cache" / "reports.json"
        store = JsonFileKeyValueStore(path)
        store.set("soibrand_alias_@x", "UC1")
        store.set("other", "2")
        store.remove("other")

        reloaded = JsonFileKeyValueStore(path)
        assert reloaded.keys() == ["soibrand_alias_@x"]
        assert json.loads(path.read_text()) == {"soibrand_alias_@x": "UC1"}

    def test_corrupt_file_is_storage_error(self, tmp_path):
        path = tmp_path / "reports.json"
        path.write_text("{not json")
        with pytest.raises(StorageError):
            JsonFileKeyValueStore(path)

    def test_non_object_file_is_storage_error(self, tmp_path):
        path = tmp_path / "reports.json"
        path.write_text("[1, 2]")
        with pytest.raises(StorageError):
            JsonFileKeyValueStore(path)

    def test_failed_remove_keeps_key(self, tmp_path, monkeypatch):
        store = JsonFileKeyValueStore(tmp_path / "r.json")
        store.set("k", "v")

        def fail():
            raise StorageError("disk full")

        monkeypatch.setattr(store, "_save", fail)
        with pytest.raises(StorageError):
            store.remove("k")
        assert store.get("k") == "v"
        assert json.loads((tmp_path / "r.json").read_text()) == {"k": "v"}

    def test_quota_applies(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "r.json", quota_bytes=8)
        with pytest.raises(StorageQuotaExceeded):
            store.set("key", "too long value")
        assert not (tmp_path / "r.json").exists()
