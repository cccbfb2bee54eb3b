"""Store 테스트 - MemoryStore, SqlStore, read/write 오류 처리"""

from sqlalchemy.exc import OperationalError

from src.db.store import MemoryStore, SqlStore, read_entries, write_entries


class _BrokenStore:
    """항상 실패하는 저장소"""

    def get(self, key):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    def set(self, key, value):
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))


class TestMemoryStore:
    def test_roundtrip(self) -> None:
        store = MemoryStore()
        store.set("k", [["a1", {"x": 1}]])
        assert store.get("k") == [["a1", {"x": 1}]]
        assert store.keys() == ["k"]

    def test_missing_key(self) -> None:
        assert MemoryStore().get("nope") is None

    def test_values_are_copied(self) -> None:
        store = MemoryStore()
        value = [["a1", {"x": 1}]]
        store.set("k", value)
        value[0][1]["x"] = 99
        loaded = store.get("k")
        loaded[0][1]["x"] = 42
        assert store.get("k") == [["a1", {"x": 1}]]


class TestSqlStore:
    def test_insert_and_read(self, sql_session_factory) -> None:
        store = SqlStore(sql_session_factory)
        assert store.get("k") is None
        store.set("k", [["a1", {"trust": 10}]])
        assert store.get("k") == [["a1", {"trust": 10}]]

    def test_update_existing(self, sql_session_factory) -> None:
        store = SqlStore(sql_session_factory)
        store.set("k", [["a1", {"trust": 10}]])
        store.set("k", [["a1", {"trust": 20}], ["a2", {"trust": 0}]])
        assert len(store.get("k")) == 2

    def test_keys_are_independent(self, sql_session_factory) -> None:
        store = SqlStore(sql_session_factory)
        store.set("taming", [1])
        store.set("bonding", [2])
        assert store.get("taming") == [1]
        assert store.get("bonding") == [2]


class TestEntryHelpers:
    def test_read_missing_is_empty(self) -> None:
        assert read_entries(MemoryStore(), "k") == []

    def test_read_malformed_is_empty(self) -> None:
        store = MemoryStore()
        store.set("k", {"not": "a list"})
        assert read_entries(store, "k") == []

    def test_read_error_swallowed(self) -> None:
        assert read_entries(_BrokenStore(), "k") == []

    def test_write_error_swallowed(self) -> None:
        assert write_entries(_BrokenStore(), "k", [1]) is False

    def test_write_ok(self) -> None:
        store = MemoryStore()
        assert write_entries(store, "k", [1, 2]) is True
        assert store.get("k") == [1, 2]
