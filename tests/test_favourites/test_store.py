"""Tests for the favourites store."""

import json

import pytest

from home_browser.errors import InvalidFavourite, MalformedPersistedState, StorageWriteFailure
from home_browser.favourites import FAVOURITES_KEY, FavouritesStore, InMemoryStorage
from home_browser.favourites.store import decode_favourites, encode_favourites
from home_browser.models import Property


class FailingStorage(InMemoryStorage):
    """Reads normally, fails every write."""

    def write(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


class UnreadableStorage(InMemoryStorage):
    def read(self, key: str) -> str | None:
        raise PermissionError("denied")


class BrokenBackend(InMemoryStorage):
    """A backend failing with something other than an OSError."""

    def read(self, key: str) -> str | None:
        raise RuntimeError("storage backend unavailable")

    def write(self, key: str, value: str) -> None:
        raise RuntimeError("storage backend unavailable")


def persisted_ids(storage: InMemoryStorage) -> list[object]:
    raw = storage.read(FAVOURITES_KEY)
    assert raw is not None
    return json.loads(raw)["ids"]


class TestAdd:
    def test_add(self, store: FavouritesStore) -> None:
        assert store.add(1) == (1,)
        assert store.contains(1)

    def test_add_is_idempotent(self, store: FavouritesStore) -> None:
        once = store.add("p1")
        twice = store.add("p1")
        assert once == twice == ("p1",)
        assert len(store) == 1

    def test_keeps_insertion_order(self, store: FavouritesStore) -> None:
        store.add(3)
        store.add(1)
        store.add(2)
        assert store.all() == (3, 1, 2)

    def test_ids_compared_by_value(self, store: FavouritesStore) -> None:
        store.add(1)
        store.add("1")
        assert store.all() == (1, "1")
        assert 1 in store
        assert "1" in store

    def test_persists_after_add(
        self, store: FavouritesStore, memory_storage: InMemoryStorage
    ) -> None:
        store.add("p1")
        store.add(2)
        assert persisted_ids(memory_storage) == ["p1", 2]

    @pytest.mark.parametrize("bad_id", [None, "", True, 1.5])
    def test_rejects_invalid_ids(self, store: FavouritesStore, bad_id: object) -> None:
        with pytest.raises(InvalidFavourite):
            store.add(bad_id)  # type: ignore[arg-type]
        assert store.all() == ()


class TestRemove:
    def test_remove(self, store: FavouritesStore) -> None:
        store.add(1)
        store.add(2)
        assert store.remove(1) == (2,)
        assert not store.contains(1)

    def test_remove_absent_is_noop(
        self, store: FavouritesStore, memory_storage: InMemoryStorage
    ) -> None:
        store.add(2)
        assert store.remove(999) == (2,)
        assert persisted_ids(memory_storage) == [2]


class TestToggle:
    def test_toggle_adds_then_removes(self, store: FavouritesStore) -> None:
        assert store.toggle("p1") == ("p1",)
        assert store.toggle("p1") == ()

    def test_double_toggle_restores_set(self, store: FavouritesStore) -> None:
        store.add(1)
        store.add(2)
        before = set(store.all())
        store.toggle(1)
        store.toggle(1)
        assert set(store.all()) == before

    def test_toggle_persists(self, store: FavouritesStore, memory_storage: InMemoryStorage) -> None:
        store.toggle(5)
        assert persisted_ids(memory_storage) == [5]
        store.toggle(5)
        assert persisted_ids(memory_storage) == []


class TestClear:
    def test_clear(self, store: FavouritesStore, memory_storage: InMemoryStorage) -> None:
        store.add(1)
        store.add(2)
        assert store.clear() == ()
        assert len(store) == 0
        assert persisted_ids(memory_storage) == []

    def test_clear_empty_store(self, store: FavouritesStore) -> None:
        assert store.clear() == ()


class TestContains:
    def test_contains(self, store: FavouritesStore) -> None:
        store.add(1)
        assert store.contains(1)
        assert not store.contains(2)
        assert not store.contains(999)

    def test_invalid_ids_are_never_contained(self, store: FavouritesStore) -> None:
        assert not store.contains(None)
        assert not store.contains(True)


class TestLoad:
    def test_absent_state_is_empty(self) -> None:
        store = FavouritesStore(InMemoryStorage())
        assert store.load() == ()

    def test_round_trip(self, memory_storage: InMemoryStorage) -> None:
        first = FavouritesStore(memory_storage)
        first.load()
        first.add("p3")
        first.add(1)
        first.add("p2")

        second = FavouritesStore(memory_storage)
        assert second.load() == ("p3", 1, "p2")

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{",
            "42",
            '"favourites"',
            '{"version": 2, "ids": [1]}',
            '{"ids": "nope"}',
            "[null]",
            '[{"title": "no id"}]',
            "[true]",
        ],
    )
    def test_malformed_state_degrades_to_empty(self, raw: str) -> None:
        store = FavouritesStore(InMemoryStorage({FAVOURITES_KEY: raw}))
        assert store.load() == ()

    def test_unreadable_storage_degrades_to_empty(self) -> None:
        store = FavouritesStore(UnreadableStorage())
        assert store.load() == ()

    def test_backend_error_on_read_degrades_to_empty(self) -> None:
        store = FavouritesStore(BrokenBackend())
        assert store.load() == ()

    def test_bare_list_accepted(self) -> None:
        store = FavouritesStore(InMemoryStorage({FAVOURITES_KEY: '["a", 2, "a"]'}))
        assert store.load() == ("a", 2)

    def test_legacy_snapshots_migrated_to_ids(self) -> None:
        legacy = json.dumps(
            [
                {"id": 1, "type": "House", "price": 450000, "picture": "/images/house1.jpg"},
                {"id": 2, "type": "Flat", "price": 280000},
            ]
        )
        store = FavouritesStore(InMemoryStorage({FAVOURITES_KEY: legacy}))
        assert store.load() == (1, 2)

    def test_load_replaces_in_memory_state(self, memory_storage: InMemoryStorage) -> None:
        store = FavouritesStore(memory_storage)
        store.load()
        store.add(1)
        memory_storage.write(FAVOURITES_KEY, encode_favourites([7]))
        assert store.load() == (7,)

    def test_custom_key(self, memory_storage: InMemoryStorage) -> None:
        store = FavouritesStore(memory_storage, key="other")
        store.load()
        store.add(1)
        assert memory_storage.read("other") is not None
        assert memory_storage.read(FAVOURITES_KEY) is None


class TestWriteFailure:
    def test_mutation_still_applies(self) -> None:
        store = FavouritesStore(FailingStorage())
        store.load()
        assert store.add(1) == (1,)
        assert store.contains(1)
        assert isinstance(store.last_error, StorageWriteFailure)
        assert "quota exceeded" in str(store.last_error)

    def test_every_operation_survives(self) -> None:
        store = FavouritesStore(FailingStorage())
        store.load()
        store.add(1)
        store.toggle(2)
        store.remove(1)
        assert store.all() == (2,)
        store.clear()
        assert store.all() == ()

    def test_non_os_error_is_recorded_not_raised(self) -> None:
        store = FavouritesStore(BrokenBackend())
        store.load()
        assert store.add("p1") == ("p1",)
        assert store.toggle(2) == ("p1", 2)
        assert isinstance(store.last_error, StorageWriteFailure)
        assert "storage backend unavailable" in str(store.last_error)

    def test_error_cleared_after_successful_write(self, memory_storage: InMemoryStorage) -> None:
        store = FavouritesStore(memory_storage)
        store.load()
        store.last_error = StorageWriteFailure("earlier failure")
        store.add(1)
        assert store.last_error is None


class TestAddDropped:
    def test_json_payload(self, store: FavouritesStore) -> None:
        payload = json.dumps({"id": 4, "type": "Flat", "price": 195000})
        assert store.add_dropped(payload) == (4,)

    def test_mapping_payload(self, store: FavouritesStore) -> None:
        assert store.add_dropped({"id": "prop2", "type": "House"}) == ("prop2",)

    def test_dropping_twice_does_not_duplicate(self, store: FavouritesStore) -> None:
        store.add_dropped('{"id": 1}')
        store.add_dropped(b'{"id": 1}')
        assert store.all() == (1,)

    @pytest.mark.parametrize("payload", ["not json", "[1, 2]", '{"type": "House"}', '{"id": null}'])
    def test_invalid_payload(self, store: FavouritesStore, payload: str) -> None:
        with pytest.raises(InvalidFavourite):
            store.add_dropped(payload)
        assert store.all() == ()


class TestResolve:
    def test_resolves_in_favourites_order(
        self, store: FavouritesStore, sample_catalog: list[Property]
    ) -> None:
        store.add(3)
        store.add(1)
        assert [p.id for p in store.resolve(sample_catalog)] == [3, 1]

    def test_skips_ids_missing_from_catalog(
        self, store: FavouritesStore, sample_catalog: list[Property]
    ) -> None:
        store.add(99)
        store.add(2)
        assert [p.id for p in store.resolve(sample_catalog)] == [2]

    def test_does_not_match_across_id_types(
        self, store: FavouritesStore, sample_catalog: list[Property]
    ) -> None:
        store.add("1")
        assert store.resolve(sample_catalog) == []


class TestCodec:
    def test_encode(self) -> None:
        assert json.loads(encode_favourites(["a", 1])) == {"version": 1, "ids": ["a", 1]}

    def test_decode_rejects_garbage(self) -> None:
        with pytest.raises(MalformedPersistedState):
            decode_favourites("{}")
