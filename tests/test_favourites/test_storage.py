"""Tests for the key/value storage backends."""

import os
from pathlib import Path

import pytest

from home_browser.favourites import FavouritesStore, InMemoryStorage, JsonFileStorage
from home_browser.favourites.storage import safe_file_name


class TestSafeFileName:
    def test_plain_key(self) -> None:
        assert safe_file_name("favourites") == "favourites.json"

    def test_unsafe_characters_replaced(self) -> None:
        assert safe_file_name("user:1/favs") == "user_1_favs.json"


class TestInMemoryStorage:
    def test_read_missing(self) -> None:
        assert InMemoryStorage().read("k") is None

    def test_write_then_read(self) -> None:
        storage = InMemoryStorage()
        storage.write("k", "v1")
        storage.write("k", "v2")
        assert storage.read("k") == "v2"

    def test_initial_data_is_copied(self) -> None:
        initial = {"k": "v"}
        storage = InMemoryStorage(initial)
        storage.write("k", "changed")
        assert initial == {"k": "v"}


class TestJsonFileStorage:
    def test_read_missing_file(self, tmp_path: Path) -> None:
        assert JsonFileStorage(tmp_path).read("favourites") is None

    def test_write_creates_directory(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path / "nested" / "data")
        storage.write("favourites", '{"version": 1, "ids": []}')
        assert (tmp_path / "nested" / "data" / "favourites.json").exists()

    def test_write_then_read(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.write("favourites", "first")
        storage.write("favourites", "second")
        assert storage.read("favourites") == "second"

    def test_no_temp_files_left_behind(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.write("favourites", "value")
        assert [p.name for p in tmp_path.iterdir()] == ["favourites.json"]

    def test_failed_replace_keeps_old_file_and_cleans_up(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        storage = JsonFileStorage(tmp_path)
        storage.write("favourites", "old")

        def broken_replace(src: str, dst: str) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(OSError, match="disk full"):
            storage.write("favourites", "new")

        assert storage.read("favourites") == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["favourites.json"]

    def test_store_round_trip_through_files(self, tmp_path: Path) -> None:
        first = FavouritesStore(JsonFileStorage(tmp_path))
        first.load()
        first.add("prop1")
        first.add(7)

        second = FavouritesStore(JsonFileStorage(tmp_path))
        assert second.load() == ("prop1", 7)

    def test_corrupt_file_loads_as_empty(self, tmp_path: Path) -> None:
        (tmp_path / "favourites.json").write_text("{broken", encoding="utf-8")
        store = FavouritesStore(JsonFileStorage(tmp_path))
        assert store.load() == ()

    def test_unwritable_location_reported_not_raised(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = FavouritesStore(JsonFileStorage(blocker / "data"))
        store.load()

        assert store.add(1) == (1,)
        assert store.last_error is not None
