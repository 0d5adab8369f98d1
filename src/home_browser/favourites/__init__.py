"""Persisted favourites."""

from home_browser.favourites.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from home_browser.favourites.store import FAVOURITES_KEY, FavouritesStore

__all__ = [
    "FAVOURITES_KEY",
    "FavouritesStore",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
]
