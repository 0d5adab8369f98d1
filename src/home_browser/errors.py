"""Exceptions raised by the browser core."""

from collections.abc import Sequence


class HomeBrowserError(Exception):
    """Base class for all browser errors."""


class InvalidCriteria(HomeBrowserError, ValueError):
    """Filter criteria failed validation; nothing was filtered.

    ``problems`` lists every failed check so the UI can show all of them at once.
    """

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems: tuple[str, ...] = tuple(problems)
        super().__init__("; ".join(self.problems) or "Invalid search criteria")

    @property
    def message(self) -> str:
        """User-facing message."""
        return str(self)


class InvalidFavourite(HomeBrowserError, ValueError):
    """A favourite identifier or drag-and-drop payload could not be understood."""


class MalformedPersistedState(HomeBrowserError):
    """Persisted favourites could not be decoded."""


class StorageWriteFailure(HomeBrowserError):
    """Persisting favourites failed. The in-memory set is still authoritative."""


class CatalogError(HomeBrowserError):
    """The property catalog could not be fetched or normalized."""
