"""Browser session: one catalog, its current results and one favourites store."""

from collections.abc import Iterable
from types import TracebackType
from typing import Self

import httpx

from home_browser.catalog import load_catalog
from home_browser.config import Settings
from home_browser.errors import CatalogError, InvalidCriteria
from home_browser.favourites import FavouritesStore, InMemoryStorage, JsonFileStorage
from home_browser.favourites.storage import KeyValueStorage
from home_browser.filters.criteria import CriteriaInput, filter_properties, parse_criteria
from home_browser.filters.sorting import sort_properties
from home_browser.logging import get_logger
from home_browser.models import FilterCriteria, Property, PropertyId, SortDirection, SortKey

logger = get_logger(__name__)


class SearchSession:
    """Holds the result list currently on display.

    Rejected criteria never replace the current results.
    """

    def __init__(self, catalog: Iterable[Property]) -> None:
        self.catalog: tuple[Property, ...] = tuple(catalog)
        self.results: list[Property] = list(self.catalog)
        self.criteria: FilterCriteria = FilterCriteria()

    def apply(self, criteria: CriteriaInput) -> list[Property]:
        """Filter the catalog and make the result current.

        Raises:
            InvalidCriteria: The previous results and criteria are left in place.
        """
        try:
            parsed = parse_criteria(criteria)
            results = filter_properties(self.catalog, parsed)
        except InvalidCriteria as e:
            logger.info("search_rejected", problems=list(e.problems), kept=len(self.results))
            raise
        self.criteria = parsed
        self.results = results
        return list(results)

    def sort(
        self,
        key: SortKey | str = SortKey.PRICE,
        direction: SortDirection | str = SortDirection.ASC,
    ) -> list[Property]:
        """Sort the current results. The sorted order becomes the current one."""
        self.results = sort_properties(self.results, key, direction)
        return list(self.results)

    def reset(self) -> list[Property]:
        self.criteria = FilterCriteria()
        self.results = list(self.catalog)
        return list(self.results)


class BrowserSession:
    """Everything one browsing session owns.

    Built explicitly and passed to whoever needs it; use it as a context manager
    so it is torn down when the session ends.
    """

    def __init__(self, catalog: Iterable[Property], favourites: FavouritesStore) -> None:
        self.search = SearchSession(catalog)
        self.favourites = favourites
        self._by_id: dict[PropertyId, Property] = {p.id: p for p in self.search.catalog}
        self.closed = False

    @classmethod
    def open(
        cls,
        settings: Settings,
        *,
        storage: KeyValueStorage | None = None,
        client: httpx.Client | None = None,
    ) -> Self:
        """Load the catalog and persisted favourites for a new session.

        A catalog that cannot be loaded gives an empty catalog rather than an error.

        Args:
            settings: Application settings.
            storage: Favourites backend. Defaults to JSON files under ``settings.data_dir``.
            client: Optional HTTP client for URL catalogs.
        """
        try:
            catalog = load_catalog(
                settings.catalog_source,
                price_unit=settings.price_unit,
                timeout=settings.request_timeout,
                client=client,
            )
        except CatalogError as e:
            logger.error("catalog_unavailable", source=settings.catalog_source, error=str(e))
            catalog = ()

        store = FavouritesStore(
            storage if storage is not None else JsonFileStorage(settings.data_dir),
            key=settings.favourites_key,
        )
        store.load()
        logger.info("session_opened", properties=len(catalog), favourites=len(store))
        return cls(catalog, store)

    @classmethod
    def in_memory(cls, catalog: Iterable[Property]) -> Self:
        """A session whose favourites are not persisted beyond the process."""
        store = FavouritesStore(InMemoryStorage())
        store.load()
        return cls(catalog, store)

    @property
    def catalog(self) -> tuple[Property, ...]:
        return self.search.catalog

    @property
    def results(self) -> list[Property]:
        return list(self.search.results)

    def find(self, raw_id: object) -> Property | None:
        """Look up a property by id.

        Ids typed by a user arrive as strings, so "3" also finds a property whose
        id is the integer 3.
        """
        if isinstance(raw_id, bool):
            return None
        if isinstance(raw_id, int | str) and raw_id in self._by_id:
            return self._by_id[raw_id]
        if isinstance(raw_id, str):
            text = raw_id.strip()
            if text in self._by_id:
                return self._by_id[text]
            if text.lstrip("-").isdigit():
                return self._by_id.get(int(text))
        return None

    def favourite_properties(self) -> list[Property]:
        return self.favourites.resolve(self.catalog)

    def is_favourite(self, prop: Property) -> bool:
        return self.favourites.contains(prop.id)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        logger.info("session_closed", favourites=len(self.favourites))

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
