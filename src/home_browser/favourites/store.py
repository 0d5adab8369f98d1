"""Favourites set: add/remove/toggle/clear with write-through persistence."""

import json
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Final

from home_browser.errors import InvalidFavourite, MalformedPersistedState, StorageWriteFailure
from home_browser.favourites.storage import KeyValueStorage
from home_browser.logging import get_logger
from home_browser.models import Property, PropertyId, validate_property_id

logger = get_logger(__name__)

FAVOURITES_KEY: Final = "favourites"
_FORMAT_VERSION: Final = 1


def encode_favourites(ids: Iterable[PropertyId]) -> str:
    """Serialize identifiers to the persisted JSON document."""
    return json.dumps({"version": _FORMAT_VERSION, "ids": list(ids)})


def decode_favourites(raw: str) -> list[PropertyId]:
    """Parse a persisted favourites document.

    Accepts the current ``{"version": 1, "ids": [...]}`` document, a bare list of
    identifiers, and the older format that stored whole property snapshots
    (a list of objects each carrying an ``id``), which is migrated to ids.
    Duplicates are dropped, keeping the first occurrence.

    Raises:
        MalformedPersistedState: If the document cannot be understood.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedPersistedState(f"not valid JSON: {e}") from e

    if isinstance(data, dict):
        if data.get("version") != _FORMAT_VERSION or not isinstance(data.get("ids"), list):
            raise MalformedPersistedState("unsupported favourites document")
        entries = data["ids"]
    elif isinstance(data, list):
        entries = data
    else:
        raise MalformedPersistedState(f"expected a list or object, got {type(data).__name__}")

    ids: dict[PropertyId, None] = {}
    for entry in entries:
        candidate = entry.get("id") if isinstance(entry, dict) else entry
        try:
            ids[validate_property_id(candidate)] = None
        except ValueError as e:
            raise MalformedPersistedState(str(e)) from e
    return list(ids)


class FavouritesStore:
    """The set of favourite property ids for one session.

    Insertion order is kept for display. Every mutation is written through to
    ``storage`` before returning. When that write fails the failure is logged and
    kept in :attr:`last_error`, and the in-memory set stays authoritative for the
    rest of the session.
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = FAVOURITES_KEY) -> None:
        """Initialize an empty store. Call :meth:`load` to read persisted state.

        Args:
            storage: Durable backend the set is written to.
            key: Storage key holding the serialized set.
        """
        self.storage = storage
        self.key = key
        self._ids: dict[PropertyId, None] = {}
        self.last_error: StorageWriteFailure | None = None

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, property_id: object) -> bool:
        return self.contains(property_id)

    def __iter__(self) -> Iterator[PropertyId]:
        return iter(tuple(self._ids))

    def load(self) -> tuple[PropertyId, ...]:
        """Replace the in-memory set with the persisted one.

        Absent, unreadable or malformed data gives an empty set; it never raises.
        """
        try:
            raw = self.storage.read(self.key)
        except Exception as e:
            logger.warning("favourites_read_failed", key=self.key, error=str(e))
            raw = None

        ids: list[PropertyId] = []
        if raw is not None:
            try:
                ids = decode_favourites(raw)
            except MalformedPersistedState as e:
                logger.warning("favourites_state_malformed", key=self.key, error=str(e))

        self._ids = dict.fromkeys(ids)
        logger.info("favourites_loaded", key=self.key, count=len(self._ids))
        return self.all()

    def add(self, property_id: PropertyId) -> tuple[PropertyId, ...]:
        """Add an id. Adding one that is already present changes nothing."""
        pid = self._checked(property_id)
        if pid in self._ids:
            return self.all()
        self._ids[pid] = None
        self._persist("add", pid)
        return self.all()

    def remove(self, property_id: PropertyId) -> tuple[PropertyId, ...]:
        """Remove an id. Removing an absent id changes nothing."""
        pid = self._checked(property_id)
        if pid not in self._ids:
            return self.all()
        del self._ids[pid]
        self._persist("remove", pid)
        return self.all()

    def toggle(self, property_id: PropertyId) -> tuple[PropertyId, ...]:
        """Remove the id if present, otherwise add it."""
        pid = self._checked(property_id)
        if pid in self._ids:
            return self.remove(pid)
        return self.add(pid)

    def clear(self) -> tuple[PropertyId, ...]:
        self._ids.clear()
        self._persist("clear", None)
        return self.all()

    def contains(self, property_id: object) -> bool:
        try:
            pid = validate_property_id(property_id)
        except ValueError:
            return False
        return pid in self._ids

    def all(self) -> tuple[PropertyId, ...]:
        """Snapshot of the favourite ids in insertion order."""
        return tuple(self._ids)

    def add_dropped(self, payload: str | bytes | Mapping[str, Any]) -> tuple[PropertyId, ...]:
        """Add the property carried by a drag-and-drop payload.

        Args:
            payload: A serialized property record (JSON text or an already decoded
                mapping). Only its ``id`` is kept.

        Raises:
            InvalidFavourite: If the payload is not a record with a usable id.
        """
        record: object = payload
        if isinstance(payload, str | bytes):
            try:
                record = json.loads(payload)
            except json.JSONDecodeError as e:
                raise InvalidFavourite(f"drop payload is not JSON: {e}") from e
        if not isinstance(record, Mapping) or "id" not in record:
            raise InvalidFavourite("drop payload must be a property record with an id")
        return self.add(self._checked(record["id"]))

    def resolve(self, catalog: Iterable[Property]) -> list[Property]:
        """Full records for the favourite ids, in favourites order.

        Ids with no catalog entry are skipped; the catalog is the source of truth
        for record content.
        """
        by_id = {p.id: p for p in catalog}
        missing = [pid for pid in self._ids if pid not in by_id]
        if missing:
            logger.debug("favourites_missing_from_catalog", ids=missing)
        return [by_id[pid] for pid in self._ids if pid in by_id]

    def _checked(self, property_id: object) -> PropertyId:
        try:
            return validate_property_id(property_id)
        except ValueError as e:
            raise InvalidFavourite(str(e)) from e

    def _persist(self, operation: str, property_id: PropertyId | None) -> None:
        try:
            self.storage.write(self.key, encode_favourites(self._ids))
        except Exception as e:
            self.last_error = StorageWriteFailure(f"could not save favourites: {e}")
            logger.warning(
                "favourites_write_failed",
                operation=operation,
                property_id=property_id,
                count=len(self._ids),
                error=str(e),
            )
            return
        self.last_error = None
        logger.info(
            "favourites_saved", operation=operation, property_id=property_id, count=len(self._ids)
        )
