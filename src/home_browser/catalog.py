"""Catalog loading and schema normalization.

Two listing schemas are in circulation:

* structured: ``added`` is ``{"day", "month", "year"}`` and the postcode sits
  inside ``location``; prices are in currency units.
* flat: ``dateAdded`` is an ISO date string, ``postcode`` is a separate field and
  prices may be quoted in millions.

Both are adapted here into :class:`~home_browser.models.Property`, so nothing
downstream ever sees the raw shapes.
"""

import json
from collections.abc import Mapping
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Any, Final

import httpx
from pydantic import ValidationError

from home_browser.errors import CatalogError
from home_browser.logging import get_logger
from home_browser.models import PriceUnit, Property
from home_browser.utils.dates import parse_iso_date, parse_month

logger = get_logger(__name__)

DEFAULT_TIMEOUT: Final = 10.0

HEADERS: Final = {"Accept": "application/json"}


class CatalogSchema(StrEnum):
    """Source schema a raw record was written in."""

    STRUCTURED = "structured"
    FLAT = "flat"


def detect_schema(record: Mapping[str, Any]) -> CatalogSchema:
    """Work out which schema a raw record uses."""
    if isinstance(record.get("added"), Mapping):
        return CatalogSchema.STRUCTURED
    if "dateAdded" in record or "date_added" in record or "postcode" in record:
        return CatalogSchema.FLAT
    raise ValueError("record has neither an 'added' object nor a 'dateAdded' field")


def _structured_date(added: Mapping[str, Any]) -> date:
    month = parse_month(added.get("month"))
    if month is None:
        raise ValueError(f"unrecognised month {added.get('month')!r}")
    try:
        year = int(added["year"])
        day = int(added.get("day") or 1)
        return date(year, month, day)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"invalid added date {dict(added)!r}") from e


def _images(record: Mapping[str, Any]) -> tuple[str, ...]:
    images = record.get("images")
    if isinstance(images, list):
        return tuple(str(i) for i in images if i)
    picture = record.get("picture")
    return (str(picture),) if picture else ()


def _convert_price(value: Any, unit: PriceUnit) -> Any:
    if unit is PriceUnit.UNITS or isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        return round(float(value) * unit.multiplier)
    except (TypeError, ValueError):
        return value  # let the model report it


def adapt_record(record: Mapping[str, Any], *, price_unit: PriceUnit = PriceUnit.UNITS) -> Property:
    """Normalize one raw catalog record into a Property.

    Args:
        record: Raw record in either schema.
        price_unit: Unit the record's price is expressed in.

    Raises:
        ValueError: If the record cannot be normalized (pydantic ValidationError
            is a ValueError subclass).
    """
    schema = detect_schema(record)

    if schema is CatalogSchema.STRUCTURED:
        added = _structured_date(record["added"])
        location = str(record.get("location") or "")
    else:
        raw_date = record.get("dateAdded", record.get("date_added"))
        parsed = parse_iso_date(raw_date)
        if parsed is None:
            raise ValueError(f"invalid dateAdded {raw_date!r}")
        added = parsed
        location = str(record.get("location") or "")
        postcode = str(record.get("postcode") or "").strip()
        if postcode and postcode.casefold() not in location.casefold():
            location = f"{postcode}, {location}" if location else postcode

    return Property.model_validate(
        {
            "id": record.get("id"),
            "property_type": record.get("type", record.get("propertyType")),
            "price": _convert_price(record.get("price"), price_unit),
            "bedrooms": record.get("bedrooms"),
            "location": location,
            "added": added,
            "title": record.get("title") or "",
            "description": record.get("description") or record.get("short") or "",
            "tenure": record.get("tenure"),
            "images": _images(record),
            "available": record.get("available", True),
            "url": record.get("url"),
        }
    )


def parse_catalog(
    document: object, *, price_unit: PriceUnit = PriceUnit.UNITS
) -> tuple[Property, ...]:
    """Normalize a decoded catalog document.

    Args:
        document: ``{"properties": [...]}`` or a bare list of records. A top-level
            ``"priceUnit"`` key overrides ``price_unit``.
        price_unit: Unit prices are quoted in when the document does not say.

    Returns:
        Properties in document order.

    Raises:
        CatalogError: If the document has the wrong shape, a record cannot be
            normalized, or two records share an id.
    """
    if isinstance(document, Mapping):
        if "priceUnit" in document:
            try:
                price_unit = PriceUnit(str(document["priceUnit"]).lower())
            except ValueError as e:
                raise CatalogError(f"unknown priceUnit {document['priceUnit']!r}") from e
        records = document.get("properties")
    else:
        records = document
    if not isinstance(records, list):
        raise CatalogError("catalog must be a list of properties or {'properties': [...]}")

    properties: list[Property] = []
    seen: set[object] = set()
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise CatalogError(f"record {index} is not an object")
        try:
            prop = adapt_record(record, price_unit=price_unit)
        except (ValidationError, ValueError) as e:
            raise CatalogError(f"record {index} (id={record.get('id')!r}): {e}") from e
        if prop.id in seen:
            raise CatalogError(f"duplicate property id {prop.id!r} at record {index}")
        seen.add(prop.id)
        properties.append(prop)

    return tuple(properties)


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def fetch_document(
    source: str | Path,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
) -> object:
    """Read the raw catalog JSON from a file path or an http(s) URL.

    Raises:
        CatalogError: If the source cannot be read or is not JSON.
    """
    if is_url(source):
        url = str(source)
        try:
            if client is not None:
                response = client.get(url, headers=HEADERS, timeout=timeout)
            else:
                with httpx.Client(timeout=timeout, follow_redirects=True) as owned:
                    response = owned.get(url, headers=HEADERS)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise CatalogError(f"could not fetch catalog from {url}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogError(f"catalog at {url} is not JSON: {e}") from e

    path = Path(source)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"could not read catalog file {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CatalogError(f"catalog file {path} is not JSON: {e}") from e


def load_catalog(
    source: str | Path,
    *,
    price_unit: PriceUnit = PriceUnit.UNITS,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
) -> tuple[Property, ...]:
    """Fetch and normalize the catalog once.

    Raises:
        CatalogError: If the catalog cannot be read or normalized.
    """
    document = fetch_document(source, timeout=timeout, client=client)
    properties = parse_catalog(document, price_unit=price_unit)
    logger.info("catalog_loaded", source=str(source), count=len(properties))
    return properties
