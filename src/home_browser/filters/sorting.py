"""Sorting and summary helpers for result lists."""

import math
from collections.abc import Callable, Iterable
from datetime import date
from numbers import Real

from home_browser.filters.criteria import as_catalog
from home_browser.logging import get_logger
from home_browser.models import Property, SortDirection, SortKey

logger = get_logger(__name__)

_SORT_KEYS: dict[SortKey, Callable[[Property], int | date]] = {
    SortKey.PRICE: lambda p: p.price,
    SortKey.BEDROOMS: lambda p: p.bedrooms,
    SortKey.DATE: lambda p: p.added,
}


def _parse_sort_key(key: SortKey | str) -> SortKey:
    try:
        return SortKey(str(key).strip().lower())
    except ValueError:
        logger.warning("unknown_sort_key", key=key, fallback=SortKey.PRICE.value)
        return SortKey.PRICE


def _parse_direction(direction: SortDirection | str) -> SortDirection:
    try:
        return SortDirection(str(direction).strip().lower())
    except ValueError:
        logger.warning("unknown_sort_direction", direction=direction)
        return SortDirection.ASC


def sort_properties(
    properties: Iterable[Property] | None,
    key: SortKey | str = SortKey.PRICE,
    direction: SortDirection | str = SortDirection.ASC,
) -> list[Property]:
    """Return a sorted copy of ``properties``.

    The input is never modified. Properties that compare equal keep their
    original relative order in both directions. An unknown key sorts by price
    and an unknown direction sorts ascending.

    Args:
        properties: Properties to sort. None or anything that is not a collection
            of properties gives an empty list.
        key: "price", "bedrooms" or "date".
        direction: "asc" or "desc".
    """
    candidates = as_catalog(properties)
    if candidates is None:
        return []
    sort_key = _SORT_KEYS[_parse_sort_key(key)]
    descending = _parse_direction(direction) is SortDirection.DESC
    # sorted() stays stable with reverse=True
    return sorted(candidates, key=sort_key, reverse=descending)


def average_price(properties: Iterable[Property] | None) -> int:
    """Mean price over properties with a positive price, rounded half up. 0 if none."""
    candidates = as_catalog(properties)
    if candidates is None:
        return 0
    prices = [p.price for p in candidates if p.price > 0]
    if not prices:
        return 0
    return math.floor(sum(prices) / len(prices) + 0.5)


def property_types(properties: Iterable[Property] | None) -> list[str]:
    """Distinct property types in first-seen order."""
    candidates = as_catalog(properties)
    if candidates is None:
        return []
    return list(dict.fromkeys(p.property_type for p in candidates if p.property_type))


def format_price(price: object, currency: str = "£") -> str:
    """Format a price with a currency symbol and thousands separators.

    >>> format_price(1234567)
    '£1,234,567'
    >>> format_price(None)
    '£0'
    """
    if isinstance(price, bool) or not isinstance(price, Real):
        return f"{currency}0"
    value = float(price)
    if not math.isfinite(value):
        return f"{currency}0"
    if value.is_integer():
        return f"{currency}{int(value):,}"
    return f"{currency}{value:,.2f}"
