"""Property criteria filtering."""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from home_browser.errors import InvalidCriteria
from home_browser.logging import get_logger
from home_browser.models import FilterCriteria, Property
from home_browser.utils.dates import month_name

logger = get_logger(__name__)

CriteriaInput = FilterCriteria | Mapping[str, Any] | None


def parse_criteria(raw: CriteriaInput) -> FilterCriteria:
    """Build FilterCriteria from raw form values.

    Args:
        raw: A FilterCriteria, a mapping of (possibly untrusted) form values, or None.

    Returns:
        The coerced criteria. None gives an unconstrained FilterCriteria.

    Raises:
        InvalidCriteria: If a value cannot be coerced (e.g. "abc" as a price).
    """
    if raw is None:
        return FilterCriteria()
    if isinstance(raw, FilterCriteria):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidCriteria([f"criteria must be a mapping, got {type(raw).__name__}"])
    try:
        return FilterCriteria.model_validate(dict(raw))
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"]) or "criteria"
            msg = err["msg"].removeprefix("Value error, ")
            problems.append(f"{field}: {msg}")
        raise InvalidCriteria(problems) from e


def validate_criteria(criteria: FilterCriteria) -> None:
    """Check criteria before any matching is attempted.

    Raises:
        InvalidCriteria: Listing every problem found: negative numbers, min above max
            for price or bedrooms, or a date range whose start is after its end.
    """
    problems: list[str] = []

    for field in ("min_price", "max_price", "min_bedrooms", "max_bedrooms", "added_year"):
        value = getattr(criteria, field)
        if value is not None and value < 0:
            problems.append(f"{field.replace('_', ' ').capitalize()} cannot be negative.")

    if (
        criteria.min_price is not None
        and criteria.max_price is not None
        and criteria.min_price > criteria.max_price
    ):
        problems.append("Min Price cannot be greater than Max Price.")

    if (
        criteria.min_bedrooms is not None
        and criteria.max_bedrooms is not None
        and criteria.min_bedrooms > criteria.max_bedrooms
    ):
        problems.append("Min Bedrooms cannot be greater than Max Bedrooms.")

    if (
        criteria.added_after is not None
        and criteria.added_before is not None
        and criteria.added_after > criteria.added_before
    ):
        problems.append("Added-after date cannot be later than added-before date.")

    if problems:
        logger.info("criteria_rejected", problems=problems)
        raise InvalidCriteria(problems)


class CriteriaFilter:
    """Filter properties by search criteria.

    Each dimension is checked independently and a property is kept only when
    every active dimension passes. Unset dimensions never exclude anything.
    """

    def __init__(self, criteria: FilterCriteria) -> None:
        """Initialize the criteria filter.

        Args:
            criteria: Already validated search criteria.
        """
        self.criteria = criteria

    def matches_type(self, prop: Property) -> bool:
        if self.criteria.property_type is None:
            return True
        return prop.property_type.casefold() == self.criteria.property_type.casefold()

    def matches_price(self, prop: Property) -> bool:
        c = self.criteria
        return (c.min_price is None or prop.price >= c.min_price) and (
            c.max_price is None or prop.price <= c.max_price
        )

    def matches_bedrooms(self, prop: Property) -> bool:
        c = self.criteria
        return (c.min_bedrooms is None or prop.bedrooms >= c.min_bedrooms) and (
            c.max_bedrooms is None or prop.bedrooms <= c.max_bedrooms
        )

    def matches_added_month_year(self, prop: Property) -> bool:
        """Discrete month/year mode. Either part may be given on its own."""
        c = self.criteria
        if c.added_month is not None and prop.added.month != c.added_month:
            return False
        return c.added_year is None or prop.added.year == c.added_year

    def matches_added_range(self, prop: Property) -> bool:
        """Inclusive date range mode, independent of month/year."""
        c = self.criteria
        if c.added_after is not None and prop.added < c.added_after:
            return False
        return c.added_before is None or prop.added <= c.added_before

    def matches_location(self, prop: Property) -> bool:
        if self.criteria.location is None:
            return True
        return self.criteria.location.casefold() in prop.location.casefold()

    def matches_keyword(self, prop: Property) -> bool:
        if self.criteria.keyword is None:
            return True
        return matches_keyword(prop, self.criteria.keyword)

    def matches_availability(self, prop: Property) -> bool:
        return self.criteria.available is None or prop.available is self.criteria.available

    def matches(self, prop: Property) -> bool:
        """Check whether a property passes every active dimension."""
        return (
            self.matches_type(prop)
            and self.matches_price(prop)
            and self.matches_bedrooms(prop)
            and self.matches_added_month_year(prop)
            and self.matches_added_range(prop)
            and self.matches_location(prop)
            and self.matches_keyword(prop)
            and self.matches_availability(prop)
        )

    def filter_properties(self, properties: Iterable[Property]) -> list[Property]:
        """Filter properties by criteria, keeping catalog order.

        Args:
            properties: Properties to filter.

        Returns:
            A new list with the matching properties.
        """
        candidates = list(properties)
        matching = [p for p in candidates if self.matches(p)]

        c = self.criteria
        logger.info(
            "criteria_filter_complete",
            total_properties=len(candidates),
            matching=len(matching),
            active=list(c.active_dimensions),
            property_type=c.property_type,
            min_price=c.min_price,
            max_price=c.max_price,
            min_bedrooms=c.min_bedrooms,
            max_bedrooms=c.max_bedrooms,
            added_month=month_name(c.added_month) if c.added_month else None,
            added_year=c.added_year,
        )

        return matching


def matches_keyword(prop: Property, keyword: str) -> bool:
    """Case-insensitive keyword search over title, description, location and type."""
    term = keyword.strip().casefold()
    if not term:
        return True
    fields = (prop.title, prop.description, prop.location, prop.property_type)
    return any(term in field.casefold() for field in fields if field)


def as_catalog(catalog: object) -> list[Property] | None:
    """Return the catalog as a list, or None when it is not a usable collection."""
    if catalog is None or isinstance(catalog, (str, bytes, Mapping)):
        return None
    if not isinstance(catalog, Iterable):
        return None
    return list(catalog)


def filter_properties(catalog: object, criteria: CriteriaInput = None) -> list[Property]:
    """Return the catalog entries matching ``criteria``.

    Pure: neither argument is modified. A missing or non-collection catalog
    gives an empty list.

    Raises:
        InvalidCriteria: If the criteria fail coercion or validation. No
            filtering is attempted in that case.
    """
    parsed = parse_criteria(criteria)
    validate_criteria(parsed)

    properties = as_catalog(catalog)
    if properties is None:
        logger.warning("catalog_not_a_collection", catalog_type=type(catalog).__name__)
        return []
    if parsed.is_empty:
        return properties
    return CriteriaFilter(parsed).filter_properties(properties)


def search_by_keyword(properties: object, keyword: object) -> list[Property]:
    """Filter by a free-text keyword. A blank or non-string keyword matches everything."""
    candidates = as_catalog(properties)
    if candidates is None:
        return []
    if not isinstance(keyword, str) or not keyword.strip():
        return candidates
    return [p for p in candidates if matches_keyword(p, keyword)]
