"""Pydantic models for catalog properties and search criteria."""

import math
from datetime import date
from enum import StrEnum
from typing import Final, TypeAlias

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from home_browser.utils.dates import month_name, parse_iso_date, parse_month
from home_browser.utils.sanitize import sanitize_input

PropertyId: TypeAlias = int | str

ANY_PROPERTY_TYPE: Final = "Any"


class PriceUnit(StrEnum):
    """Unit that catalog prices are expressed in."""

    UNITS = "units"
    MILLIONS = "millions"

    @property
    def multiplier(self) -> int:
        """Factor converting a price in this unit to currency units."""
        return 1_000_000 if self is PriceUnit.MILLIONS else 1


class SortKey(StrEnum):
    """Fields a result list can be sorted by."""

    PRICE = "price"
    BEDROOMS = "bedrooms"
    DATE = "date"


class SortDirection(StrEnum):
    """Sort order."""

    ASC = "asc"
    DESC = "desc"


def validate_property_id(value: object) -> PropertyId:
    """Check that a value can serve as a property identifier.

    Identifiers are non-empty strings or integers and are compared by value,
    so ``1`` and ``"1"`` are different identifiers.

    Raises:
        ValueError: For booleans, blank strings and any other type.
    """
    if isinstance(value, bool):
        raise ValueError("property id must be a string or integer, not a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ValueError(f"invalid property id: {value!r}")


class Property(BaseModel):
    """A property listing in the canonical catalog shape."""

    model_config = ConfigDict(frozen=True)

    id: PropertyId = Field(description="Unique, stable identifier within the catalog")
    property_type: str = Field(description='Category such as "House" or "Flat"')
    price: int = Field(ge=0, description="Asking price in currency units")
    bedrooms: int = Field(ge=0)
    location: str = Field(description="Free-text location, usually including the postcode")
    added: date = Field(description="Date the listing was added")
    title: str = ""
    description: str = ""
    tenure: str | None = None
    images: tuple[str, ...] = ()
    available: bool = True
    url: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v: object) -> PropertyId:
        return validate_property_id(v)

    @property
    def added_month(self) -> str:
        """Month name of the added date, e.g. "December"."""
        return month_name(self.added.month)

    @property
    def added_year(self) -> int:
        return self.added.year

    @property
    def display_title(self) -> str:
        """Title for listings, falling back to "<n> bed <type>"."""
        return self.title or f"{self.bedrooms} bed {self.property_type}"


def _parse_number(value: object, *, integer: bool) -> int | float | None:
    """Coerce raw user input into a number.

    Blank input means "no constraint" and gives None. Thousands separators and a
    leading currency symbol are tolerated ("£450,000").

    Raises:
        ValueError: If the input is present but not a usable number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, str):
        text = value.strip().lstrip("£$€").replace(",", "").replace("_", "")
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                raise ValueError(f"{value.strip()!r} is not a number") from None
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("expected a finite number")
        if value.is_integer():
            return int(value)
        if integer:
            raise ValueError(f"{value} is not a whole number")
        return value
    if isinstance(value, int):
        return value
    raise ValueError("expected a number")


def _clean_text(value: object) -> str | None:
    if value is None:
        return None
    text = sanitize_input(str(value))
    return text or None


class FilterCriteria(BaseModel):
    """Search filter values, every field optional.

    Unset fields (None, "" or whitespace) place no constraint on their dimension.
    Field names are accepted in snake_case or in the camelCase used by form
    payloads (``minPrice``, ``addedMonth``...). Validators only coerce types;
    range checks happen in :func:`home_browser.filters.criteria.validate_criteria`
    so that an inverted range is reported rather than rejected at construction.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    property_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("property_type", "propertyType", "type", "category"),
    )
    min_price: int | float | None = None
    max_price: int | float | None = None
    min_bedrooms: int | None = None
    max_bedrooms: int | None = None
    added_month: int | None = Field(default=None, description="Month number 1-12")
    added_year: int | None = None
    added_after: date | None = None
    added_before: date | None = None
    location: str | None = Field(
        default=None,
        validation_alias=AliasChoices("location", "postcode", "locationSubstring"),
    )
    keyword: str | None = None
    available: bool | None = None

    @field_validator("property_type", mode="before")
    @classmethod
    def normalize_property_type(cls, v: object) -> str | None:
        """Treat blank and the "Any" sentinel as unconstrained."""
        text = _clean_text(v)
        if text is None or text.lower() == ANY_PROPERTY_TYPE.lower():
            return None
        return text

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def coerce_price(cls, v: object) -> int | float | None:
        return _parse_number(v, integer=False)

    @field_validator("min_bedrooms", "max_bedrooms", "added_year", mode="before")
    @classmethod
    def coerce_whole_number(cls, v: object) -> int | None:
        parsed = _parse_number(v, integer=True)
        return None if parsed is None else int(parsed)

    @field_validator("added_month", mode="before")
    @classmethod
    def coerce_month(cls, v: object) -> int | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        month = parse_month(v)
        if month is None:
            raise ValueError(f"{v!r} is not a month")
        return month

    @field_validator("added_after", "added_before", mode="before")
    @classmethod
    def coerce_date(cls, v: object) -> date | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        parsed = parse_iso_date(v)
        if parsed is None:
            raise ValueError(f"{v!r} is not a date (expected YYYY-MM-DD)")
        return parsed

    @field_validator("location", "keyword", mode="before")
    @classmethod
    def clean_text(cls, v: object) -> str | None:
        return _clean_text(v)

    @field_validator("available", mode="before")
    @classmethod
    def coerce_available(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @property
    def active_dimensions(self) -> tuple[str, ...]:
        """Names of the dimensions this criteria constrains."""
        active = {
            "property_type": self.property_type is not None,
            "price": self.min_price is not None or self.max_price is not None,
            "bedrooms": self.min_bedrooms is not None or self.max_bedrooms is not None,
            "added_month_year": self.added_month is not None or self.added_year is not None,
            "added_range": self.added_after is not None or self.added_before is not None,
            "location": self.location is not None,
            "keyword": self.keyword is not None,
            "available": self.available is not None,
        }
        return tuple(name for name, on in active.items() if on)

    @property
    def is_empty(self) -> bool:
        return not self.active_dimensions
