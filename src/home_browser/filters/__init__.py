"""Search filtering and sorting over the in-memory catalog."""

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from home_browser.filters.criteria import (  # noqa: F401
        CriteriaFilter,
        filter_properties,
        parse_criteria,
        search_by_keyword,
        validate_criteria,
    )
    from home_browser.filters.sorting import (  # noqa: F401
        average_price,
        format_price,
        property_types,
        sort_properties,
    )

__all__ = [
    "average_price",
    "CriteriaFilter",
    "filter_properties",
    "format_price",
    "parse_criteria",
    "property_types",
    "search_by_keyword",
    "sort_properties",
    "validate_criteria",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "average_price": (".sorting", "average_price"),
    "CriteriaFilter": (".criteria", "CriteriaFilter"),
    "filter_properties": (".criteria", "filter_properties"),
    "format_price": (".sorting", "format_price"),
    "parse_criteria": (".criteria", "parse_criteria"),
    "property_types": (".sorting", "property_types"),
    "search_by_keyword": (".criteria", "search_by_keyword"),
    "sort_properties": (".sorting", "sort_properties"),
    "validate_criteria": (".criteria", "validate_criteria"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr = _LAZY_IMPORTS[name]
        mod = importlib.import_module(module_path, __name__)
        val = getattr(mod, attr)
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
