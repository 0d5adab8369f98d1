"""Property catalog browser: search filters and persisted favourites."""

__version__ = "0.1.0"
