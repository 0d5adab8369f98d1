"""Command-line front end for browsing the catalog and managing favourites."""

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from home_browser.config import Settings
from home_browser.errors import InvalidCriteria, InvalidFavourite
from home_browser.favourites import FavouritesStore
from home_browser.filters import format_price, property_types
from home_browser.logging import configure_logging, get_logger
from home_browser.models import Property, PropertyId, SortDirection, SortKey
from home_browser.session import BrowserSession

logger = get_logger(__name__)

_FAVOURITE_MARK = "*"


def format_listing(prop: Property, *, currency: str, favourite: bool) -> str:
    """One-line summary used by list views."""
    mark = _FAVOURITE_MARK if favourite else " "
    return (
        f"{mark} [{prop.id}] {prop.display_title} | {prop.property_type} | "
        f"{format_price(prop.price, currency)} | {prop.bedrooms} bed | {prop.location} | "
        f"added {prop.added_month} {prop.added_year}"
    )


def format_details(prop: Property, *, currency: str, favourite: bool) -> str:
    """Multi-line detail view for a single property."""
    lines = [
        prop.display_title,
        f"  Id:        {prop.id}",
        f"  Type:      {prop.property_type}",
        f"  Price:     {format_price(prop.price, currency)}",
        f"  Bedrooms:  {prop.bedrooms}",
        f"  Location:  {prop.location}",
        f"  Added:     {prop.added.day} {prop.added_month} {prop.added_year}",
        f"  Available: {'yes' if prop.available else 'no'}",
        f"  Favourite: {'yes' if favourite else 'no'}",
    ]
    if prop.tenure:
        lines.append(f"  Tenure:    {prop.tenure}")
    if prop.description:
        lines.extend(["", prop.description])
    if prop.images:
        lines.extend(["", "Images:", *(f"  {image}" for image in prop.images)])
    return "\n".join(lines)


def _print_listings(session: BrowserSession, properties: Sequence[Property], currency: str) -> None:
    for prop in properties:
        print(format_listing(prop, currency=currency, favourite=session.is_favourite(prop)))
    print(f"{len(properties)} of {len(session.catalog)} properties")


def _warn_if_unsaved(session: BrowserSession) -> None:
    if session.favourites.last_error is not None:
        print(
            f"Warning: {session.favourites.last_error}. "
            "Changes will only last for this session.",
            file=sys.stderr,
        )


def cmd_search(session: BrowserSession, args: argparse.Namespace, settings: Settings) -> int:
    form = {
        "propertyType": args.type,
        "minPrice": args.min_price,
        "maxPrice": args.max_price,
        "minBedrooms": args.min_bedrooms,
        "maxBedrooms": args.max_bedrooms,
        "addedMonth": args.added_month,
        "addedYear": args.added_year,
        "addedAfter": args.added_after,
        "addedBefore": args.added_before,
        "location": args.location,
        "keyword": args.keyword,
        "available": args.available,
    }
    try:
        session.search.apply(form)
    except InvalidCriteria as e:
        for problem in e.problems:
            print(f"Error: {problem}", file=sys.stderr)
        return 2
    results = session.search.sort(args.sort, args.order) if args.sort else session.results
    _print_listings(session, results, settings.currency_symbol)
    return 0


def cmd_show(session: BrowserSession, args: argparse.Namespace, settings: Settings) -> int:
    prop = session.find(args.id)
    if prop is None:
        print(f"Error: no property with id {args.id}", file=sys.stderr)
        return 1
    print(format_details(prop, currency=settings.currency_symbol, favourite=session.is_favourite(prop)))
    return 0


def cmd_types(session: BrowserSession, args: argparse.Namespace, settings: Settings) -> int:
    for name in property_types(session.catalog):
        print(name)
    return 0


def _stored_id(store: FavouritesStore, raw_id: str) -> PropertyId:
    """Match a typed id against stored favourites whose property left the catalog."""
    text = raw_id.strip()
    if text.lstrip("-").isdigit() and not store.contains(text) and store.contains(int(text)):
        return int(text)
    return text


def cmd_favourites(session: BrowserSession, args: argparse.Namespace, settings: Settings) -> int:
    store = session.favourites
    action = args.action

    if action == "list":
        _print_listings(session, session.favourite_properties(), settings.currency_symbol)
        return 0
    if action == "clear":
        store.clear()
        print("Favourites cleared")
        _warn_if_unsaved(session)
        return 0
    if action == "drop":
        try:
            store.add_dropped(args.payload)
        except InvalidFavourite as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Favourites: {len(store)}")
        _warn_if_unsaved(session)
        return 0

    prop = session.find(args.id)
    if prop is None and action != "remove":
        print(f"Error: no property with id {args.id}", file=sys.stderr)
        return 1
    property_id = prop.id if prop is not None else _stored_id(store, args.id)

    if action == "add":
        store.add(property_id)
    elif action == "remove":
        store.remove(property_id)
    else:
        store.toggle(property_id)
    state = "in" if store.contains(property_id) else "not in"
    print(f"{property_id} is {state} favourites ({len(store)} total)")
    _warn_if_unsaved(session)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="home-browser",
        description="Browse a property catalog, filter listings and keep favourites",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--catalog", help="Catalog path or URL (overrides settings)")
    parser.add_argument("--data-dir", help="Directory for persisted favourites")

    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Filter the catalog")
    search.add_argument("--type", help='Property type, or "Any"')
    search.add_argument("--min-price")
    search.add_argument("--max-price")
    search.add_argument("--min-bedrooms")
    search.add_argument("--max-bedrooms")
    search.add_argument("--added-month", help="Month name, e.g. December")
    search.add_argument("--added-year")
    search.add_argument("--added-after", help="YYYY-MM-DD, inclusive")
    search.add_argument("--added-before", help="YYYY-MM-DD, inclusive")
    search.add_argument("--location", "--postcode", dest="location", help="Location substring")
    search.add_argument("--keyword", help="Free text over title, description and location")
    search.add_argument("--available", choices=["yes", "no"])
    search.add_argument("--sort", choices=[k.value for k in SortKey])
    search.add_argument(
        "--order", choices=[d.value for d in SortDirection], default=SortDirection.ASC.value
    )
    search.set_defaults(handler=cmd_search)

    show = sub.add_parser("show", help="Show one property")
    show.add_argument("id")
    show.set_defaults(handler=cmd_show)

    types = sub.add_parser("types", help="List property types in the catalog")
    types.set_defaults(handler=cmd_types)

    favourites = sub.add_parser("favourites", help="Manage favourites")
    fav_sub = favourites.add_subparsers(dest="action", required=True)
    fav_sub.add_parser("list")
    fav_sub.add_parser("clear")
    for action in ("add", "remove", "toggle"):
        fav_sub.add_parser(action).add_argument("id")
    fav_sub.add_parser("drop", help="Add from a serialized property record").add_argument(
        "payload"
    )
    favourites.set_defaults(handler=cmd_favourites)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error: Failed to load settings. {e}", file=sys.stderr)
        return 1

    overrides = {}
    if args.catalog:
        overrides["catalog_source"] = args.catalog
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(
        json_output=settings.log_json,
        level=logging.DEBUG if args.debug else logging.WARNING,
    )
    logger.debug("starting_home_browser", command=args.command, catalog=settings.catalog_source)

    with BrowserSession.open(settings) as session:
        return int(args.handler(session, args, settings))


if __name__ == "__main__":
    sys.exit(main())
