"""Shared pytest fixtures."""

import io
import logging
import os
from collections.abc import Callable
from datetime import date
from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from home_browser.config import Settings
from home_browser.favourites import FavouritesStore, InMemoryStorage
from home_browser.logging import configure_logging
from home_browser.models import Property

# Hypothesis settings profiles for different environments
settings.register_profile("fast", max_examples=25)
settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> None:
    """Send log events to a throwaway buffer so stdout assertions stay clean."""
    configure_logging(level=logging.DEBUG, stream=io.StringIO())


@pytest.fixture(autouse=True)
def _isolate_settings_from_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent a local .env file or HOME_BROWSER_* variables leaking into tests."""
    monkeypatch.setattr(
        Settings,
        "model_config",
        {**Settings.model_config, "env_file": None},
    )
    for name in list(os.environ):
        if name.startswith("HOME_BROWSER_"):
            monkeypatch.delenv(name)


def make_property(**overrides: Any) -> Property:
    """Build a Property with sensible defaults."""
    fields: dict[str, Any] = {
        "id": 1,
        "property_type": "House",
        "price": 450000,
        "bedrooms": 3,
        "location": "BR1 3XY, Bromley",
        "added": date(2024, 12, 1),
    }
    fields.update(overrides)
    return Property(**fields)


@pytest.fixture
def property_factory() -> Callable[..., Property]:
    return make_property


@pytest.fixture
def sample_catalog() -> list[Property]:
    """Five listings across two types, two postcode areas and four months."""
    return [
        make_property(
            id=1,
            property_type="House",
            price=450000,
            bedrooms=3,
            added=date(2024, 12, 3),
            location="BR1 3XY, Bromley",
            title="Family home near the park",
            description="Three bedroom semi with a garden",
        ),
        make_property(
            id=2,
            property_type="Flat",
            price=280000,
            bedrooms=2,
            added=date(2024, 11, 14),
            location="NW1 5AB, Camden",
            title="Modern flat",
            description="Two bedroom flat close to the station",
        ),
        make_property(
            id=3,
            property_type="House",
            price=650000,
            bedrooms=4,
            added=date(2024, 12, 20),
            location="BR6 8CD, Orpington",
            title="Detached house",
            description="Large detached house with driveway",
        ),
        make_property(
            id=4,
            property_type="Flat",
            price=195000,
            bedrooms=1,
            added=date(2024, 10, 2),
            location="NW10 2EF, Willesden",
            title="Studio-style flat",
            description="Compact one bedroom flat",
            available=False,
        ),
        make_property(
            id=5,
            property_type="House",
            price=520000,
            bedrooms=3,
            added=date(2025, 1, 9),
            location="BR2 7GH, Hayes",
            title="Victorian terrace",
            description="Period terrace with original features",
        ),
    ]


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(memory_storage: InMemoryStorage) -> FavouritesStore:
    favourites = FavouritesStore(memory_storage)
    favourites.load()
    return favourites


@pytest.fixture
def structured_record() -> dict[str, Any]:
    """A raw catalog record in the structured schema."""
    return {
        "id": "prop1",
        "type": "House",
        "bedrooms": 3,
        "price": 750000,
        "tenure": "Freehold",
        "description": "Attractive three bedroom semi-detached family home.",
        "location": "Petts Wood Road, Petts Wood, Orpington BR5",
        "picture": "images/prop1pic1small.jpg",
        "url": "properties/prop1.html",
        "added": {"month": "October", "day": 12, "year": 2022},
    }


@pytest.fixture
def flat_record() -> dict[str, Any]:
    """A raw catalog record in the flat schema with the price in millions."""
    return {
        "id": 7,
        "type": "Flat",
        "bedrooms": 2,
        "price": 1.25,
        "location": "Camden, London",
        "postcode": "NW1",
        "dateAdded": "2024-01-15",
        "images": ["a.jpg", "b.jpg"],
        "short": "Bright two bed flat",
    }
