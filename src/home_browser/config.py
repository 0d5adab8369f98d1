"""Application configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from home_browser.models import PriceUnit


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HOME_BROWSER_",
        extra="ignore",
    )

    # Catalog
    catalog_source: str = Field(
        default="data/properties.json",
        description="Path or http(s) URL of the properties JSON document",
    )
    price_unit: PriceUnit = Field(
        default=PriceUnit.UNITS,
        description="Unit catalog prices are quoted in: units or millions",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout in seconds when the catalog is fetched over HTTP",
    )

    # Favourites
    data_dir: str = Field(
        default="data",
        description="Directory holding persisted favourites",
    )
    favourites_key: str = Field(default="favourites", min_length=1)

    # Display
    currency_symbol: str = Field(default="£", max_length=3)

    # Logging
    log_json: bool = Field(default=False, description="Emit JSON log lines")
