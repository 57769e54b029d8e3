"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    off_base_url: str = "https://world.openfoodfacts.org"
    search_ttl_seconds: int = 3600
    shopping_unit: str = "g"
    as_needed_label: str = "as needed"
    quantity_decimals: int = 1
    ingredient_decimals: int = 2
    totals_decimals: int = 0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_fdc_api_key(raw: str | None) -> str | None:
    """Return the FDC key, treating blanks and the sample placeholder as unset."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "YOUR_USDA_API_KEY"}:
        return None
    return cleaned
