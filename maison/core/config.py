"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (draft slot storage)
    database_url: str = "sqlite:///./maison.db"

    # Catalog
    catalog_file: Optional[str] = None

    # Drafts
    draft_key: str = "order_draft"

    # Extraction
    quantity_window: int = 25

    # Bakery
    bakery_name: str = "Maison du Goût"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
