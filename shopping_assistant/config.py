"""
Configuration management for the shopping assistant.
Loads settings from environment variables with validation.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = Path(__file__).parent.parent / "data"

    # Product catalog
    catalog_provider: Literal["dummyjson"] = Field(
        default="dummyjson", description="Catalog provider to use"
    )
    catalog_base_url: str = Field(
        default="https://dummyjson.com", description="Product catalog API base URL"
    )
    catalog_timeout: float = Field(
        default=10.0, description="Catalog request timeout in seconds"
    )
    catalog_sample_size: int = Field(
        default=30, description="Products fetched for popular/top-rated samples"
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL",
    )

    @property
    def db_url(self) -> str:
        """Get database URL with absolute path."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'assistant.db'}"

    # Suggestion engine
    discount_threshold: float = Field(
        default=10.0, description="Minimum discount percentage for deal suggestions"
    )
    max_message_length: int = Field(
        default=4000, description="Longest accepted user message"
    )

    # Debug
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def guidelines_file(self) -> Path:
        """Default guideline seed file."""
        return self.data_dir / "guidelines.json"


# Global settings instance
settings = Settings()
