"""
API configuration settings.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Personal Library API"
    api_version: str = "1.0.0"
    api_description: str = "A small REST API for managing books and their comments"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Database Settings
    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("MONGODB_URL", "DB"),
    )
    mongodb_database: str = "library"
    mongodb_collection: str = "books"

    # Status code for plain-text client errors (missing field, unknown book)
    client_error_status: int = 400

    # CORS Settings
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator("client_error_status")
    @classmethod
    def validate_client_error_status(cls, v):
        """Only the two known contracts are supported."""
        if v not in (200, 400):
            raise ValueError("client_error_status must be 200 or 400")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()


# Global config instance
config = APIConfig()
