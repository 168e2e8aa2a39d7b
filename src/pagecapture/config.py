"""
Configuration for pagecapture.

Uses Pydantic Settings for type-safe environment variable loading.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagecapture.exceptions import ConfigurationError
from pagecapture.selectors import DEFAULT_SELECTORS, SelectorTable, load_selector_table

load_dotenv()


class ExtractionSettings(BaseSettings):
    """Extraction engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="PAGECAPTURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Generic page output
    max_body_length: int = Field(default=5000, ge=1, description="Maximum generic body length before truncation")
    truncation_marker: str = Field(default="...", min_length=1, description="Appended to truncated bodies")
    generic_fallback_min_length: int = Field(
        default=100, ge=0, description="Below this the whole page body is used instead"
    )

    # Video descriptions
    description_target_length: int = Field(
        default=100, ge=0, description="Description length at which lower-trust sources are skipped"
    )
    identity_poll_attempts: int = Field(default=10, ge=0, le=100, description="Identity stabilisation polls")
    identity_poll_interval: float = Field(default=0.2, ge=0, le=5, description="Seconds between identity polls")
    settle_delay: float = Field(default=0.5, ge=0, le=10, description="Seconds to wait before polling a watch page")
    expand_wait: float = Field(default=0.5, ge=0, le=10, description="Seconds to wait after a show-more click")

    # Responses
    degraded_body_length: int = Field(default=1000, ge=0, description="Raw text kept in a degraded response")
    selection_delimiter: str = Field(default="\n\n---\n\n", description="Separates a selection from the page body")
    task_list_title: str = Field(default="Todo List", description="Title used for untitled task lists")

    # Selector tables
    selectors_path: Path | None = Field(default=None, description="JSON selector table override")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    def load_selectors(self) -> SelectorTable:
        """Selector table in effect: the override file if configured, else the defaults."""
        if self.selectors_path:
            return load_selector_table(self.selectors_path)
        return DEFAULT_SELECTORS


def load_settings(**overrides) -> ExtractionSettings:
    """
    Build settings from the environment plus explicit overrides.

    Returns:
        Validated ExtractionSettings.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    try:
        return ExtractionSettings(**overrides)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid pagecapture settings: {e}") from e


@lru_cache
def get_settings() -> ExtractionSettings:
    """Get cached settings instance."""
    return load_settings()
