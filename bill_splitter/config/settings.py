"""
Configuration Management for Bill Splitter

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Default bill text, reset baselines and parsing policies live in one place
so the front end and the tests agree on them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ITEMS_TEXT = (
    "ribsoup 99\n"
    "beancurd 13.8\n"
    "egg 3\n"
    "choysim 9.5\n"
    "youtiao 12\n"
    "rice 10.8\n"
    "barley 5.1\n"
    "luohanguo 5\n"
    "lime 2.5"
)

DEFAULT_PARTICIPANTS_TEXT = (
    "Fanwei\n"
    "Ronald\n"
    "Poh Feng\n"
    "Shi Zheng\n"
    "Kiefer\n"
    "Chun Heng\n"
    "Jacky\n"
    "Eugene\n"
    "Malcolm"
)


class SplitterSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables (SPLITTER_*) and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPLITTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Initial form contents
    default_items_text: str = Field(
        default=DEFAULT_ITEMS_TEXT,
        description="Item list shown when the form first opens"
    )
    default_participants_text: str = Field(
        default=DEFAULT_PARTICIPANTS_TEXT,
        description="Participant list shown when the form first opens"
    )
    default_gst_rate: float = Field(
        default=0.0,
        description="GST percentage shown when the form first opens"
    )
    default_service_tax_rate: float = Field(
        default=0.0,
        description="Service tax percentage shown when the form first opens"
    )

    # Reset baseline
    reset_items_text: str = Field(
        default="",
        description="Item list restored by the reset action"
    )
    reset_participants_text: str = Field(
        default="",
        description="Participant list restored by the reset action"
    )
    reset_gst_rate: float = Field(
        default=9.0,
        description="GST percentage restored by the reset action"
    )
    reset_service_tax_rate: float = Field(
        default=10.0,
        description="Service tax percentage restored by the reset action"
    )

    # Parsing and assignment policies
    keep_blank_participants: bool = Field(
        default=False,
        description="Treat blank lines in the participant list as participants"
    )
    preserve_overrides: bool = Field(
        default=True,
        description="Keep manual item assignments when the participant list changes"
    )

    # Display
    display_decimal_places: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places used for displayed amounts"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown next to amounts in the front end"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard level names."""
        level = v.strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


@lru_cache()
def get_settings() -> SplitterSettings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return SplitterSettings()
