"""Configuration package."""

from bill_splitter.config.settings import (
    DEFAULT_ITEMS_TEXT,
    DEFAULT_PARTICIPANTS_TEXT,
    SplitterSettings,
    get_settings,
)

__all__ = [
    "DEFAULT_ITEMS_TEXT",
    "DEFAULT_PARTICIPANTS_TEXT",
    "SplitterSettings",
    "get_settings",
]
