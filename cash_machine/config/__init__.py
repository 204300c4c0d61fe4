"""Configuration package."""

from cash_machine.config.settings import (
    DispenserSettings,
    LoggingSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DispenserSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
