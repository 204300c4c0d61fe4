"""
Configuration Management for the Cash Machine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The note inventory itself trusts whatever mapping it is given, so this is
the layer where operator-supplied denominations and counts are parsed.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_int_list(raw: str) -> list[int]:
    return [int(token.strip()) for token in raw.split(",") if token.strip()]


def _parse_note_pairs(raw: str) -> dict[int, int]:
    notes: dict[int, int] = {}
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        denomination, sep, count = token.partition(":")
        if not sep:
            raise ValueError(
                f"Invalid note entry {token!r}: expected 'denomination:count'"
            )
        notes[int(denomination.strip())] = int(count.strip())
    return notes


class DispenserSettings(BaseSettings):
    """Note dispenser configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CASH_MACHINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    machine_id: str = Field(
        default="cash-machine-1",
        min_length=1,
        description="Identifier attached to every audit event of this machine"
    )
    denominations: str = Field(
        default="1,5,10,20,50,100",
        description="Comma-separated list of note denominations held"
    )
    initial_notes: str = Field(
        default="",
        description="Initial stock as 'denomination:count' pairs, e.g. '100:10,50:15'"
    )
    strict_dispensing: bool = Field(
        default=False,
        description="Refuse to dispense notes the inventory does not physically hold"
    )

    @field_validator('denominations')
    @classmethod
    def validate_denominations(cls, v: str) -> str:
        """Denominations must parse as integers; positivity is checked by the validator."""
        try:
            parsed = _parse_int_list(v)
        except ValueError:
            raise ValueError(f"Denominations must be integers: {v!r}")
        if not parsed:
            raise ValueError("At least one denomination is required")
        return v

    @field_validator('initial_notes')
    @classmethod
    def validate_initial_notes(cls, v: str) -> str:
        try:
            _parse_note_pairs(v)
        except ValueError as e:
            raise ValueError(f"Invalid initial_notes {v!r}: {e}")
        return v

    @property
    def denominations_list(self) -> list[int]:
        """Get denominations as a list, highest first."""
        return sorted(set(_parse_int_list(self.denominations)), reverse=True)

    @property
    def initial_notes_map(self) -> dict[int, int]:
        """
        Get the initial stock as a mapping.

        Every configured denomination is present; those missing from
        initial_notes start at zero. Denominations that appear only in
        initial_notes are kept so the validator can report them.
        """
        notes = {denomination: 0 for denomination in self.denominations_list}
        notes.update(_parse_note_pairs(self.initial_notes))
        return notes


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CASH_MACHINE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for emitted log lines"
    )
    renderer: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="structlog renderer: json for machines, console for humans"
    )

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Loaded lazily so one broken section does not hide the others

    @property
    def dispenser(self) -> DispenserSettings:
        return DispenserSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    '<setting_name>_error' entry for each section that failed.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("dispenser", "logging"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
