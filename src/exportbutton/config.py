"""
Consolidated configuration system for exportbutton.

Two layers live here:

* ``AppConfig`` - process-level settings (timeouts, file locations) with
  environment variable support, in the same pydantic-settings style as the
  rest of the tooling.
* ``ExportSettings`` - the user's export preferences, read from the flat
  string settings store at the start of every export action.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from .core.constants import (
    AUDIO_PRESET_KEY,
    DEFAULT_FOLDER_DEPTH,
    DEFAULT_FOLDER_NAME,
    DEFAULT_NAMING_PATTERN,
    DIRECT_EXPORT_KEY,
    DOWNLOAD_ENABLED_KEY,
    FIXED_FOLDER_KEY,
    FOLDER_DEPTH_KEY,
    FOLDER_NAME_KEY,
    NAMING_PATTERN_KEY,
    REMOTE_CALL_TIMEOUT_SEC,
    SELECTION_QUERY_TIMEOUT_SEC,
    USE_IN_OUT_KEY,
    VIDEO_PRESET_KEY,
)
from .settings.store import SettingsStore

# =============================================================================
# TIMEOUT SETTINGS
# =============================================================================

class TimeoutSettings(BaseModel):
    """Timeouts applied to host calls."""

    selection_query_sec: Annotated[float, Field(
        gt=0.0,
        description="Seconds to wait for the project panel selection before falling back to the active sequence"
    )] = SELECTION_QUERY_TIMEOUT_SEC

    remote_call_sec: Annotated[float | None, Field(
        description="Seconds to wait for any other host call; None waits forever"
    )] = REMOTE_CALL_TIMEOUT_SEC


# =============================================================================
# PATH SETTINGS
# =============================================================================

class PathSettings(BaseModel):
    """Where the bridge keeps its own files."""

    settings_file: Annotated[Path, Field(
        description="Flat JSON store holding the user's export settings"
    )] = Path.home() / ".exportbutton" / "settings.json"

    log_file: Annotated[Path | None, Field(
        description="Optional file the debug log is appended to"
    )] = None


# =============================================================================
# USER EXPORT SETTINGS
# =============================================================================

def parse_flag(value: str | None) -> bool:
    """Parse a persisted "true"/"false" flag."""
    return (value or "").strip().lower() == "true"


class ExportSettings(BaseModel):
    """Snapshot of the user's export preferences."""

    video_preset: str = ""
    audio_preset: str = ""
    naming_pattern: str = DEFAULT_NAMING_PATTERN
    folder_name: str = DEFAULT_FOLDER_NAME
    folder_depth: Annotated[int, Field(ge=0)] = DEFAULT_FOLDER_DEPTH
    fixed_folder: str = ""
    download_enabled: bool = False
    use_in_out: bool = False
    direct_export: bool = False

    class Config:
        frozen = True

    @field_validator("naming_pattern")
    @classmethod
    def default_blank_pattern(cls, v):
        """A blank pattern would produce empty filenames."""
        return v if v.strip() else DEFAULT_NAMING_PATTERN

    @field_validator("folder_name")
    @classmethod
    def default_blank_folder(cls, v):
        return v.strip() or DEFAULT_FOLDER_NAME

    @classmethod
    def from_store(cls, store: SettingsStore) -> ExportSettings:
        """Read every export setting from a flat string store.

        Raises:
            ValueError: If the stored folder depth is not a non-negative integer.
        """
        raw_depth = store.get(FOLDER_DEPTH_KEY, "").strip()
        try:
            depth = int(raw_depth) if raw_depth else DEFAULT_FOLDER_DEPTH
        except ValueError as ex:
            raise ValueError(f"Invalid folder depth in settings: {raw_depth!r}") from ex

        return cls(
            video_preset=store.get(VIDEO_PRESET_KEY, "").strip(),
            audio_preset=store.get(AUDIO_PRESET_KEY, "").strip(),
            naming_pattern=store.get(NAMING_PATTERN_KEY, DEFAULT_NAMING_PATTERN),
            folder_name=store.get(FOLDER_NAME_KEY, DEFAULT_FOLDER_NAME),
            folder_depth=depth,
            fixed_folder=store.get(FIXED_FOLDER_KEY, "").strip(),
            download_enabled=parse_flag(store.get(DOWNLOAD_ENABLED_KEY)),
            use_in_out=parse_flag(store.get(USE_IN_OUT_KEY)),
            direct_export=parse_flag(store.get(DIRECT_EXPORT_KEY)),
        )


# =============================================================================
# MAIN APPLICATION CONFIGURATION
# =============================================================================

class AppConfig(BaseSettings):
    """
    Main application configuration with environment variable support.

    All settings can be overridden via environment variables with EXPORTBUTTON_ prefix.
    Example: EXPORTBUTTON_TIMEOUTS__SELECTION_QUERY_SEC=5
    """

    timeouts: TimeoutSettings = TimeoutSettings()
    paths: PathSettings = PathSettings()

    class Config:
        env_prefix = "EXPORTBUTTON_"
        env_nested_delimiter = "__"
        case_sensitive = False


def create_config_from_env() -> AppConfig:
    """Create a new configuration instance from environment variables."""
    return AppConfig()
