"""
Windy Observations Configuration

Pydantic models for every configurable part of the service, loaded from a
YAML file and overridable from the environment.

Resolution order (later wins):
    1. Model defaults
    2. YAML file (explicit path, or the first discovered config path)
    3. Environment variables ``WINDY_<SECTION>_<FIELD>``
       e.g. ``WINDY_EXCLUSION_EXCLUDE_LIST="ABC, XYZ"``

Usage:
    from windy_observations.config import load_config

    config = load_config()                 # auto-discover
    config = load_config("/etc/windy.yaml")
    excluded = config.exclusion.stations
"""

import os
import re
from pathlib import Path
from typing import Any, Literal, Optional, get_origin

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from windy_observations.constants import (
    POLL_INTERVAL_SEC,
    REQUEST_TIMEOUT_SEC,
    SIGNALK_CONTEXT,
    SIGNALK_URL,
    USER_AGENT,
    WARMUP_DELAY_SEC,
    WINDY_INFO_URL,
    WINDY_STATIONS_URL,
    ZOOM_LEVEL,
)
from windy_observations.exceptions import ConfigurationError

ENV_PREFIX = "WINDY_"

# Original plugin option format: "ABC, XYZ,QRS"
_EXCLUDE_SPLIT = re.compile(r"\s*,\s*")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Section Models
# =============================================================================

class WindyConfig(BaseModel):
    """Windy station provider settings."""

    stations_url: str = WINDY_STATIONS_URL
    info_url: str = WINDY_INFO_URL
    user_agent: str = USER_AGENT
    zoom: int = Field(default=ZOOM_LEVEL, ge=0, le=18)
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SEC, ge=1.0, le=120.0)

    @field_validator("stations_url", "info_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"URL must be http(s): {value}")
        return value.rstrip("/")


class ScheduleConfig(BaseModel):
    """Polling cadence."""

    warmup_delay: float = Field(default=WARMUP_DELAY_SEC, ge=0.0, le=300.0)
    poll_interval: float = Field(default=POLL_INTERVAL_SEC, ge=60.0, le=86400.0)


class ExclusionConfig(BaseModel):
    """Stations that are never fetched."""

    exclude_list: str = ""
    case_sensitive: bool = False

    @property
    def stations(self) -> frozenset[str]:
        """Parsed exclusion list, empty entries dropped."""
        return parse_exclude_list(self.exclude_list)


class SignalKConfig(BaseModel):
    """Signal K server connection."""

    url: str = SIGNALK_URL
    context: str = SIGNALK_CONTEXT
    timeout: float = Field(default=10.0, ge=1.0, le=120.0)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Signal K URL must be http(s): {value}")
        return value.rstrip("/")


class WindyObservationsConfig(BaseModel):
    """Master configuration."""

    windy: WindyConfig = Field(default_factory=WindyConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    exclusion: ExclusionConfig = Field(default_factory=ExclusionConfig)
    signalk: SignalKConfig = Field(default_factory=SignalKConfig)
    log_level: LogLevel = "INFO"
    log_file: Optional[str] = None
    # Per-service overrides, e.g. {"windy": "DEBUG", "signalk": "WARNING"}
    service_log_levels: dict[str, LogLevel] = Field(default_factory=dict)


# =============================================================================
# Helpers
# =============================================================================

def parse_exclude_list(value: Optional[str]) -> frozenset[str]:
    """Split a comma separated station list into a set of identifiers."""
    if not value:
        return frozenset()
    return frozenset(item for item in _EXCLUDE_SPLIT.split(value.strip()) if item)


def get_config_paths() -> list[Path]:
    """Candidate config file locations, in priority order."""
    return [
        Path("./windy-observations.yaml"),
        Path.home() / ".windy-observations" / "config.yaml",
        Path("/etc/windy-observations/config.yaml"),
    ]


def _section_models() -> dict[str, type[BaseModel]]:
    """Top-level fields that are nested section models."""
    return {
        name: field.annotation
        for name, field in WindyObservationsConfig.model_fields.items()
        if get_origin(field.annotation) is None
        and isinstance(field.annotation, type)
        and issubclass(field.annotation, BaseModel)
    }


def _normalize_sections(data: dict[str, Any], config_file: Optional[Path] = None) -> dict[str, Any]:
    """Treat an empty section (``exclusion:`` with no keys) as defaults.

    Raises:
        ConfigurationError: A section is present but is not a mapping
    """
    for section in _section_models():
        if section not in data:
            continue
        if data[section] is None:
            data[section] = {}
        elif not isinstance(data[section], dict):
            raise ConfigurationError(
                f"Configuration section '{section}' must be a mapping",
                config_key=section,
                config_file=str(config_file) if config_file else None,
            )
    return data


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``WINDY_<SECTION>_<FIELD>`` environment variables onto data.

    Values are passed through as strings; pydantic coerces them to the
    field types. Top-level fields use ``WINDY_<FIELD>``. Sections must
    already be normalized.
    """
    sections = _section_models()

    for section, model in sections.items():
        for field_name in model.model_fields:
            env_name = f"{ENV_PREFIX}{section}_{field_name}".upper()
            if env_name in os.environ:
                data.setdefault(section, {})
                data[section][field_name] = os.environ[env_name]

    for field_name in WindyObservationsConfig.model_fields:
        if field_name in sections:
            continue
        env_name = f"{ENV_PREFIX}{field_name}".upper()
        if env_name in os.environ:
            data[field_name] = os.environ[env_name]

    return data


def load_config(path: Optional[str | Path] = None) -> WindyObservationsConfig:
    """Load configuration from YAML and the environment.

    Args:
        path: Explicit config file. If None, the first existing path from
              get_config_paths() is used; with none present only defaults
              and environment overrides apply.

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: Explicit file missing, invalid YAML, a section
            that is not a mapping, or values failing validation
    """
    data: dict[str, Any] = {}
    config_file: Optional[Path] = None

    if path is not None:
        config_file = Path(path)
        if not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}",
                config_file=str(config_file),
            )
    else:
        config_file = next((p for p in get_config_paths() if p.exists()), None)

    if config_file is not None:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}",
                config_file=str(config_file),
            ) from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                config_file=str(config_file),
            )
        data = loaded or {}

    data = _apply_env_overrides(_normalize_sections(data, config_file))

    try:
        return WindyObservationsConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            config_file=str(config_file) if config_file else None,
        ) from e
