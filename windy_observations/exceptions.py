"""
Windy Observations Custom Exceptions

Provides the domain-specific exception hierarchy for the observation
pipeline. Provider and publishing errors are raised by the client layer and
caught at component boundaries, where they are logged and turned into an
empty result for the current polling cycle.

Exception Hierarchy:
    WindyObservationsError (base)
    ├── ConfigurationError
    ├── InvalidPositionError
    ├── ProviderError
    │   ├── DirectoryFetchError
    │   └── StationFetchError
    └── PublishError
"""

from typing import Any, Optional


class WindyObservationsError(Exception):
    """Base exception for all Windy Observations errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional error context
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(WindyObservationsError):
    """Error in configuration file or settings.

    Raised when the configuration file is missing or unreadable, or when
    validation of the loaded values fails.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


# =============================================================================
# Position Errors
# =============================================================================

class InvalidPositionError(WindyObservationsError, ValueError):
    """Position cannot be mapped onto a map tile.

    Raised for non-finite coordinates or a negative zoom level.
    """

    def __init__(
        self,
        message: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        zoom: Optional[int] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if latitude is not None:
            details["latitude"] = latitude
        if longitude is not None:
            details["longitude"] = longitude
        if zoom is not None:
            details["zoom"] = zoom
        super().__init__(message, details)
        self.latitude = latitude
        self.longitude = longitude
        self.zoom = zoom


# =============================================================================
# Provider Errors
# =============================================================================

class ProviderError(WindyObservationsError):
    """Remote provider request failed.

    Covers transport failures, non-success status codes and payloads that
    cannot be decoded.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if url:
            details["url"] = url
        if status is not None:
            details["status"] = status
        super().__init__(message, details)
        self.url = url
        self.status = status


class DirectoryFetchError(ProviderError):
    """Station directory for a tile could not be retrieved or decoded."""
    pass


class StationFetchError(ProviderError):
    """Reading for a single station could not be retrieved."""

    def __init__(
        self,
        message: str,
        station_id: Optional[str] = None,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message, url=url, status=status)
        if station_id:
            self.details["station_id"] = station_id
        self.station_id = station_id


# =============================================================================
# Publishing Errors
# =============================================================================

class PublishError(WindyObservationsError):
    """Delta could not be delivered to the Signal K server."""

    def __init__(
        self,
        message: str,
        station_id: Optional[str] = None,
        server: Optional[str] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if station_id:
            details["station_id"] = station_id
        if server:
            details["server"] = server
        super().__init__(message, details)
        self.station_id = station_id
        self.server = server

