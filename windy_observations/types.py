"""
Windy Observations Shared Type Definitions

Provides type aliases, data structures and protocols shared across the
package.

Types are organized by category:
    - Unit aliases
    - Position and tile types
    - Signal K delta types
    - Protocol types (for the host collaborators)

Usage:
    from windy_observations.types import Position, TileCoordinate
"""

from dataclasses import dataclass
from typing import (
    Any,
    NamedTuple,
    Optional,
    Protocol,
    TypeAlias,
    TypedDict,
    runtime_checkable,
)


# =============================================================================
# Basic Type Aliases
# =============================================================================

Degrees: TypeAlias = float
Radians: TypeAlias = float
Celsius: TypeAlias = float
Kelvin: TypeAlias = float
MetersPerSecond: TypeAlias = float


# =============================================================================
# Position and Tile Types
# =============================================================================

@dataclass(frozen=True)
class Position:
    """Geographic position of the vessel.

    Attributes:
        latitude: Latitude in decimal degrees (north positive)
        longitude: Longitude in decimal degrees (east positive)
    """
    latitude: Degrees
    longitude: Degrees

    def to_dict(self) -> dict[str, Degrees]:
        """Signal K position value."""
        return {"latitude": self.latitude, "longitude": self.longitude}


class TileCoordinate(NamedTuple):
    """Slippy-map tile index.

    Attributes:
        zoom: Zoom level
        x: Column, 0 at longitude -180
        y: Row, 0 at the northern edge
    """
    zoom: int
    x: int
    y: int

    @property
    def path(self) -> str:
        """``zoom/x/y`` path segment used by tile endpoints."""
        return f"{self.zoom}/{self.x}/{self.y}"


# =============================================================================
# Signal K Delta Types
# =============================================================================

class PathValue(TypedDict):
    """One Signal K ``{path, value}`` entry."""
    path: str
    value: Any


# Functional form: "$source" is not a valid identifier
DeltaUpdate = TypedDict(
    "DeltaUpdate",
    {"$source": str, "timestamp": str, "values": list[PathValue]},
    total=False,
)


class Delta(TypedDict, total=False):
    """Signal K delta message."""
    context: str
    updates: list[DeltaUpdate]


# =============================================================================
# Protocol Types
# =============================================================================

@runtime_checkable
class PositionProvider(Protocol):
    """Source of the vessel's current position."""

    async def get_position(self) -> Optional[Position]:
        """Return the current position, or None if not yet known."""
        ...


@runtime_checkable
class DeltaSink(Protocol):
    """Destination accepting Signal K deltas."""

    async def send_delta(self, delta: Delta) -> None:
        """Deliver one delta. Raises PublishError on failure."""
        ...
