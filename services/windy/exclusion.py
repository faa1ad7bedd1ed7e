"""
Station exclusion policy.

Built once at start from the configured exclusion list and never mutated,
so it can be shared by every concurrent fetch without locking.
"""

from dataclasses import dataclass, field
from typing import Iterable

from windy_observations.config import ExclusionConfig, parse_exclude_list


@dataclass(frozen=True)
class ExclusionFilter:
    """
    Decides whether a station may be fetched.

    By default identifiers are compared lower-cased, the same form used in
    published paths, so ``abc`` in the list excludes station ``ABC``. With
    ``case_sensitive`` the comparison is an exact match on the identifier
    as the provider reports it.
    """

    excluded: frozenset[str] = field(default_factory=frozenset)
    case_sensitive: bool = False

    def __post_init__(self):
        if not self.case_sensitive:
            object.__setattr__(
                self, "excluded", frozenset(s.lower() for s in self.excluded)
            )

    @classmethod
    def from_list(cls, exclude_list: str, case_sensitive: bool = False) -> "ExclusionFilter":
        """Build from a comma separated list such as ``"ABC, XYZ"``."""
        return cls(parse_exclude_list(exclude_list), case_sensitive)

    @classmethod
    def from_config(cls, config: ExclusionConfig) -> "ExclusionFilter":
        return cls(config.stations, config.case_sensitive)

    @classmethod
    def of(cls, stations: Iterable[str], case_sensitive: bool = False) -> "ExclusionFilter":
        return cls(frozenset(stations), case_sensitive)

    def is_excluded(self, station_id: str) -> bool:
        if not self.excluded:
            return False
        key = station_id if self.case_sensitive else station_id.lower()
        return key in self.excluded

    def __contains__(self, station_id: str) -> bool:
        return self.is_excluded(station_id)

    def __len__(self) -> int:
        return len(self.excluded)
