"""Common shape shared by every candidate-location source."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from excursion_engine.schemas import Coordinates, LocationSource, TerrainIntensity


class SourceUnavailableError(RuntimeError):
    """A location source could not be reached or returned an unusable payload."""


@dataclass
class RawPlace:
    id: str
    latitude: float
    longitude: float
    source: LocationSource
    name: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    terrain_intensity: Optional[TerrainIntensity] = None


class CandidateSource(Protocol):
    name: str
    source: LocationSource

    async def fetch(self, origin: Coordinates, radius_meters: float) -> List[RawPlace]:
        ...
