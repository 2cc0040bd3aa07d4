"""Shared fixtures for the excursion engine tests."""
from typing import Callable, List, Optional

import pytest

from excursion_engine.agents.travel_planner import KM_PER_MIN, distance_km, offset_coordinates
from excursion_engine.schemas import CandidateLocation, Coordinates, UserContext
from excursion_engine.tools.sources import RawPlace

ORIGIN = Coordinates(latitude=40.0, longitude=-74.0)


@pytest.fixture
def origin() -> Coordinates:
    return ORIGIN


@pytest.fixture
def make_context() -> Callable[..., UserContext]:
    def _make(**overrides) -> UserContext:
        fields = {
            "location": ORIGIN,
            "time_available_minutes": 60,
            "energy_level": "medium",
            "mood": "calm",
            "goal": "relax",
            "mobility_level": "full",
            "fitness_level": None,
        }
        fields.update(overrides)
        return UserContext(**fields)

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., CandidateLocation]:
    def _make(
        id: str,
        meters: float = 200.0,
        bearing: float = 0.0,
        *,
        tags: Optional[List[str]] = None,
        source: str = "osm",
        terrain: Optional[str] = None,
        mode: str = "walking",
    ) -> CandidateLocation:
        coords = offset_coordinates(ORIGIN, meters, bearing)
        km = distance_km(ORIGIN, coords)
        return CandidateLocation(
            id=id,
            name=id,
            coordinates=coords,
            distance_km=km,
            estimated_travel_minutes_one_way=km / KM_PER_MIN[mode],
            travel_mode=mode,
            tags=sorted(tags or []),
            source=source,
            terrain_intensity=terrain,
        )

    return _make


@pytest.fixture
def make_place() -> Callable[..., RawPlace]:
    def _make(
        id: str,
        meters: float = 200.0,
        bearing: float = 0.0,
        *,
        tags: Optional[List[str]] = None,
        source: str = "osm",
        name: Optional[str] = None,
        terrain: Optional[str] = None,
    ) -> RawPlace:
        coords = offset_coordinates(ORIGIN, meters, bearing)
        return RawPlace(
            id=id,
            latitude=coords.latitude,
            longitude=coords.longitude,
            source=source,
            name=name,
            tags=list(tags or []),
            terrain_intensity=terrain,
        )

    return _make


class StaticSource:
    """In-memory location source returning fixed places (or raising)."""

    def __init__(self, name: str, source: str, places=None, error: Optional[Exception] = None):
        self.name = name
        self.source = source
        self.places = list(places or [])
        self.error = error
        self.calls: List[float] = []

    async def fetch(self, origin, radius_meters):
        self.calls.append(radius_meters)
        if self.error is not None:
            raise self.error
        return list(self.places)


@pytest.fixture
def static_source() -> Callable[..., StaticSource]:
    return StaticSource
