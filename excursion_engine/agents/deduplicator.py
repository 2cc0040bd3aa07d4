"""Collapse candidates from different sources that describe the same spot."""
from __future__ import annotations

from typing import List, Optional, Sequence

from excursion_engine.agents.travel_planner import distance_km
from excursion_engine.schemas import CandidateLocation

DEFAULT_THRESHOLD_METERS = 50.0
DEFAULT_SOURCE_PRECEDENCE = ("user_custom", "osm", "map_api")


def dedupe(
    candidates: Sequence[CandidateLocation],
    threshold_meters: float = DEFAULT_THRESHOLD_METERS,
    precedence: Optional[Sequence[str]] = DEFAULT_SOURCE_PRECEDENCE,
) -> List[CandidateLocation]:
    """Keep the first candidate of every cluster closer than ``threshold_meters``.

    Candidates are visited in source-precedence order (input order within a
    source); ``precedence=None`` visits them in plain input order.
    """
    ordered = list(candidates)
    if precedence is not None:
        rank = {source: idx for idx, source in enumerate(precedence)}
        ordered.sort(key=lambda c: rank.get(c.source, len(rank)))

    kept: List[CandidateLocation] = []
    for candidate in ordered:
        if any(distance_km(candidate.coordinates, other.coordinates) * 1000 < threshold_meters for other in kept):
            continue
        kept.append(candidate)
    return kept
