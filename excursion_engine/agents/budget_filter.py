"""Drop candidates whose round trip would eat into on-site time."""
from __future__ import annotations

from typing import List, Sequence

from excursion_engine.schemas import CandidateLocation

ON_SITE_RESERVE = 0.1


def fits_budget(candidate: CandidateLocation, time_available_minutes: float, on_site_reserve: float = ON_SITE_RESERVE) -> bool:
    round_trip = candidate.estimated_travel_minutes_one_way * 2
    return round_trip <= time_available_minutes * (1 - on_site_reserve)


def filter_by_budget(
    candidates: Sequence[CandidateLocation],
    time_available_minutes: float,
    on_site_reserve: float = ON_SITE_RESERVE,
) -> List[CandidateLocation]:
    return [c for c in candidates if fits_budget(c, time_available_minutes, on_site_reserve)]
