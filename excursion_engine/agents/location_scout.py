"""Candidate gathering across user, open-map and commercial location sources."""
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Sequence, Tuple

from pydantic import ValidationError

from excursion_engine.agents.budget_filter import ON_SITE_RESERVE
from excursion_engine.agents.travel_planner import KM_PER_MIN, distance_km, offset_coordinates
from excursion_engine.config import Settings
from excursion_engine.logging_config import get_logger
from excursion_engine.schemas import CandidateLocation, Coordinates, Goal, TravelMode, UserContext
from excursion_engine.tools.place_tags import normalise_tags, synthesize_name
from excursion_engine.tools.sources import CandidateSource, RawPlace

logger = get_logger(__name__)

FALLBACK_RING_FRACTIONS: Tuple[float, ...] = (0.3, 0.5, 0.7)

GOAL_FALLBACK_TAGS: Dict[str, Tuple[str, ...]] = {
    "relax": ("quiet", "water", "trees"),
    "recharge": ("trail", "park", "trees"),
    "reflect": ("quiet", "trees"),
    "connect": ("park", "trail"),
    "creativity": ("park", "water", "trees"),
}


async def gather(
    context: UserContext,
    sources: Sequence[CandidateSource],
    *,
    travel_mode: TravelMode,
    radius_meters: float,
    settings: Settings,
) -> List[CandidateLocation]:
    """Query every source and return normalised candidates inside the search radius.

    A source that fails contributes nothing; the remaining sources still count.
    With ``osm_mode="when_sparse"`` the open-map sources are only consulted
    when the other sources produced fewer than ``osm_min_candidates``.
    """
    origin = context.location
    if settings.osm_mode == "when_sparse":
        primary = [s for s in sources if s.source != "osm"]
        secondary = [s for s in sources if s.source == "osm"]
    else:
        primary, secondary = list(sources), []

    raw = await _fetch_all(primary, origin, radius_meters)
    candidates = normalise(raw, origin, travel_mode, radius_meters)

    if secondary:
        if len(candidates) < settings.osm_min_candidates:
            logger.info(
                "Only %d candidates from trusted sources; querying open map data",
                len(candidates),
            )
            extra = await _fetch_all(secondary, origin, radius_meters)
            candidates.extend(normalise(extra, origin, travel_mode, radius_meters))
        else:
            logger.debug("Skipping open map data; %d candidates already available", len(candidates))

    if len(candidates) < settings.min_viable_candidates and settings.allow_synthetic_candidates:
        needed = settings.min_viable_candidates - len(candidates)
        logger.warning("Padding %d real candidates with %d synthetic placeholders", len(candidates), needed)
        candidates.extend(synthesize_fallbacks(context, travel_mode, radius_meters, needed))

    return candidates


async def _fetch_all(
    sources: Sequence[CandidateSource],
    origin: Coordinates,
    radius_meters: float,
) -> List[RawPlace]:
    if not sources:
        return []
    results = await asyncio.gather(
        *(source.fetch(origin, radius_meters) for source in sources),
        return_exceptions=True,
    )
    places: List[RawPlace] = []
    for source, result in zip(sources, results):
        if isinstance(result, Exception):
            logger.warning("Location source %s failed; treating as empty", source.name, exc_info=result)
            continue
        if isinstance(result, BaseException):
            raise result
        logger.info("Location source %s returned %d places", source.name, len(result))
        places.extend(result)
    return places


def normalise(
    places: Iterable[RawPlace],
    origin: Coordinates,
    travel_mode: TravelMode,
    radius_meters: float,
) -> List[CandidateLocation]:
    candidates: List[CandidateLocation] = []
    for place in places:
        tags = normalise_tags(place.tags)
        # User-submitted spots are curated; anything else needs a recognised tag.
        if not tags and place.source != "user_custom":
            continue
        try:
            coords = Coordinates(latitude=place.latitude, longitude=place.longitude)
        except ValidationError:
            logger.warning("Dropping %s: invalid coordinates (%s, %s)", place.id, place.latitude, place.longitude)
            continue
        km = distance_km(origin, coords)
        if km * 1000 > radius_meters:
            continue
        candidates.append(
            CandidateLocation(
                id=place.id,
                name=place.name or synthesize_name(tags, place.id),
                description=place.description,
                coordinates=coords,
                distance_km=km,
                estimated_travel_minutes_one_way=km / KM_PER_MIN[travel_mode],
                travel_mode=travel_mode,
                tags=tags,
                source=place.source,
                terrain_intensity=place.terrain_intensity,
            )
        )
    return candidates


def synthesize_fallbacks(
    context: UserContext,
    travel_mode: TravelMode,
    radius_meters: float,
    count: int,
) -> List[CandidateLocation]:
    """Placeholder spots on a ring around the user, tagged for the requested goal.

    The ring is scaled to whichever is smaller, the search radius or the
    distance a round trip can cover in the time budget, so every placeholder
    survives the budget filter.
    """
    goal: Goal = context.goal
    tags = sorted(GOAL_FALLBACK_TAGS.get(goal, ("park",)))
    affordable_one_way_minutes = context.time_available_minutes * (1 - ON_SITE_RESERVE) / 2
    ring_meters = min(radius_meters, affordable_one_way_minutes * KM_PER_MIN[travel_mode] * 1000)
    fallbacks: List[CandidateLocation] = []
    for idx in range(max(0, count)):
        fraction = FALLBACK_RING_FRACTIONS[idx % len(FALLBACK_RING_FRACTIONS)]
        bearing = (360.0 / max(count, 1)) * idx
        coords = offset_coordinates(context.location, ring_meters * fraction, bearing)
        km = distance_km(context.location, coords)
        place_id = f"fallback:{idx + 1}"
        fallbacks.append(
            CandidateLocation(
                id=place_id,
                name=f"Nature Spot {idx + 1}",
                description=f"Nearby green space suited to {goal}",
                coordinates=coords,
                distance_km=km,
                estimated_travel_minutes_one_way=km / KM_PER_MIN[travel_mode],
                travel_mode=travel_mode,
                tags=tags,
                source="map_api",
                terrain_intensity="flat",
                synthetic=True,
            )
        )
    return fallbacks
