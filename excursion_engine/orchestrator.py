# excursion_engine/orchestrator.py
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence

from excursion_engine.agents.budget_filter import filter_by_budget
from excursion_engine.agents.deduplicator import dedupe
from excursion_engine.agents.location_scout import gather
from excursion_engine.agents.ranker import rank
from excursion_engine.agents.travel_planner import (
    compute_search_radius_meters,
    one_way_budget_minutes,
    select_travel_mode,
)
from excursion_engine.config import Settings
from excursion_engine.llm import PlanComposer
from excursion_engine.logging_config import get_logger
from excursion_engine.schemas import (
    CandidateSelection,
    NoLocationsFound,
    PlanRequest,
    PlanResponse,
    UserContext,
)
from excursion_engine.tools.custom_locations import CustomLocationStore
from excursion_engine.tools.overpass import OverpassSource
from excursion_engine.tools.places import PlacesSource
from excursion_engine.tools.sources import CandidateSource

logger = get_logger(__name__)

NO_CANDIDATES_MESSAGE = (
    "We couldn't find any nature spots near you yet. "
    "Know a good one? Add it and we'll plan an excursion there."
)
OVER_BUDGET_MESSAGE = (
    "The nature spots we found are too far to reach and enjoy in {minutes} minutes. "
    "Try allowing a little more time, or add a closer spot you know."
)


def build_sources(settings: Settings) -> List[CandidateSource]:
    """Construct the configured location sources, highest trust first."""
    sources: List[CandidateSource] = []
    if settings.custom_store_configured:
        sources.append(
            CustomLocationStore(settings.supabase_url, settings.supabase_key, timeout=settings.source_timeout)  # type: ignore[arg-type]
        )
    else:
        logger.warning("Supabase not configured; user-submitted locations unavailable")
    sources.append(OverpassSource(settings.overpass_url, timeout=settings.source_timeout))
    if settings.google_places_api_key:
        sources.append(PlacesSource(settings.google_places_api_key, timeout=settings.source_timeout))
    return sources


async def select_candidates(
    context: UserContext,
    sources: Sequence[CandidateSource],
    settings: Settings,
) -> CandidateSelection:
    """Mode and radius, gather, dedupe, budget filter and rank for one request."""
    travel_mode = select_travel_mode(
        context.time_available_minutes, context.energy_level, context.mobility_level
    )
    radius = compute_search_radius_meters(travel_mode, one_way_budget_minutes(context.time_available_minutes))
    logger.info(
        "Selecting candidates: %d min, energy=%s, mobility=%s -> %s within %.0f m",
        context.time_available_minutes,
        context.energy_level,
        context.mobility_level or "unknown",
        travel_mode,
        radius,
    )

    gathered = await gather(context, sources, travel_mode=travel_mode, radius_meters=radius, settings=settings)
    unique = dedupe(gathered, threshold_meters=settings.dedupe_threshold_meters)
    affordable = filter_by_budget(unique, context.time_available_minutes)
    ranked = rank(affordable, context, limit=max(1, settings.top_n))
    logger.info(
        "Candidates: gathered %d, unique %d, within budget %d, ranked %d (top score %s)",
        len(gathered),
        len(unique),
        len(affordable),
        len(ranked),
        ranked[0].score if ranked else "n/a",
    )
    return CandidateSelection(
        travel_mode=travel_mode,
        search_radius_meters=radius,
        gathered=len(gathered),
        after_dedupe=len(unique),
        within_budget=len(affordable),
        candidates=ranked,
    )


async def plan_excursions(
    req: PlanRequest,
    *,
    sources: Sequence[CandidateSource],
    composer: PlanComposer,
    settings: Settings,
) -> PlanResponse | NoLocationsFound:
    """Run candidate selection and hand the ranked spots to the plan composer.

    Returns ``NoLocationsFound`` instead of calling the composer when nothing
    usable survives. Composer failures propagate as ``PlanComposerError``.
    """
    context = UserContext.from_request(req)
    selection = await select_candidates(context, sources, settings)

    if selection.within_budget == 0:
        if selection.after_dedupe == 0:
            reason, message = "no_candidates", NO_CANDIDATES_MESSAGE
        else:
            reason = "over_time_budget"
            message = OVER_BUDGET_MESSAGE.format(minutes=context.time_available_minutes)
        logger.info("No locations found (%s)", reason)
        return NoLocationsFound(
            reason=reason,
            message=message,
            travel_mode=selection.travel_mode,
            search_radius_meters=selection.search_radius_meters,
        )

    composer_context: Dict[str, Any] = {
        "currentData": req.current_data.model_dump(mode="json"),
        "historicalData": req.historical_data.model_dump(mode="json") if req.historical_data else None,
        "travel_mode": selection.travel_mode,
        "search_radius_meters": round(selection.search_radius_meters),
        "candidates": [c.model_dump(mode="json") for c in selection.candidates],
    }
    logger.info("Composing plans from %d candidates", len(selection.candidates))
    plans = await asyncio.to_thread(composer.compose_plan, composer_context)

    return PlanResponse(
        travel_mode=selection.travel_mode,
        search_radius_meters=selection.search_radius_meters,
        candidates=selection.candidates,
        plan_options=plans.plan_options,
    )
