"""Composite scoring of candidate locations: distance, terrain fit and goal affinity."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from excursion_engine.schemas import CandidateLocation, UserContext

DEFAULT_TOP_N = 10

# Low enough that no realistic distance/tag combination lifts the candidate back up.
TERRAIN_DISQUALIFIED = -1000.0

_TERRAIN_BY_ENERGY: Dict[str, Dict[str, float]] = {
    "high": {"hilly": 3, "rolling": 2, "flat": 1},
    "medium": {"rolling": 3, "flat": 2, "hilly": -1},
    "low": {"flat": 3, "rolling": 1, "hilly": -2},
}

_TAG_GROUPS: Dict[str, frozenset[str]] = {
    "water": frozenset({"water", "lake", "river"}),
    "trail": frozenset({"trail", "path"}),
    "quiet": frozenset({"quiet", "peaceful"}),
    "park": frozenset({"park", "garden"}),
    "trees": frozenset({"trees", "forest"}),
}

_GOAL_BONUSES: Dict[str, Dict[str, float]] = {
    "relax": {"water": 2, "quiet": 2, "trees": 1},
    "recharge": {"trail": 2, "park": 1, "trees": 1},
    "reflect": {"quiet": 2, "water": 1, "trees": 1},
}


def distance_score(candidate: CandidateLocation) -> float:
    return -candidate.distance_km


def terrain_score(candidate: CandidateLocation, context: UserContext) -> float:
    terrain = candidate.terrain_intensity
    if terrain is None:
        return 0.0
    if context.mobility_level in ("limited", "assisted") and terrain != "flat":
        return TERRAIN_DISQUALIFIED
    if context.energy_level == "medium" and terrain == "hilly":
        return 1.0 if context.fitness_level == "advanced" else -1.0
    return float(_TERRAIN_BY_ENERGY.get(context.energy_level, {}).get(terrain, 0))


def tag_score(tags: Iterable[str], goal: Optional[str]) -> float:
    tag_set = set(tags)
    present = {group for group, members in _TAG_GROUPS.items() if tag_set & members}

    if goal in ("connect", "creativity"):
        score = 0.0
        if present & {"water", "quiet", "trail"}:
            score += 1
        if "park" in present:
            score += 1
        return score

    bonuses = _GOAL_BONUSES.get(goal or "", {})
    return float(sum(points for group, points in bonuses.items() if group in present))


def composite_score(candidate: CandidateLocation, context: UserContext) -> float:
    return distance_score(candidate) + terrain_score(candidate, context) + tag_score(candidate.tags, context.goal)


def rank(
    candidates: Sequence[CandidateLocation],
    context: UserContext,
    limit: int = DEFAULT_TOP_N,
) -> List[CandidateLocation]:
    """Return the top ``limit`` candidates by composite score, ties kept in input order."""
    scored = [(composite_score(c, context), c) for c in candidates]
    # sorted() is stable, so equal scores keep their input order.
    ordered = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [c.model_copy(update={"score": round(score, 4)}) for score, c in ordered[: max(0, limit)]]
