import itertools

import pytest

from excursion_engine.agents.ranker import (
    TERRAIN_DISQUALIFIED,
    composite_score,
    rank,
    tag_score,
    terrain_score,
)


@pytest.mark.parametrize(
    "energy, fitness, expected",
    [
        ("high", None, {"hilly": 3, "rolling": 2, "flat": 1}),
        ("medium", None, {"rolling": 3, "flat": 2, "hilly": -1}),
        ("medium", "advanced", {"rolling": 3, "flat": 2, "hilly": 1}),
        ("low", None, {"flat": 3, "rolling": 1, "hilly": -2}),
    ],
)
def test_terrain_score_by_energy(make_candidate, make_context, energy, fitness, expected):
    ctx = make_context(energy_level=energy, fitness_level=fitness)
    for terrain, score in expected.items():
        assert terrain_score(make_candidate("c", terrain=terrain), ctx) == score


def test_unknown_terrain_is_neutral(make_candidate, make_context):
    for mobility in ("full", "limited", "assisted", None):
        ctx = make_context(mobility_level=mobility, energy_level="high")
        assert terrain_score(make_candidate("c", terrain=None), ctx) == 0


@pytest.mark.parametrize("mobility", ["limited", "assisted"])
def test_reduced_mobility_disqualifies_non_flat_terrain(make_candidate, make_context, mobility):
    for energy, fitness in itertools.product(("low", "medium", "high"), (None, "beginner", "advanced")):
        ctx = make_context(mobility_level=mobility, energy_level=energy, fitness_level=fitness)
        flat = terrain_score(make_candidate("flat", terrain="flat"), ctx)
        for terrain in ("rolling", "hilly"):
            score = terrain_score(make_candidate(terrain, terrain=terrain), ctx)
            assert score == TERRAIN_DISQUALIFIED
            assert score < flat

        # Best possible tags and zero distance still lose to a distant, untagged flat spot.
        hilly_best = make_candidate("best", meters=0, tags=["water", "quiet", "trees", "trail", "park"], terrain="hilly")
        far_flat = make_candidate("far", meters=50000, terrain="flat")
        assert composite_score(hilly_best, ctx) < composite_score(far_flat, ctx)


@pytest.mark.parametrize(
    "goal, tags, expected",
    [
        ("relax", ["water", "quiet", "trees"], 5),
        ("relax", ["park", "quiet", "trees"], 3),
        ("relax", ["lake", "peaceful", "forest"], 5),
        ("recharge", ["trail", "park", "trees"], 4),
        ("recharge", ["path", "garden"], 3),
        ("reflect", ["quiet", "water", "trees"], 4),
        ("connect", ["water", "quiet", "trail", "park"], 2),
        ("connect", ["trees"], 0),
        ("creativity", ["river"], 1),
        ("creativity", ["garden", "path"], 2),
        ("relax", [], 0),
        ("unknown", ["water", "quiet"], 0),
    ],
)
def test_tag_score_by_goal(goal, tags, expected):
    assert tag_score(tags, goal) == expected


def test_rank_orders_by_composite_score_and_limits(make_candidate, make_context):
    ctx = make_context(goal="relax", energy_level="medium")
    near_plain = make_candidate("near", meters=100)
    far_water = make_candidate("water", meters=600, tags=["water", "quiet"])
    mid_trees = make_candidate("trees", meters=300, tags=["trees"])

    ranked = rank([near_plain, far_water, mid_trees], ctx)
    assert [c.id for c in ranked] == ["water", "trees", "near"]
    assert ranked[0].score == pytest.approx(4 - 0.6, abs=1e-3)

    assert [c.id for c in rank([near_plain, far_water, mid_trees], ctx, limit=2)] == ["water", "trees"]


def test_rank_is_stable_for_equal_scores(make_candidate, make_context):
    ctx = make_context(goal="reflect")
    base = make_candidate("base", meters=250, tags=["quiet"])
    candidates = [base.model_copy(update={"id": f"c{i}"}) for i in range(6)]
    ranked = rank(candidates, ctx)
    assert [c.id for c in ranked] == [c.id for c in candidates]
    assert len({c.score for c in ranked}) == 1


def test_rank_does_not_mutate_inputs(make_candidate, make_context):
    candidate = make_candidate("c", tags=["water"])
    rank([candidate], make_context())
    assert candidate.score is None
