import asyncio

import httpx

from excursion_engine.agents.location_scout import gather, synthesize_fallbacks
from excursion_engine.agents.travel_planner import distance_km
from excursion_engine.config import Settings
from excursion_engine.orchestrator import select_candidates
from excursion_engine.tools.sources import SourceUnavailableError


def _run(context, sources, settings=None, mode="walking", radius=900.0):
    return asyncio.run(
        gather(context, sources, travel_mode=mode, radius_meters=radius, settings=settings or Settings())
    )


def test_gather_normalises_and_applies_radius(make_context, make_place, static_source):
    custom = static_source(
        "custom_locations",
        "user_custom",
        [
            make_place("custom:1", meters=300, source="user_custom", name="Courtyard", tags=["Quiet"]),
            make_place("custom:2", meters=2000, source="user_custom", name="Too far", tags=["park"]),
        ],
    )
    osm = static_source(
        "overpass",
        "osm",
        [
            make_place("osm:way/1", meters=600, bearing=90, tags=["park", "trees"]),
            make_place("osm:node/2", meters=400, bearing=180, tags=[]),
        ],
    )

    candidates = _run(make_context(), [custom, osm])

    assert [c.id for c in candidates] == ["custom:1", "osm:way/1"]
    first, second = candidates
    assert first.tags == ["quiet"]
    assert first.travel_mode == "walking"
    assert first.estimated_travel_minutes_one_way == first.distance_km / 0.075
    assert second.name == "Local Park"
    assert abs(second.distance_km - 0.6) < 0.001


def test_untagged_user_spots_are_kept(make_context, make_place, static_source):
    custom = static_source("custom_locations", "user_custom", [make_place("custom:9", meters=100, source="user_custom", name="Bench")])
    assert [c.id for c in _run(make_context(), [custom])] == ["custom:9"]


def test_failed_source_does_not_abort_gather(make_context, make_place, static_source):
    broken = static_source("overpass", "osm", error=SourceUnavailableError("timeout"))
    also_broken = static_source("places", "map_api", error=httpx.ReadTimeout("slow"))
    healthy = static_source("custom_locations", "user_custom", [make_place("custom:1", meters=200, source="user_custom", name="Spot")])

    candidates = _run(make_context(), [broken, healthy, also_broken])

    assert [c.id for c in candidates] == ["custom:1"]
    assert broken.calls and also_broken.calls


def test_when_sparse_skips_osm_if_trusted_sources_suffice(make_context, make_place, static_source):
    custom_places = [
        make_place(f"custom:{i}", meters=300, bearing=i * 60, source="user_custom", name=f"S{i}", tags=["park"])
        for i in range(5)
    ]
    custom = static_source("custom_locations", "user_custom", custom_places)
    osm = static_source("overpass", "osm", [make_place("osm:way/1", meters=200, tags=["park"])])

    settings = Settings(osm_mode="when_sparse", osm_min_candidates=5)
    candidates = _run(make_context(), [custom, osm], settings)

    assert len(candidates) == 5
    assert osm.calls == []


def test_when_sparse_queries_osm_if_too_few(make_context, make_place, static_source):
    custom = static_source("custom_locations", "user_custom", [make_place("custom:1", meters=300, source="user_custom", name="S")])
    osm = static_source("overpass", "osm", [make_place("osm:way/1", meters=200, bearing=90, tags=["park"])])

    settings = Settings(osm_mode="when_sparse", osm_min_candidates=5)
    candidates = _run(make_context(), [custom, osm], settings)

    assert [c.id for c in candidates] == ["custom:1", "osm:way/1"]
    assert osm.calls == [900.0]


def test_synthetic_fallback_is_off_by_default(make_context, static_source):
    empty = static_source("overpass", "osm", [])
    assert _run(make_context(), [empty]) == []


def test_synthetic_fallback_pads_to_minimum(make_context, make_place, static_source):
    custom = static_source("custom_locations", "user_custom", [make_place("custom:1", meters=300, source="user_custom", name="S")])
    settings = Settings(allow_synthetic_candidates=True, min_viable_candidates=3)

    candidates = _run(make_context(goal="recharge"), [custom], settings)

    assert [c.id for c in candidates] == ["custom:1", "fallback:1", "fallback:2"]
    fallback = candidates[1]
    assert fallback.synthetic is True
    assert fallback.tags == ["park", "trail", "trees"]


def test_fallback_ring_positions(make_context):
    ctx = make_context(goal="relax")
    fallbacks = synthesize_fallbacks(ctx, "walking", 1000.0, 3)

    distances = [round(distance_km(ctx.location, f.coordinates) * 1000) for f in fallbacks]
    assert distances == [300, 500, 700]
    assert all(f.tags == ["quiet", "trees", "water"] for f in fallbacks)
    assert [f.id for f in fallbacks] == ["fallback:1", "fallback:2", "fallback:3"]


def test_fallback_ring_shrinks_to_fit_a_short_time_budget(make_context, static_source):
    # 5 minutes walking searches the 500 m floor, but only ~169 m is reachable and back.
    ctx = make_context(time_available_minutes=5)
    settings = Settings(allow_synthetic_candidates=True, min_viable_candidates=3)

    selection = asyncio.run(select_candidates(ctx, [static_source("overpass", "osm", [])], settings))

    assert selection.search_radius_meters == 500.0
    assert selection.gathered == 3
    assert selection.within_budget == 3
    assert all(c.synthetic for c in selection.candidates)
    assert all(c.distance_km * 1000 < 170 for c in selection.candidates)
