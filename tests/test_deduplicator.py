from excursion_engine.agents.deduplicator import dedupe


def test_nearby_candidates_collapse_to_user_custom(make_candidate):
    osm = make_candidate("osm:way/1", meters=300, source="osm", tags=["park"])
    custom = make_candidate("custom:1", meters=320, source="user_custom", tags=["park", "quiet"])

    result = dedupe([osm, custom])

    assert [c.id for c in result] == ["custom:1"]


def test_distant_candidates_are_all_kept(make_candidate):
    candidates = [make_candidate(f"osm:{i}", meters=400, bearing=i * 90) for i in range(4)]
    assert [c.id for c in dedupe(candidates)] == [c.id for c in candidates]


def test_first_seen_wins_without_precedence(make_candidate):
    places = make_candidate("places:a", meters=500, source="map_api")
    custom = make_candidate("custom:a", meters=510, source="user_custom")

    assert [c.id for c in dedupe([places, custom], precedence=None)] == ["places:a"]


def test_custom_precedence_order(make_candidate):
    osm = make_candidate("osm:a", meters=500, source="osm")
    places = make_candidate("places:a", meters=505, source="map_api")

    result = dedupe([osm, places], precedence=("map_api", "osm", "user_custom"))
    assert [c.id for c in result] == ["places:a"]


def test_threshold_is_respected(make_candidate):
    a = make_candidate("osm:a", meters=100, source="osm")
    b = make_candidate("osm:b", meters=160, source="osm")

    assert len(dedupe([a, b], threshold_meters=50)) == 2
    assert len(dedupe([a, b], threshold_meters=100)) == 1


def test_dedupe_is_idempotent(make_candidate):
    candidates = [
        make_candidate("osm:1", meters=100, source="osm"),
        make_candidate("custom:1", meters=120, source="user_custom"),
        make_candidate("osm:2", meters=200, source="osm"),
        make_candidate("places:1", meters=400, bearing=90, source="map_api"),
        make_candidate("osm:3", meters=420, bearing=90, source="osm"),
        make_candidate("osm:4", meters=700, bearing=200, source="osm"),
    ]
    once = dedupe(candidates)
    twice = dedupe(once)

    assert [c.id for c in twice] == [c.id for c in once]
    assert [c.id for c in once] == ["custom:1", "osm:2", "osm:3", "osm:4"]


def test_dedupe_is_deterministic(make_candidate):
    candidates = [make_candidate(f"osm:{i}", meters=100 + i * 30) for i in range(6)]
    assert [c.id for c in dedupe(candidates)] == [c.id for c in dedupe(list(candidates))]


def test_empty_input():
    assert dedupe([]) == []
