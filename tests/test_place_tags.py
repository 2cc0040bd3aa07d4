from excursion_engine.tools.place_tags import (
    normalise_tags,
    synthesize_name,
    tags_from_osm,
    tags_from_place_types,
    tags_from_text,
)


def test_osm_attributes_map_to_scoring_tags():
    assert tags_from_osm({"leisure": "park", "name": "Riverside Park"}) == ["park"]
    assert tags_from_osm({"natural": "wood"}) == ["forest", "trees"]
    assert tags_from_osm({"waterway": "canal"}) == ["water"]
    assert tags_from_osm({"waterway": "stream"}) == ["river", "water"]
    assert tags_from_osm({"highway": "footway", "bench": "yes"}) == ["benches", "path", "trail"]
    assert tags_from_osm({"leisure": "garden"}) == ["garden", "park"]


def test_unrecognised_osm_attributes_yield_no_tags():
    assert tags_from_osm({"amenity": "parking", "name": "Lot 4"}) == []
    assert tags_from_osm({}) == []


def test_text_keywords():
    assert tags_from_text("Quiet Pond Garden", None) == ["garden", "lake", "park", "quiet", "water"]
    assert tags_from_text("Main Street") == []


def test_place_types():
    assert tags_from_place_types(["park", "point_of_interest"]) == ["park"]
    assert tags_from_place_types(["hiking_area"]) == ["trail"]


def test_normalise_tags_lowercases_and_dedupes():
    assert normalise_tags(["Park", " quiet ", "park", "", None]) == ["park", "quiet"]


def test_synthesized_names():
    assert synthesize_name(["park", "trees"], "osm:way/1") == "Local Park"
    assert synthesize_name(["trees", "forest"], "osm:way/2") == "Wooded Area"
    assert synthesize_name(["trail", "path"], "osm:way/3") == "Walking Path"
    assert synthesize_name(["benches"], "osm:node/4") == "Nature Spot osm:node/4"
