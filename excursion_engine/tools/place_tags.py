"""Normalise provider attributes into the small tag vocabulary used for scoring."""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

# (key, value) -> tags; a value of None matches any value for that key.
OSM_TAG_RULES: Dict[Tuple[str, Optional[str]], Tuple[str, ...]] = {
    ("leisure", "park"): ("park",),
    ("leisure", "garden"): ("garden", "park"),
    ("leisure", "nature_reserve"): ("nature_reserve", "quiet", "trees"),
    ("leisure", "common"): ("park",),
    ("landuse", "recreation_ground"): ("park",),
    ("landuse", "village_green"): ("park",),
    ("landuse", "forest"): ("trees", "forest"),
    ("landuse", "meadow"): ("meadow",),
    ("landuse", "grass"): ("meadow",),
    ("natural", "wood"): ("trees", "forest"),
    ("natural", "tree_row"): ("trees",),
    ("natural", "scrub"): ("meadow",),
    ("natural", "heath"): ("meadow",),
    ("natural", "grassland"): ("meadow",),
    ("natural", "water"): ("water",),
    ("natural", "wetland"): ("water", "quiet"),
    ("natural", "beach"): ("water", "beach"),
    ("water", "lake"): ("water", "lake"),
    ("water", "pond"): ("water", "lake"),
    ("water", "river"): ("water", "river"),
    ("waterway", "river"): ("water", "river"),
    ("waterway", "stream"): ("water", "river"),
    ("waterway", None): ("water",),
    ("highway", "footway"): ("trail", "path"),
    ("highway", "path"): ("trail", "path"),
    ("highway", "bridleway"): ("trail", "path"),
    ("highway", "track"): ("trail", "path"),
    ("route", "hiking"): ("trail",),
    ("tourism", "viewpoint"): ("viewpoint",),
    ("amenity", "bench"): ("benches",),
    ("bench", "yes"): ("benches",),
}

# Keyword hits in place names, descriptions and vicinity strings.
TEXT_KEYWORDS: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (("quiet", "peaceful", "tranquil", "serene"), ("quiet",)),
    (("lake", "pond", "reservoir"), ("water", "lake")),
    (("river", "stream", "creek", "brook"), ("water", "river")),
    (("tree", "forest", "wood"), ("trees",)),
    (("garden", "arboretum"), ("garden", "park")),
    (("bench",), ("benches",)),
    (("path", "trail", "greenway"), ("trail", "path")),
    (("courtyard",), ("courtyard",)),
    (("beach", "shore"), ("water", "beach")),
    (("overlook", "viewpoint", "lookout"), ("viewpoint",)),
)

PLACE_TYPE_TAGS: Dict[str, Tuple[str, ...]] = {
    "park": ("park",),
    "national_park": ("park", "trees"),
    "garden": ("garden", "park"),
    "botanical_garden": ("garden", "park", "trees"),
    "hiking_area": ("trail",),
    "trail_head": ("trail",),
    "campground": ("trees",),
    "natural_feature": ("nature",),
    "tourist_attraction": (),
}

# First match wins when a place has no name of its own.
SYNTHETIC_NAMES: Tuple[Tuple[str, str], ...] = (
    ("nature_reserve", "Nature Reserve"),
    ("garden", "Garden"),
    ("park", "Local Park"),
    ("forest", "Wooded Area"),
    ("trees", "Wooded Area"),
    ("lake", "Lakeside"),
    ("beach", "Beach"),
    ("river", "Riverside"),
    ("water", "Waterside Spot"),
    ("trail", "Walking Path"),
    ("viewpoint", "Scenic Viewpoint"),
    ("meadow", "Open Meadow"),
)


def tags_from_osm(attributes: Mapping[str, str]) -> List[str]:
    """Map raw OSM key/value attributes onto normalised tags."""
    found: set[str] = set()
    for key, value in attributes.items():
        if not isinstance(value, str):
            continue
        exact = OSM_TAG_RULES.get((key, value.lower()))
        if exact is not None:
            found.update(exact)
            continue
        wildcard = OSM_TAG_RULES.get((key, None))
        if wildcard is not None:
            found.update(wildcard)
    return sorted(found)


def tags_from_text(*texts: Optional[str]) -> List[str]:
    combined = " ".join(t.lower() for t in texts if t)
    found: set[str] = set()
    for keywords, tags in TEXT_KEYWORDS:
        if any(re.search(rf"\b{re.escape(word)}", combined) for word in keywords):
            found.update(tags)
    return sorted(found)


def tags_from_place_types(types: Iterable[str]) -> List[str]:
    found: set[str] = set()
    for place_type in types:
        found.update(PLACE_TYPE_TAGS.get(place_type, ()))
    return sorted(found)


def normalise_tags(tags: Iterable[str]) -> List[str]:
    return sorted({str(tag).strip().lower() for tag in tags if tag is not None and str(tag).strip()})


def synthesize_name(tags: Iterable[str], place_id: str) -> str:
    tag_set = set(tags)
    for tag, label in SYNTHETIC_NAMES:
        if tag in tag_set:
            return label
    return f"Nature Spot {place_id}"
