"""OpenStreetMap green and blue spaces via the Overpass API."""
from __future__ import annotations

from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from excursion_engine.config import OVERPASS_URL
from excursion_engine.logging_config import get_logger
from excursion_engine.schemas import Coordinates
from excursion_engine.tools.place_tags import tags_from_osm
from excursion_engine.tools.sources import RawPlace, SourceUnavailableError

logger = get_logger(__name__)

# Tag predicates for the radius query: parks and gardens, natural features,
# waterways, forest/meadow land use, viewpoints and public footpaths/trails.
NATURE_PREDICATES = (
    '["leisure"="park"]',
    '["leisure"="garden"]["garden:type"!="private"]',
    '["leisure"="nature_reserve"]',
    '["landuse"="recreation_ground"]',
    '["landuse"="village_green"]',
    '["natural"~"^(wood|scrub|heath|grassland|water|wetland|beach)$"]',
    '["waterway"~"^(river|stream|canal)$"]',
    '["landuse"~"^(forest|meadow)$"]',
    '["tourism"="viewpoint"]',
    '["highway"~"^(footway|path|track|bridleway)$"]["access"!~"^(private|no)$"]',
    '["route"="hiking"]',
)

MAX_ELEMENTS = 200


class OverpassCenter(BaseModel):
    lat: float
    lon: float


class OverpassElement(BaseModel):
    type: str
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    center: Optional[OverpassCenter] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    def position(self) -> Optional[tuple[float, float]]:
        if self.lat is not None and self.lon is not None:
            return self.lat, self.lon
        if self.center is not None:
            return self.center.lat, self.center.lon
        return None


def build_query(origin: Coordinates, radius_meters: float, *, timeout: int = 25) -> str:
    radius = int(round(radius_meters))
    around = f"(around:{radius},{origin.latitude},{origin.longitude})"
    clauses = "\n".join(f"  nwr{predicate}{around};" for predicate in NATURE_PREDICATES)
    # qt order makes the element cap cut the same elements on every run.
    return f"[out:json][timeout:{timeout}];\n(\n{clauses}\n);\nout center tags qt {MAX_ELEMENTS};"


class OverpassSource:
    name = "overpass"
    source = "osm"

    def __init__(
        self,
        url: str = OVERPASS_URL,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, origin: Coordinates, radius_meters: float) -> List[RawPlace]:
        query = build_query(origin, radius_meters, timeout=max(5, int(self.timeout)))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    data={"data": query},
                    headers={"User-Agent": "excursion-engine/1.0"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SourceUnavailableError(f"overpass query failed: {exc}") from exc

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise SourceUnavailableError("overpass payload has no element list")
        if len(elements) >= MAX_ELEMENTS:
            logger.warning(
                "Overpass result hit the %d element cap at %.0f m; farther spots may be missing",
                MAX_ELEMENTS,
                radius_meters,
            )

        places: List[RawPlace] = []
        skipped = 0
        for raw in elements:
            try:
                element = OverpassElement.model_validate(raw)
            except ValidationError:
                skipped += 1
                continue
            place = _to_raw_place(element)
            if place is None:
                skipped += 1
                continue
            places.append(place)
        logger.info("Overpass returned %d elements (%d usable, %d skipped)", len(elements), len(places), skipped)
        return places


def _to_raw_place(element: OverpassElement) -> Optional[RawPlace]:
    position = element.position()
    if position is None:
        return None
    tags = tags_from_osm(element.tags)
    if not tags:
        return None
    if element.tags.get("access") in ("private", "no"):
        return None
    lat, lon = position
    return RawPlace(
        id=f"osm:{element.type}/{element.id}",
        latitude=lat,
        longitude=lon,
        source="osm",
        name=(element.tags.get("name") or "").strip() or None,
        description=element.tags.get("description"),
        tags=tags,
    )
