"""Commercial places lookup (Google Places Nearby Search)."""
from __future__ import annotations

from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from excursion_engine.logging_config import get_logger
from excursion_engine.schemas import Coordinates
from excursion_engine.tools.place_tags import normalise_tags, tags_from_place_types, tags_from_text
from excursion_engine.tools.sources import RawPlace, SourceUnavailableError

logger = get_logger(__name__)

MAX_RADIUS_METERS = 50000


class PlacesLatLng(BaseModel):
    lat: float
    lng: float


class PlacesGeometry(BaseModel):
    location: PlacesLatLng


class PlacesResult(BaseModel):
    place_id: str
    name: Optional[str] = None
    vicinity: Optional[str] = None
    geometry: PlacesGeometry
    types: List[str] = Field(default_factory=list)


class PlacesSource:
    name = "places"
    source = "map_api"
    SEARCH_ENDPOINT = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"

    def __init__(
        self,
        api_key: str,
        *,
        category: str = "park",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.category = category
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, origin: Coordinates, radius_meters: float) -> List[RawPlace]:
        params = {
            "location": f"{origin.latitude},{origin.longitude}",
            "radius": int(min(radius_meters, MAX_RADIUS_METERS)),
            "type": self.category,
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.SEARCH_ENDPOINT, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SourceUnavailableError(f"places search failed: {exc}") from exc

        if not isinstance(data, dict):
            raise SourceUnavailableError("places payload is not an object")
        status = data.get("status", "OK")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            raise SourceUnavailableError(f"places search returned status {status}")

        places: List[RawPlace] = []
        for raw in data.get("results") or []:
            try:
                result = PlacesResult.model_validate(raw)
            except ValidationError:
                logger.debug("Skipping malformed places result: %r", raw)
                continue
            tags = normalise_tags(
                [*tags_from_place_types(result.types), *tags_from_text(result.name, result.vicinity)]
            )
            if not tags:
                continue
            places.append(
                RawPlace(
                    id=f"places:{result.place_id}",
                    latitude=result.geometry.location.lat,
                    longitude=result.geometry.location.lng,
                    source="map_api",
                    name=(result.name or "").strip() or None,
                    description=result.vicinity,
                    tags=tags,
                )
            )
        logger.info("Places search returned %d usable results", len(places))
        return places
