"""User-submitted nature spots kept in the Supabase ``custom_nature_locations`` table."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from excursion_engine.logging_config import get_logger
from excursion_engine.schemas import Coordinates, NewCustomLocation, TerrainIntensity
from excursion_engine.tools.place_tags import normalise_tags
from excursion_engine.tools.sources import RawPlace, SourceUnavailableError

logger = get_logger(__name__)

TABLE = "custom_nature_locations"


class LocationStoreError(RuntimeError):
    """Writing to the custom-location store failed."""


class CustomLocationRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    description: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    tags: List[str] = Field(default_factory=list)
    terrain_intensity: Optional[TerrainIntensity] = None
    created_by: Optional[str] = None


class CustomLocationStore:
    """Reads (and accepts new) user-submitted spots over the PostgREST API.

    No server-side filtering is done; the gatherer applies the radius.
    """

    name = "custom_locations"
    source = "user_custom"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{TABLE}"
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def fetch(self, origin: Coordinates, radius_meters: float) -> List[RawPlace]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.endpoint, params={"select": "*"}, headers=self._headers())
                response.raise_for_status()
                rows = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SourceUnavailableError(f"custom location store unavailable: {exc}") from exc

        if not isinstance(rows, list):
            raise SourceUnavailableError("custom location store returned a non-list payload")

        places: List[RawPlace] = []
        for row in rows:
            try:
                record = CustomLocationRecord.model_validate(row)
            except ValidationError:
                logger.warning("Skipping malformed custom location row: %r", row)
                continue
            places.append(_to_raw_place(record))
        logger.info("Custom location store returned %d usable rows", len(places))
        return places

    async def add(self, location: NewCustomLocation) -> CustomLocationRecord:
        payload: Dict[str, Any] = location.model_dump(mode="json", exclude_none=True)
        headers = {**self._headers(), "Prefer": "return=representation"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to save custom location %r", location.name, exc_info=True)
            raise LocationStoreError(f"could not save location: {exc}") from exc

        row = data[0] if isinstance(data, list) and data else data
        try:
            record = CustomLocationRecord.model_validate(row)
        except ValidationError as exc:
            raise LocationStoreError("store returned an unexpected record") from exc
        logger.info("Saved custom location %s (%s)", record.id, record.name)
        return record


def _to_raw_place(record: CustomLocationRecord) -> RawPlace:
    return RawPlace(
        id=f"custom:{record.id}",
        latitude=record.latitude,
        longitude=record.longitude,
        source="user_custom",
        name=record.name.strip() or None,
        description=record.description,
        tags=normalise_tags(record.tags),
        terrain_intensity=record.terrain_intensity,
    )
