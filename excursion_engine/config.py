"""Runtime configuration read from the environment (and ``.env`` when present)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv

OVERPASS_URL = "https://overpass-api.de/api/interpreter"

OsmMode = Literal["always", "when_sparse"]


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int(value: Optional[str], default: int, minimum: Optional[int] = None) -> int:
    try:
        parsed = int(value) if value not in (None, "") else default
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return minimum
    return parsed


def _float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Everything the pipeline, sources and composer need at construction time."""

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    overpass_url: str = OVERPASS_URL
    google_places_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    osm_mode: OsmMode = "always"
    osm_min_candidates: int = 5
    allow_synthetic_candidates: bool = False
    min_viable_candidates: int = 3
    top_n: int = 10
    dedupe_threshold_meters: float = 50.0
    source_timeout: float = 10.0
    allowed_origins: tuple[str, ...] = ("*",)

    @property
    def custom_store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        if env is None:
            load_dotenv()
            env = os.environ

        osm_mode = (env.get("EXCURSION_OSM_MODE") or "always").strip().lower()
        if osm_mode not in ("always", "when_sparse"):
            osm_mode = "always"

        raw_origins = env.get("EXCURSION_ENGINE_ALLOWED_ORIGINS") or "*"
        origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip()) or ("*",)

        return cls(
            supabase_url=env.get("SUPABASE_URL") or None,
            supabase_key=env.get("SUPABASE_SERVICE_ROLE_KEY") or env.get("SUPABASE_ANON_KEY") or None,
            overpass_url=env.get("OVERPASS_URL") or OVERPASS_URL,
            google_places_api_key=env.get("GOOGLE_PLACES_API_KEY") or None,
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            llm_model=env.get("EXCURSION_ENGINE_MODEL") or "gpt-4o-mini",
            osm_mode=osm_mode,  # type: ignore[arg-type]
            osm_min_candidates=_int(env.get("EXCURSION_OSM_MIN_CANDIDATES"), 5),
            allow_synthetic_candidates=_flag(env.get("EXCURSION_ALLOW_SYNTHETIC_CANDIDATES")),
            min_viable_candidates=_int(env.get("EXCURSION_MIN_VIABLE_CANDIDATES"), 3),
            top_n=_int(env.get("EXCURSION_TOP_N"), 10, minimum=1),
            source_timeout=_float(env.get("EXCURSION_SOURCE_TIMEOUT"), 10.0),
            allowed_origins=origins,
        )
