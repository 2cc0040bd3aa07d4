from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Sequence, Type, TypeVar

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from excursion_engine.config import Settings
from excursion_engine.llm import PlanComposer, PlanComposerError
from excursion_engine.logging_config import get_logger
from excursion_engine.orchestrator import build_sources, plan_excursions
from excursion_engine.schemas import GuideRequest, NewCustomLocation, PlanRequest, ReflectRequest
from excursion_engine.tools.custom_locations import CustomLocationStore, LocationStoreError
from excursion_engine.tools.sources import CandidateSource

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_context=False)) from exc


def create_app(
    settings: Optional[Settings] = None,
    *,
    sources: Optional[Sequence[CandidateSource]] = None,
    composer: Optional[PlanComposer] = None,
    location_store: Optional[CustomLocationStore] = None,
) -> FastAPI:
    """Wire settings, location sources and the composer into a FastAPI app."""
    settings = settings or Settings.from_env()
    sources = list(sources) if sources is not None else build_sources(settings)
    composer = composer or PlanComposer(settings.openai_api_key, settings.llm_model)
    if location_store is None:
        location_store = next((s for s in sources if isinstance(s, CustomLocationStore)), None)

    app = FastAPI(title="Excursion Engine API")
    app.state.settings = settings
    app.state.sources = sources
    app.state.composer = composer
    app.state.location_store = location_store

    # Local development UIs (Expo web, simulators) need CORS; scope it with
    # EXCURSION_ENGINE_ALLOWED_ORIGINS in deployed environments.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "sources": [s.name for s in app.state.sources],
            "composer": bool(app.state.composer.available),
        }

    @app.post("/api/plan")
    async def api_plan(request: Request, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        """PLAN phase: rank nearby spots and turn them into excursion options."""
        plan_req = _validate(PlanRequest, payload)
        state = request.app.state
        try:
            result = await plan_excursions(
                plan_req,
                sources=state.sources,
                composer=state.composer,
                settings=state.settings,
            )
        except PlanComposerError as exc:
            logger.error("Plan composition failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return result.model_dump(mode="json")

    @app.post("/api/guide")
    async def api_guide(request: Request, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        """GUIDE phase: live guidance for the current zone of a running session."""
        guide_req = _validate(GuideRequest, payload)
        context = guide_req.model_dump(mode="json", by_alias=True)
        try:
            guidance = await asyncio.to_thread(request.app.state.composer.guide, context)
        except PlanComposerError as exc:
            logger.error("Guidance failed for session %s: %s", guide_req.session_id, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return guidance.model_dump(mode="json")

    @app.post("/api/reflect")
    async def api_reflect(request: Request, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        """REFLECT phase: post-excursion reflection questions."""
        reflect_req = _validate(ReflectRequest, payload)
        context = reflect_req.model_dump(mode="json", by_alias=True)
        try:
            reflection = await asyncio.to_thread(request.app.state.composer.reflect, context)
        except PlanComposerError as exc:
            logger.error("Reflection failed for session %s: %s", reflect_req.session_id, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return reflection.model_dump(mode="json")

    @app.post("/api/locations", status_code=201)
    async def api_add_location(request: Request, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
        """Contribute a nature spot so future plans can use it."""
        new_location = _validate(NewCustomLocation, payload)
        store: Optional[CustomLocationStore] = request.app.state.location_store
        if store is None:
            raise HTTPException(status_code=503, detail="Custom location store is not configured")
        try:
            record = await store.add(new_location)
        except LocationStoreError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return record.model_dump(mode="json")

    return app


app = create_app()
