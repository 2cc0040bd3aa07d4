# excursion_engine/llm.py
import json
from typing import Any, Dict, Optional, Type, TypeVar

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from excursion_engine.logging_config import get_logger
from excursion_engine.schemas import GuideResponse, PlanOptions, ReflectResponse

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class PlanComposerError(RuntimeError):
    """The narrative collaborator failed, timed out or returned unusable output."""


PLAN_SYSTEM = """You are a nature-therapy excursion planner.
You receive JSON with the user's current state, optional profile, and a ranked list
of candidate nature locations that are already known to be reachable in time.
Build 2-3 excursion options using ONLY those candidates for zones and waypoints.
Respond ONLY in JSON with the schema:
  {"plan_options": [{
     "route_overview": {"title", "description", "total_duration_minutes",
                        "total_distance_km", "difficulty": "easy|moderate|challenging",
                        "terrain_type", "transport_mode"},
     "zones": [{"id", "name", "description", "location": {"latitude", "longitude"},
                "duration_minutes", "activities": [], "nature_elements": [],
                "mindfulness_prompt", "health_benefits": []}],
     "waypoints": [{"latitude", "longitude", "name"}],
     "safety_tips": [], "packing_suggestions": []}]}
Respect the available time and the user's mobility. Do not invent locations.
"""

GUIDE_SYSTEM = """You are guiding a user live through a nature excursion.
Given the selected excursion, the current zone and previous check-ins, respond ONLY in JSON:
  {"phase": "GUIDE", "guidance": {"target_zone_id", "zone_name", "summary",
   "instructions": [], "mindfulness_prompt",
   "check_ins": [{"id", "type": "scale|text", "label", "min", "max"}],
   "next_action": "continue|end_segment|end_excursion", "safety_reminders": []}}
Keep instructions short, calm and concrete.
"""

REFLECT_SYSTEM = """You help a user reflect after a nature excursion.
Given the session summary, respond ONLY in JSON:
  {"phase": "REFLECT", "reflection": {
     "quantitative_questions": [{"id", "label", "min", "max"}],
     "qualitative_questions": [{"id", "label", "hint"}],
     "closing_prompt"}}
Ask 2-3 scale questions and 2-3 open questions.
"""


class PlanComposer:
    """JSON-in/JSON-out wrapper around the hosted chat model."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        *,
        client: Any = None,
        timeout: float = 60.0,
    ):
        self.model = model
        if client is not None:
            self._client = client
        elif api_key:
            self._client = OpenAI(api_key=api_key, timeout=timeout)
        else:
            self._client = None
            logger.warning("OPENAI_API_KEY not set; plan composition will fail until configured")

    @property
    def available(self) -> bool:
        return self._client is not None

    def compose_plan(self, context: Dict[str, Any]) -> PlanOptions:
        return self._complete(PLAN_SYSTEM, {"phase": "PLAN", **context}, PlanOptions)

    def guide(self, context: Dict[str, Any]) -> GuideResponse:
        return self._complete(GUIDE_SYSTEM, {"phase": "GUIDE", **context}, GuideResponse)

    def reflect(self, context: Dict[str, Any]) -> ReflectResponse:
        return self._complete(REFLECT_SYSTEM, {"phase": "REFLECT", **context}, ReflectResponse)

    def _complete(self, system_prompt: str, context: Dict[str, Any], schema: Type[ModelT]) -> ModelT:
        if self._client is None:
            raise PlanComposerError("Plan composer is not configured")

        phase = context.get("phase")
        logger.info("Invoking LLM model %s for %s phase", self.model, phase)
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": json.dumps(context, default=str)},
                ],
                temperature=0.4,
                response_format={"type": "json_object"},
            )
            raw = resp.choices[0].message.content
        except OpenAIError as exc:
            logger.warning("LLM call failed for %s phase", phase, exc_info=True)
            raise PlanComposerError(f"LLM call failed: {exc}") from exc

        try:
            payload = json.loads(raw or "")
        except ValueError as exc:
            logger.warning("LLM response for %s phase was not valid JSON", phase)
            raise PlanComposerError("LLM returned invalid JSON") from exc

        try:
            parsed = schema.model_validate(payload)
        except ValidationError as exc:
            logger.warning("LLM response for %s phase did not match the expected schema", phase)
            raise PlanComposerError("LLM returned an unexpected structure") from exc

        logger.info("LLM %s payload parsed successfully", phase)
        return parsed
