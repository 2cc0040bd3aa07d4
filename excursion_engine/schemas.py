from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

EnergyLevel = Literal["low", "medium", "high"]
Mood = Literal["stressed", "anxious", "calm", "energetic", "tired", "happy", "sad"]
Goal = Literal["relax", "recharge", "reflect", "connect", "creativity"]
MobilityLevel = Literal["full", "limited", "assisted"]
FitnessLevel = Literal["beginner", "intermediate", "advanced"]
TravelMode = Literal["walking", "driving"]
TerrainIntensity = Literal["flat", "rolling", "hilly"]
LocationSource = Literal["user_custom", "osm", "map_api"]

# ------- Shared -------
class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

# ------- Request models -------
class CurrentData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: Coordinates
    time_available_minutes: int = Field(..., gt=0)
    energy_level: EnergyLevel
    mood: Mood
    goal: Goal
    weather_forecast_6h: Optional[Any] = None

class HistoricalData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    age: Optional[int] = None
    mobility_level: Optional[MobilityLevel] = None
    weight: Optional[float] = None
    risk_tolerance: Optional[Literal["low", "medium", "high"]] = None
    fitness_level: Optional[FitnessLevel] = None
    preferred_activities: List[str] = Field(default_factory=list)
    excursion_preferences: Optional[Dict[str, Any]] = None

class PlanRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    current_data: CurrentData = Field(..., alias="currentData")
    historical_data: Optional[HistoricalData] = Field(None, alias="historicalData")

class UserContext(BaseModel):
    """Per-request view of the user that the selection engine works from."""

    location: Coordinates
    time_available_minutes: int = Field(..., gt=0)
    energy_level: EnergyLevel
    mood: Mood
    goal: Goal
    mobility_level: Optional[MobilityLevel] = None
    fitness_level: Optional[FitnessLevel] = None

    @classmethod
    def from_request(cls, req: PlanRequest) -> "UserContext":
        current = req.current_data
        history = req.historical_data or HistoricalData()
        return cls(
            location=current.location,
            time_available_minutes=current.time_available_minutes,
            energy_level=current.energy_level,
            mood=current.mood,
            goal=current.goal,
            mobility_level=history.mobility_level,
            fitness_level=history.fitness_level,
        )

class GuideRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    selected_excursion: Dict[str, Any] = Field(..., alias="selectedExcursion")
    current_data: Optional[CurrentData] = Field(None, alias="currentData")
    current_zone_id: Optional[str] = Field(None, alias="currentZoneId")
    previous_check_ins: List[Dict[str, Any]] = Field(default_factory=list, alias="previousCheckIns")

class ReflectRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    session_summary: Dict[str, Any] = Field(default_factory=dict, alias="sessionSummary")

class NewCustomLocation(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    tags: List[str] = Field(default_factory=list)
    terrain_intensity: Optional[TerrainIntensity] = None
    created_by: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("tags")
    @classmethod
    def _normalise_tags(cls, value: List[str]) -> List[str]:
        return sorted({tag.strip().lower() for tag in value if tag and tag.strip()})

# ------- Candidate models -------
class CandidateLocation(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    coordinates: Coordinates
    distance_km: float = Field(..., ge=0)
    estimated_travel_minutes_one_way: float = Field(..., ge=0)
    travel_mode: TravelMode
    tags: List[str] = Field(default_factory=list)
    source: LocationSource
    terrain_intensity: Optional[TerrainIntensity] = None
    synthetic: bool = False
    score: Optional[float] = None

# ------- Composer output models -------
class RouteOverview(BaseModel):
    title: str
    description: str
    total_duration_minutes: float
    total_distance_km: float
    difficulty: Literal["easy", "moderate", "challenging"]
    terrain_type: str = ""
    transport_mode: str = "walking"

class ExcursionZone(BaseModel):
    id: str
    name: str
    description: str = ""
    location: Optional[Coordinates] = None
    duration_minutes: float = 0
    activities: List[str] = Field(default_factory=list)
    nature_elements: List[str] = Field(default_factory=list)
    mindfulness_prompt: str = ""
    health_benefits: List[str] = Field(default_factory=list)

class Waypoint(BaseModel):
    latitude: float
    longitude: float
    name: str = ""

class ExcursionPlanOption(BaseModel):
    route_overview: RouteOverview
    zones: List[ExcursionZone] = Field(default_factory=list)
    waypoints: List[Waypoint] = Field(default_factory=list)
    safety_tips: List[str] = Field(default_factory=list)
    packing_suggestions: List[str] = Field(default_factory=list)

class PlanOptions(BaseModel):
    plan_options: List[ExcursionPlanOption] = Field(default_factory=list)

class GuideCheckIn(BaseModel):
    id: str
    type: Literal["scale", "text"]
    label: str
    min: Optional[int] = None
    max: Optional[int] = None

class Guidance(BaseModel):
    target_zone_id: str
    zone_name: str
    summary: str
    instructions: List[str] = Field(default_factory=list)
    mindfulness_prompt: str = ""
    check_ins: List[GuideCheckIn] = Field(default_factory=list)
    next_action: Literal["continue", "end_segment", "end_excursion"] = "continue"
    safety_reminders: List[str] = Field(default_factory=list)

class GuideResponse(BaseModel):
    phase: Literal["GUIDE"] = "GUIDE"
    guidance: Guidance

class ReflectionScaleQuestion(BaseModel):
    id: str
    label: str
    min: int
    max: int

class ReflectionQuestion(BaseModel):
    id: str
    label: str
    hint: Optional[str] = None

class Reflection(BaseModel):
    quantitative_questions: List[ReflectionScaleQuestion] = Field(default_factory=list)
    qualitative_questions: List[ReflectionQuestion] = Field(default_factory=list)
    closing_prompt: str = ""

class ReflectResponse(BaseModel):
    phase: Literal["REFLECT"] = "REFLECT"
    reflection: Reflection

# ------- Response models -------
class PlanResponse(BaseModel):
    phase: Literal["PLAN"] = "PLAN"
    status: Literal["ok"] = "ok"
    travel_mode: TravelMode
    search_radius_meters: float
    candidates: List[CandidateLocation] = Field(default_factory=list)
    plan_options: List[ExcursionPlanOption] = Field(default_factory=list)

class NoLocationsFound(BaseModel):
    phase: Literal["PLAN"] = "PLAN"
    status: Literal["no_locations_found"] = "no_locations_found"
    reason: Literal["no_candidates", "over_time_budget"]
    message: str
    travel_mode: TravelMode
    search_radius_meters: float
    can_add_location: bool = True

class CandidateSelection(BaseModel):
    """Outcome of the selection stages before the composer is involved."""

    travel_mode: TravelMode
    search_radius_meters: float
    gathered: int = 0
    after_dedupe: int = 0
    within_budget: int = 0
    candidates: List[CandidateLocation] = Field(default_factory=list)
