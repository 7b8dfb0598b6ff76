from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional, Union
from datetime import date


class CamelModel(BaseModel):
    """Payloads are camelCase on the wire and snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


TrainingFocus = Literal["General Fitness", "Powerlifting", "Bodybuilding"]
ProgramType = Literal["Microcycle", "Mesocycle", "Macrocycle", "Block"]

TRAINING_FOCUS_OPTIONS = ["General Fitness", "Powerlifting", "Bodybuilding"]
PROGRAM_TYPE_OPTIONS = ["Microcycle", "Mesocycle", "Macrocycle", "Block"]


# --- Intake ---

class PowerliftingStats(CamelModel):
    squat_max: Optional[str] = None
    bench_max: Optional[str] = None
    deadlift_max: Optional[str] = None


class WorkoutRequest(CamelModel):
    program_name: str = Field(..., min_length=1)
    training_focus: TrainingFocus = "General Fitness"
    program_type: ProgramType
    cycle_length_weeks: int = Field(..., ge=1, le=52, description="Weeks in the cycle")
    session_length_minutes: int = Field(..., ge=1, le=240)
    experience_level: str
    start_date: str = Field(..., description="ISO date, YYYY-MM-DD")
    goals: str
    injuries: Optional[str] = None
    equipment: str
    training_frequency: int = Field(..., ge=1, le=7, description="Sessions per week")
    powerlifting_stats: Optional[PowerliftingStats] = None

    @field_validator("start_date")
    @classmethod
    def check_start_date(cls, value: str) -> str:
        try:
            date.fromisoformat(value)
        except ValueError:
            raise ValueError("startDate must be an ISO date (YYYY-MM-DD)")
        return value


# --- Generated plan ---
# Integers are strict: LLM output such as "8" or true is rejected, not coerced

class AthleteProfile(CamelModel):
    summary: str
    primary_goals: List[str] = Field(..., min_length=1)
    constraints: List[str]


class Methodology(CamelModel):
    periodization_model: str
    volume_strategy: str
    intensity_strategy: str
    frequency_strategy: str


class Phase(CamelModel):
    name: str
    start_week: StrictInt = Field(..., ge=1)
    end_week: StrictInt = Field(..., ge=1)
    objectives: List[str] = Field(..., min_length=1)
    key_metrics: List[str] = Field(..., min_length=1)
    deload_week: Optional[StrictInt]


class SessionLift(CamelModel):
    name: str
    sets: StrictInt = Field(..., ge=1)
    reps: Union[StrictStr, StrictInt]
    intensity: str
    rest: Union[StrictStr, StrictInt]
    tempo: Optional[str]
    notes: Optional[str]

    @field_validator("rest")
    @classmethod
    def check_rest(cls, value):
        if isinstance(value, int) and value < 0:
            raise ValueError("rest must be non-negative")
        return value


class AccessoryLift(CamelModel):
    name: str
    sets: StrictInt = Field(..., ge=1)
    reps: Union[StrictStr, StrictInt]
    notes: Optional[str]


class ConditioningBlock(CamelModel):
    modality: str
    duration_minutes: StrictInt = Field(..., gt=0)
    notes: Optional[str]


class WorkoutSession(CamelModel):
    day: str
    emphasis: str
    session_minutes: StrictInt = Field(..., gt=0)
    readiness_cues: List[str] = []
    main_lifts: List[SessionLift] = Field(..., min_length=1)
    accessory_work: List[AccessoryLift] = []
    conditioning: List[ConditioningBlock] = []
    recovery: List[str] = []


class WorkoutWeek(CamelModel):
    week: StrictInt = Field(..., ge=1)
    focus: str
    key_outcomes: List[str] = Field(..., min_length=1)
    sessions: List[WorkoutSession] = Field(..., min_length=1)


class Monitoring(CamelModel):
    readiness_checks: List[str] = Field(..., min_length=1)
    nutrition_focus: List[str] = Field(..., min_length=1)
    recovery_protocols: List[str] = Field(..., min_length=1)


class WorkoutPlan(CamelModel):
    program_name: str
    training_focus: str
    program_type: str
    cycle_length_weeks: StrictInt = Field(..., ge=1)
    start_date: str
    end_date: str
    athlete_profile: AthleteProfile
    methodology: Methodology
    phases: List[Phase] = Field(..., min_length=1)
    weeks: List[WorkoutWeek] = Field(..., min_length=1)
    monitoring: Monitoring
    coaching_notes: List[str] = Field(..., min_length=1)

    def get_week(self, week_number: int) -> Optional[WorkoutWeek]:
        return next((w for w in self.weeks if w.week == week_number), None)
