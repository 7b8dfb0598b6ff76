import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from neuraladapt.schemas.workout import (
    PROGRAM_TYPE_OPTIONS,
    TRAINING_FOCUS_OPTIONS,
    PowerliftingStats,
    ProgramType,
    TrainingFocus,
    WorkoutRequest,
)
from neuraladapt.services.form_wizard import FormWizard, StepContext, WizardField, WizardStep

logger = logging.getLogger(__name__)

"""
Intake Wizard
-------------
The three-step form that collects a WorkoutRequest:
1. Basic Information
2. Training Details
3. Goals & Constraints
On completion the merged values become a WorkoutRequest and are saved.
"""

DASHBOARD_ROUTE = "/dashboard"

# Fallbacks applied when composing the final request
REQUEST_DEFAULTS = {
    "programName": "Untitled Program",
    "trainingFocus": "General Fitness",
    "programType": "Mesocycle",
    "cycleLengthWeeks": 8,
    "sessionLengthMinutes": 60,
    "experienceLevel": "Intermediate",
    "goals": "",
    "equipment": "",
    "trainingFrequency": 3,
}


class _StepModel(BaseModel):
    # Shared form state holds every step's keys, so ignore the others
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BasicInfoValues(_StepModel):
    program_name: str = Field(..., min_length=1)
    training_focus: TrainingFocus
    program_type: ProgramType
    cycle_length_weeks: int = Field(..., ge=1, le=52)


class TrainingDetailsValues(_StepModel):
    training_frequency: int = Field(..., ge=1, le=7)
    session_length_minutes: int = Field(..., ge=15, le=180)
    experience_level: str = Field(..., min_length=1)
    equipment: str = Field(..., min_length=1)


class GoalsValues(_StepModel):
    goals: str = Field(..., min_length=1)
    injuries: Optional[str] = None
    powerlifting_stats: Optional[PowerliftingStats] = None


FIELD_LABELS = {
    "programName": "Program name",
    "trainingFocus": "Training focus",
    "programType": "Program type",
    "cycleLengthWeeks": "Cycle length",
    "trainingFrequency": "Training frequency",
    "sessionLengthMinutes": "Session length",
    "experienceLevel": "Experience level",
    "equipment": "Equipment information",
    "goals": "Training goals",
    "injuries": "Injuries",
    "powerliftingStats": "Powerlifting stats",
}


def _messages(error: ValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        key = str(err["loc"][0]) if err["loc"] else ""
        label = FIELD_LABELS.get(key, key)
        if err["type"] == "missing":
            messages.append(f"{label} is required")
        else:
            messages.append(f"{label}: {err['msg']}")
    return messages


def _blank_to_none(values: Dict[str, Any]) -> Dict[str, Any]:
    # Empty inputs count as missing
    return {k: (None if isinstance(v, str) and not v.strip() else v) for k, v in values.items()}


def _fold_dotted(values: Dict[str, Any]) -> Dict[str, Any]:
    """{"powerliftingStats.squatMax": "180kg"} -> {"powerliftingStats": {"squatMax": "180kg"}}"""
    folded: Dict[str, Any] = {}
    for key, value in _blank_to_none(values).items():
        if value is None:
            continue
        if "." in key:
            parent, child = key.split(".", 1)
            nested = folded.setdefault(parent, {})
            if isinstance(nested, dict):
                nested[child] = value
        elif isinstance(value, dict) and isinstance(folded.get(key), dict):
            folded[key] = {**value, **folded[key]}
        else:
            folded[key] = dict(value) if isinstance(value, dict) else value
    return folded


def step_validator(model: Type[_StepModel]) -> Callable[[StepContext], Awaitable[bool]]:
    """Predicate that validates the step's fields and writes the cleaned values back."""
    async def validate(ctx: StepContext) -> bool:
        candidate = _fold_dotted(ctx.values)
        try:
            parsed = model.model_validate(candidate)
        except ValidationError as e:
            ctx.errors.extend(_messages(e))
            return False
        ctx.values.update(parsed.model_dump(by_alias=True, exclude_none=True))
        return True
    return validate


def build_intake_steps() -> List[WizardStep]:
    return [
        WizardStep(
            id="basic",
            title="Basic Information",
            description="Set up the foundation of your workout program",
            fields=[
                WizardField("programName", "Program Name", required=True),
                WizardField("trainingFocus", "Training Focus", kind="select", required=True,
                            options=TRAINING_FOCUS_OPTIONS),
                WizardField("programType", "Program Type", kind="select", required=True,
                            options=PROGRAM_TYPE_OPTIONS),
                WizardField("cycleLengthWeeks", "Cycle Length", kind="number", required=True,
                            minimum=1, maximum=52, suffix="weeks"),
            ],
            validate=step_validator(BasicInfoValues),
        ),
        WizardStep(
            id="details",
            title="Training Details",
            description="Configure your training schedule and preferences",
            fields=[
                WizardField("trainingFrequency", "Training Frequency", kind="number", required=True,
                            minimum=1, maximum=7, suffix="sessions/week"),
                WizardField("sessionLengthMinutes", "Session Length", kind="number", required=True,
                            minimum=15, maximum=180, suffix="minutes"),
                WizardField("experienceLevel", "Experience Level", required=True,
                            placeholder="e.g., Beginner, Intermediate, Advanced"),
                WizardField("equipment", "Available Equipment", kind="textarea", required=True,
                            placeholder="List the equipment you have access to..."),
            ],
            validate=step_validator(TrainingDetailsValues),
        ),
        WizardStep(
            id="goals",
            title="Goals & Constraints",
            description="Tell us about your fitness goals and any limitations",
            fields=[
                WizardField("goals", "Training Goals", kind="textarea", required=True,
                            placeholder="What do you want to achieve with this program?"),
                WizardField("injuries", "Injuries or Limitations (Optional)", kind="textarea",
                            placeholder="Any injuries or physical limitations to consider..."),
                WizardField("powerliftingStats.squatMax", "Squat Max (Optional)"),
                WizardField("powerliftingStats.benchMax", "Bench Max (Optional)"),
                WizardField("powerliftingStats.deadliftMax", "Deadlift Max (Optional)"),
            ],
            validate=step_validator(GoalsValues),
        ),
    ]


def initial_values(today: Optional[date] = None) -> Dict[str, Any]:
    return {
        "trainingFocus": "General Fitness",
        "startDate": (today or date.today()).isoformat(),
    }


def compose_request(values: Dict[str, Any]) -> WorkoutRequest:
    """Merge the collected fields over the defaults into a WorkoutRequest."""
    known = {f.alias for f in WorkoutRequest.model_fields.values()}
    merged = dict(REQUEST_DEFAULTS)
    merged["startDate"] = date.today().isoformat()
    for key, value in _fold_dotted(values).items():
        if key in known:
            merged[key] = value
    return WorkoutRequest.model_validate(merged)


def create_intake_wizard(
    save_request: Optional[Callable[[WorkoutRequest], Awaitable[Any]]] = None,
    today: Optional[date] = None
) -> FormWizard:
    wizard = FormWizard(
        steps=build_intake_steps(),
        initial_values=initial_values(today),
        redirect_to=DASHBOARD_ROUTE,
    )
    if save_request is not None:
        wizard.on_complete = completion_handler(save_request)
    return wizard


def completion_handler(save_request: Callable[[WorkoutRequest], Awaitable[Any]]):
    async def on_complete(values: Dict[str, Any]):
        request = compose_request(values)
        logger.info(f"Intake complete for '{request.program_name}'")
        return await save_request(request)
    return on_complete


class WizardRegistry:
    """Process-local store of in-progress wizards, keyed by id."""

    def __init__(self):
        self._wizards: Dict[str, FormWizard] = {}

    def create(self, **kwargs) -> FormWizard:
        wizard = create_intake_wizard(**kwargs)
        self._wizards[wizard.id] = wizard
        return wizard

    def get(self, wizard_id: str) -> Optional[FormWizard]:
        return self._wizards.get(wizard_id)

    def discard(self, wizard_id: str) -> None:
        self._wizards.pop(wizard_id, None)

    def __len__(self):
        return len(self._wizards)
