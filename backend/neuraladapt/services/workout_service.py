import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from neuraladapt import config
from neuraladapt.crud import workout_plan as crud_workout_plan
from neuraladapt.exceptions import (
    ExportError,
    IntakeValidationError,
    PlanAdherenceError,
    PlanValidationError,
)
from neuraladapt.models.stored_workout_plan import StoredWorkoutPlan
from neuraladapt.schemas.workout import WorkoutPlan, WorkoutRequest
from neuraladapt.services import export_service, llm_service
from neuraladapt.services.usage_budget import UsageBudget
from neuraladapt.utils.llm_prompts.workout_prompts import (
    WORKOUT_PLAN_CORRECTION_PROMPT,
    WORKOUT_PLAN_PROMPT,
    WORKOUT_PLAN_RESPONSE_FORMAT,
    WORKOUT_SYSTEM_PROMPT,
)
from neuraladapt.utils.utils import epoch_millis, make_artifact_id

logger = logging.getLogger(__name__)

"""
Workout Service
---------------
Orchestrates the generation of Workout Plans.
1. Validates the intake.
2. Builds the prompt with explicit week/session directives.
3. Calls the LLM with a strict JSON schema (charging the usage budget first).
4. Validates the JSON against the plan schema (hard failure, never retried).
5. Checks structural adherence; regenerates once with the discrepancies.
6. Persists the plan and exports the spreadsheet artifact.
"""

MAX_GENERATION_ATTEMPTS = 2

# (system_prompt, user_prompt, response_format) -> raw JSON text
LLMCall = Callable[[str, str, Dict[str, Any]], str]


@dataclass
class GenerationResult:
    plan: WorkoutPlan
    artifact_id: str
    attempts: int


@dataclass
class StoredGeneration:
    record: StoredWorkoutPlan
    plan: WorkoutPlan
    attempts: int
    artifact_path: Optional[str] = None
    export_error: Optional[str] = None


def validate_intake(raw: Union[WorkoutRequest, Dict[str, Any]]) -> WorkoutRequest:
    if isinstance(raw, WorkoutRequest):
        return raw
    try:
        return WorkoutRequest.model_validate(raw)
    except ValidationError as e:
        raise IntakeValidationError(
            f"Invalid workout request: {e.error_count()} problem(s)",
            errors=e.errors(include_url=False, include_context=False),
        ) from e


def build_workout_prompt(request: WorkoutRequest) -> str:
    stats = "N/A"
    if request.powerlifting_stats:
        stats = json.dumps(request.powerlifting_stats.model_dump(by_alias=True, exclude_none=True))

    return WORKOUT_PLAN_PROMPT.format(
        program_name=request.program_name,
        program_type=request.program_type,
        cycle_length_weeks=request.cycle_length_weeks,
        training_focus=request.training_focus,
        session_length_minutes=request.session_length_minutes,
        goals=request.goals,
        equipment=request.equipment,
        training_frequency=request.training_frequency,
        injuries=request.injuries or "None",
        experience_level=request.experience_level,
        start_date=request.start_date,
        powerlifting_stats=stats,
    )


def build_correction_prompt(base_prompt: str, issues: List[str]) -> str:
    feedback = "\n".join(f"- {issue}" for issue in issues)
    return WORKOUT_PLAN_CORRECTION_PROMPT.format(base_prompt=base_prompt, feedback=feedback)


def _strip_code_fences(text: str) -> str:
    cleaned_text = text.strip()
    if "```json" in cleaned_text:
        cleaned_text = cleaned_text.split("```json", 1)[1].split("```")[0].strip()
    elif cleaned_text.startswith("```"):
        cleaned_text = cleaned_text.strip("`").strip()
    return cleaned_text


def parse_workout_plan(raw_json: str) -> WorkoutPlan:
    """Parse the LLM output and validate it against the plan schema."""
    try:
        data = json.loads(_strip_code_fences(raw_json))
    except json.JSONDecodeError as e:
        raise PlanValidationError(f"LLM output is not valid JSON: {e}") from e

    try:
        return WorkoutPlan.model_validate(data)
    except ValidationError as e:
        raise PlanValidationError(f"Generated plan failed schema validation: {e}") from e


def evaluate_plan_adherence(plan: WorkoutPlan, request: WorkoutRequest) -> List[str]:
    """
    Compare the plan's structure against what was asked for. Returns one
    message per discrepancy; an empty list means the plan is compliant.
    """
    issues = []
    expected_weeks = request.cycle_length_weeks
    expected_sessions = request.training_frequency

    if plan.cycle_length_weeks != expected_weeks:
        issues.append(f"cycleLengthWeeks was {plan.cycle_length_weeks} but expected {expected_weeks}.")

    if len(plan.weeks) != expected_weeks:
        issues.append(f"Generated {len(plan.weeks)} weeks instead of {expected_weeks}.")

    provided_numbers = {week.week for week in plan.weeks}
    for week_number in range(1, expected_weeks + 1):
        if week_number not in provided_numbers:
            issues.append(f"Missing week number {week_number} in weeks array.")

    for week in plan.weeks:
        if week.week > expected_weeks:
            issues.append(f"Week number {week.week} is outside the {expected_weeks}-week cycle.")
        if len(week.sessions) != expected_sessions:
            issues.append(
                f"Week {week.week} has {len(week.sessions)} sessions but expected {expected_sessions}."
            )

    return issues


def generate_workout_plan(
    raw_request: Union[WorkoutRequest, Dict[str, Any]],
    budget: UsageBudget,
    llm_call: Optional[LLMCall] = None,
    clock: Callable[[], int] = epoch_millis
) -> GenerationResult:
    """
    Generate a plan for the request, regenerating once with corrective
    feedback if the first draft has the wrong week/session structure.
    """
    request = validate_intake(raw_request)
    llm_call = llm_call or llm_service.call_llm_structured

    base_prompt = build_workout_prompt(request)
    prompt = base_prompt
    issues: List[str] = []

    for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
        budget.charge(config.ESTIMATED_CALL_CENTS)
        logger.info(f"Generating '{request.program_name}' (attempt {attempt}/{MAX_GENERATION_ATTEMPTS})")

        raw_json = llm_call(WORKOUT_SYSTEM_PROMPT, prompt, WORKOUT_PLAN_RESPONSE_FORMAT)
        candidate = parse_workout_plan(raw_json)
        issues = evaluate_plan_adherence(candidate, request)

        if not issues:
            artifact_id = make_artifact_id(candidate.program_name or request.program_name, clock())
            logger.info(f"Accepted plan '{candidate.program_name}' after {attempt} attempt(s)")
            return GenerationResult(plan=candidate, artifact_id=artifact_id, attempts=attempt)

        logger.warning(f"Attempt {attempt} failed structural checks: {issues}")
        prompt = build_correction_prompt(base_prompt, issues)

    raise PlanAdherenceError(issues)


def _export(db: Session, user_id: str, record: StoredWorkoutPlan, plan: WorkoutPlan,
            artifact_id: str, artifact_dir: Optional[str]):
    """Returns (artifact_path, export_error). The stored plan is kept either way."""
    try:
        artifact_path = export_service.write_workbook(plan, artifact_id, artifact_dir or config.ARTIFACT_DIR)
    except ExportError as e:
        logger.warning(f"Export failed for {record.id}: {e}")
        return None, str(e)

    crud_workout_plan.attach_plan_response(db, user_id, record.id, artifact_path=artifact_path)
    return artifact_path, None


def generate_and_store(
    db: Session,
    user_id: str,
    raw_request: Union[WorkoutRequest, Dict[str, Any]],
    budget: UsageBudget,
    llm_call: Optional[LLMCall] = None,
    artifact_dir: Optional[str] = None
) -> StoredGeneration:
    request = validate_intake(raw_request)
    result = generate_workout_plan(request, budget, llm_call=llm_call)

    record = crud_workout_plan.create_workout_plan(db, user_id, request, response=result.plan)
    artifact_path, export_error = _export(db, user_id, record, result.plan, result.artifact_id, artifact_dir)

    return StoredGeneration(
        record=record,
        plan=result.plan,
        attempts=result.attempts,
        artifact_path=artifact_path,
        export_error=export_error,
    )


def generate_for_stored_plan(
    db: Session,
    user_id: str,
    plan_id: str,
    budget: UsageBudget,
    llm_call: Optional[LLMCall] = None,
    artifact_dir: Optional[str] = None
) -> Optional[StoredGeneration]:
    """Run generation for a request saved earlier (e.g. by the intake wizard)."""
    record = crud_workout_plan.get_workout_plan(db, user_id, plan_id)
    if not record:
        return None

    request = crud_workout_plan.load_request(record)
    result = generate_workout_plan(request, budget, llm_call=llm_call)

    record = crud_workout_plan.attach_plan_response(db, user_id, plan_id, response=result.plan)
    if not record:
        # Deleted while the plan was being generated
        logger.warning(f"Workout plan {plan_id} disappeared before the response could be attached")
        return None

    artifact_path, export_error = _export(db, user_id, record, result.plan, result.artifact_id, artifact_dir)

    return StoredGeneration(
        record=record,
        plan=result.plan,
        attempts=result.attempts,
        artifact_path=artifact_path,
        export_error=export_error,
    )
