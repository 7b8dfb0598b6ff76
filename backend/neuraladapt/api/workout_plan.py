import logging
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse, PlainTextResponse
from sqlalchemy.orm import Session

from neuraladapt.api.deps import get_artifact_dir, get_current_user_id, get_llm_call, get_usage_budget
from neuraladapt.crud import workout_plan as crud_workout_plan
from neuraladapt.database import get_db
from neuraladapt.exceptions import (
    BudgetExceededError,
    ExportError,
    IntakeValidationError,
    LLMServiceError,
    PlanAdherenceError,
    PlanValidationError,
    StorageError,
)
from neuraladapt.schemas.workout import WorkoutRequest
from neuraladapt.schemas.workout_plan import ExportResponse, GenerateWorkoutResponse, StoredWorkoutPlanResponse
from neuraladapt.services import export_service, workout_service
from neuraladapt.services.plan_viewer import render_plan
from neuraladapt.services.usage_budget import UsageBudget

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/workout-plans",
    tags=["Workout Plans"]
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def raise_http_error(e: Exception):
    """Translate application errors into HTTP responses."""
    if isinstance(e, IntakeValidationError):
        raise HTTPException(status_code=422, detail=e.errors or str(e))
    if isinstance(e, PlanAdherenceError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail={"message": str(e), "issues": e.issues})
    if isinstance(e, (PlanValidationError, LLMServiceError)):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if isinstance(e, BudgetExceededError):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    if isinstance(e, StorageError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if isinstance(e, ExportError):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    raise e


def _get_or_404(db: Session, user_id: str, plan_id: str):
    plan = crud_workout_plan.get_workout_plan(db, user_id, plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Workout plan not found")
    return plan


@router.get("/", response_model=List[StoredWorkoutPlanResponse])
def list_plans(
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        return crud_workout_plan.list_workout_plans(db, user_id, limit=limit)
    except StorageError as e:
        raise_http_error(e)


@router.post("/", response_model=StoredWorkoutPlanResponse, status_code=status.HTTP_201_CREATED)
def save_request(
    request: WorkoutRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Save an intake without generating a plan yet."""
    try:
        return crud_workout_plan.create_workout_plan(db, user_id, request)
    except StorageError as e:
        raise_http_error(e)


@router.post("/generate", response_model=GenerateWorkoutResponse, status_code=status.HTTP_201_CREATED)
def generate_plan_endpoint(
    request: WorkoutRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    budget: UsageBudget = Depends(get_usage_budget),
    llm_call=Depends(get_llm_call),
    artifact_dir: str = Depends(get_artifact_dir)
):
    """
    Generate a periodized plan for the intake, store it and export the workbook.
    """
    logger.info(f"Generate workout '{request.program_name}' for user {user_id}")
    try:
        outcome = workout_service.generate_and_store(
            db, user_id, request, budget, llm_call=llm_call, artifact_dir=artifact_dir
        )
    except (IntakeValidationError, PlanValidationError, PlanAdherenceError,
            LLMServiceError, BudgetExceededError, StorageError) as e:
        logger.warning(f"Generation failed: {e}")
        raise_http_error(e)

    return GenerateWorkoutResponse(
        success=True,
        plan=outcome.plan,
        record=StoredWorkoutPlanResponse.model_validate(outcome.record),
        artifact_path=outcome.artifact_path,
        export_error=outcome.export_error,
        attempts=outcome.attempts,
    )


@router.get("/{plan_id}", response_model=StoredWorkoutPlanResponse)
def get_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        return _get_or_404(db, user_id, plan_id)
    except StorageError as e:
        raise_http_error(e)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        crud_workout_plan.delete_workout_plan(db, user_id, plan_id)
    except StorageError as e:
        raise_http_error(e)


@router.post("/{plan_id}/generate", response_model=GenerateWorkoutResponse)
def generate_for_saved_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    budget: UsageBudget = Depends(get_usage_budget),
    llm_call=Depends(get_llm_call),
    artifact_dir: str = Depends(get_artifact_dir)
):
    try:
        outcome = workout_service.generate_for_stored_plan(
            db, user_id, plan_id, budget, llm_call=llm_call, artifact_dir=artifact_dir
        )
    except (IntakeValidationError, PlanValidationError, PlanAdherenceError,
            LLMServiceError, BudgetExceededError, StorageError) as e:
        logger.warning(f"Generation for {plan_id} failed: {e}")
        raise_http_error(e)

    if outcome is None:
        raise HTTPException(status_code=404, detail="Workout plan not found")

    return GenerateWorkoutResponse(
        success=True,
        plan=outcome.plan,
        record=StoredWorkoutPlanResponse.model_validate(outcome.record),
        artifact_path=outcome.artifact_path,
        export_error=outcome.export_error,
        attempts=outcome.attempts,
    )


@router.get("/{plan_id}/view", response_class=PlainTextResponse)
def view_plan(
    plan_id: str,
    week: Optional[int] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        db_plan = _get_or_404(db, user_id, plan_id)
    except StorageError as e:
        raise_http_error(e)

    plan = crud_workout_plan.load_response(db_plan)
    if plan is None:
        raise HTTPException(status_code=409, detail="This plan has not been generated yet")
    try:
        return render_plan(plan, week=week)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{plan_id}/export", response_model=ExportResponse)
def export_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    artifact_dir: str = Depends(get_artifact_dir)
):
    """Write a fresh workbook for the plan. Failure leaves the stored plan untouched."""
    try:
        artifact_path = export_service.export_stored_plan(db, user_id, plan_id, artifact_dir)
    except (ExportError, StorageError) as e:
        raise_http_error(e)

    if artifact_path is None:
        raise HTTPException(status_code=404, detail="Workout plan not found")
    return ExportResponse(artifact_path=artifact_path)


@router.get("/{plan_id}/export")
def download_export(
    plan_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    artifact_dir: str = Depends(get_artifact_dir)
):
    """Share the workbook, exporting it first if it is missing."""
    try:
        db_plan = _get_or_404(db, user_id, plan_id)
        artifact_path = db_plan.artifact_path
        if not artifact_path or not os.path.exists(artifact_path):
            artifact_path = export_service.export_stored_plan(db, user_id, plan_id, artifact_dir)
    except (ExportError, StorageError) as e:
        raise_http_error(e)

    return FileResponse(artifact_path, media_type=XLSX_MEDIA_TYPE, filename=os.path.basename(artifact_path))
