from pydantic import ConfigDict
from typing import List, Optional
from datetime import datetime

from neuraladapt.schemas.workout import CamelModel, WorkoutPlan, WorkoutRequest


class StoredWorkoutPlanResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    program_name: str
    request_payload: WorkoutRequest
    response_payload: Optional[WorkoutPlan] = None
    artifact_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GenerateWorkoutResponse(CamelModel):
    success: bool
    plan: WorkoutPlan
    record: StoredWorkoutPlanResponse
    artifact_path: Optional[str] = None
    export_error: Optional[str] = None
    attempts: int


class ExportResponse(CamelModel):
    artifact_path: str


class GenerationFailure(CamelModel):
    detail: str
    issues: List[str] = []
