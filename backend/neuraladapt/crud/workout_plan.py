import logging
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from neuraladapt.exceptions import StorageError
from neuraladapt.models.stored_workout_plan import StoredWorkoutPlan
from neuraladapt.schemas.workout import WorkoutPlan, WorkoutRequest
from neuraladapt.utils.utils import generate_plan_id, now

logger = logging.getLogger(__name__)

"""
Workout Plan CRUD
-----------------
Pure Database Access Object for stored plans. Every query is scoped to the
owning user. Generation lives in neuraladapt.services.workout_service.
"""

def _dump(payload) -> dict:
    return payload.model_dump(by_alias=True, mode="json")

def list_workout_plans(db: Session, user_id: str, limit: Optional[int] = None) -> List[StoredWorkoutPlan]:
    """Plans for a user, newest first."""
    try:
        query = db.query(StoredWorkoutPlan).filter(
            StoredWorkoutPlan.user_id == user_id
        ).order_by(StoredWorkoutPlan.created_at.desc(), StoredWorkoutPlan.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list workout plans for {user_id}: {e}")
        raise StorageError("Could not load workout plans.") from e

def get_workout_plan(db: Session, user_id: str, plan_id: str) -> Optional[StoredWorkoutPlan]:
    """Returns None when the plan does not exist or belongs to someone else."""
    try:
        return db.query(StoredWorkoutPlan).filter(
            and_(
                StoredWorkoutPlan.id == plan_id,
                StoredWorkoutPlan.user_id == user_id
            )
        ).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load workout plan {plan_id}: {e}")
        raise StorageError("Could not load workout plan.") from e

def create_workout_plan(
    db: Session,
    user_id: str,
    request: WorkoutRequest,
    response: Optional[WorkoutPlan] = None,
    artifact_path: Optional[str] = None
) -> StoredWorkoutPlan:
    timestamp = now()
    db_plan = StoredWorkoutPlan(
        id=generate_plan_id(),
        user_id=user_id,
        program_name=request.program_name,
        request_payload=_dump(request),
        response_payload=_dump(response) if response else None,
        artifact_path=artifact_path,
        created_at=timestamp,
        updated_at=timestamp,
    )
    try:
        db.add(db_plan)
        db.commit()
        db.refresh(db_plan)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save workout plan '{request.program_name}': {e}")
        raise StorageError("Could not save workout plan.") from e

    logger.info(f"Saved workout plan {db_plan.id} for user {user_id}")
    return db_plan

def attach_plan_response(
    db: Session,
    user_id: str,
    plan_id: str,
    response: Optional[WorkoutPlan] = None,
    artifact_path: Optional[str] = None
) -> Optional[StoredWorkoutPlan]:
    """
    Attach the generated plan and/or exported artifact to an existing record.
    The request payload is never touched.
    """
    db_plan = get_workout_plan(db, user_id, plan_id)
    if not db_plan:
        return None

    if response is not None:
        db_plan.response_payload = _dump(response)
    if artifact_path is not None:
        db_plan.artifact_path = artifact_path
    db_plan.updated_at = now()

    try:
        db.commit()
        db.refresh(db_plan)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update workout plan {plan_id}: {e}")
        raise StorageError("Could not update workout plan.") from e
    return db_plan

def delete_workout_plan(db: Session, user_id: str, plan_id: str) -> None:
    """No-op when the plan is absent or not owned by user_id."""
    db_plan = get_workout_plan(db, user_id, plan_id)
    if not db_plan:
        return

    try:
        db.delete(db_plan)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete workout plan {plan_id}: {e}")
        raise StorageError("Could not delete workout plan.") from e

    logger.info(f"Deleted workout plan {plan_id}")

def load_request(db_plan: StoredWorkoutPlan) -> WorkoutRequest:
    return WorkoutRequest.model_validate(db_plan.request_payload)

def load_response(db_plan: StoredWorkoutPlan) -> Optional[WorkoutPlan]:
    if not db_plan.response_payload:
        return None
    return WorkoutPlan.model_validate(db_plan.response_payload)
