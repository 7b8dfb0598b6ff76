from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from neuraladapt.api.deps import get_current_user_id, get_usage_budget
from neuraladapt.crud import feature_selection as crud_feature_selection
from neuraladapt.crud import workout_plan as crud_workout_plan
from neuraladapt.database import get_db
from neuraladapt.exceptions import StorageError
from neuraladapt.schemas.feature_selection import FeatureSelectionResponse
from neuraladapt.schemas.workout_plan import StoredWorkoutPlanResponse
from neuraladapt.services.usage_budget import UsageBudget

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_PLAN_LIMIT = 10

@router.get("/")
def get_dashboard_state(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    budget: UsageBudget = Depends(get_usage_budget)
):
    try:
        selections = crud_feature_selection.get_feature_selections(db, user_id)
        plans = crud_workout_plan.list_workout_plans(db, user_id, limit=RECENT_PLAN_LIMIT)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    recent = [StoredWorkoutPlanResponse.model_validate(p).model_dump(by_alias=True, mode="json") for p in plans]
    return {
        "userId": user_id,
        "featureSelections": FeatureSelectionResponse.model_validate(selections).model_dump(by_alias=True, mode="json"),
        "latestWorkoutPlan": recent[0] if recent else None,
        "recentWorkoutPlans": recent,
        "usage": budget.snapshot(),
    }
