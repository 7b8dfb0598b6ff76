from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from neuraladapt.api.deps import get_current_user_id
from neuraladapt.crud import feature_selection as crud_feature_selection
from neuraladapt.database import get_db
from neuraladapt.exceptions import StorageError
from neuraladapt.schemas.feature_selection import FeatureSelectionResponse, FeatureSelectionUpdate

router = APIRouter(
    prefix="/feature-selections",
    tags=["feature-selections"]
)

@router.get("/", response_model=FeatureSelectionResponse)
def get_my_feature_selections(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        return crud_feature_selection.get_feature_selections(db, user_id)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

@router.patch("/", response_model=FeatureSelectionResponse)
def update_my_feature_selections(
    updates: FeatureSelectionUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Only the flags present in the body change."""
    try:
        return crud_feature_selection.update_feature_selections(db, user_id, updates)
    except StorageError as e:
        # Client should reload the last known-good selections
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
