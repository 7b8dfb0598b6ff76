import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from neuraladapt.exceptions import StorageError
from neuraladapt.models.feature_selection import FeatureSelection
from neuraladapt.schemas.feature_selection import FeatureSelectionUpdate
from neuraladapt.utils.utils import now

logger = logging.getLogger(__name__)

DEFAULT_SELECTION_ID = "default"
DEFAULT_FEATURES = {
    "workout_programmer": True,
    "journaling": False,
    "calendar": False,
}

def default_feature_selection(user_id: str) -> FeatureSelection:
    """Unsaved record returned before the user has toggled anything."""
    return FeatureSelection(
        id=DEFAULT_SELECTION_ID,
        user_id=user_id,
        updated_at=now(),
        **DEFAULT_FEATURES
    )

def get_by_user_id(db: Session, user_id: str):
    try:
        return db.query(FeatureSelection).filter(FeatureSelection.user_id == user_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load feature selections for {user_id}: {e}")
        raise StorageError("Could not load feature selections.") from e

def get_feature_selections(db: Session, user_id: str) -> FeatureSelection:
    return get_by_user_id(db, user_id) or default_feature_selection(user_id)

def update_feature_selections(db: Session, user_id: str, obj_in: FeatureSelectionUpdate) -> FeatureSelection:
    """
    Partial update: only flags present in obj_in change. The row is created
    from the defaults on first write. updated_at is always refreshed.
    """
    db_obj = get_by_user_id(db, user_id)
    if not db_obj:
        db_obj = FeatureSelection(id=f"features-{user_id}", user_id=user_id, **DEFAULT_FEATURES)
        db.add(db_obj)

    update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)
    db_obj.updated_at = now()

    try:
        db.commit()
        db.refresh(db_obj)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update feature selections for {user_id}: {e}")
        raise StorageError("Could not update feature selections.") from e

    logger.info(f"Feature selections for {user_id} updated: {update_data}")
    return db_obj
