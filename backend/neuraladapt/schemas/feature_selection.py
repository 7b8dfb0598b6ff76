from pydantic import ConfigDict
from typing import Optional
from datetime import datetime

from neuraladapt.schemas.workout import CamelModel


class FeatureSelectionResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    workout_programmer: bool
    journaling: bool
    calendar: bool
    updated_at: datetime


class FeatureSelectionUpdate(CamelModel):
    workout_programmer: Optional[bool] = None
    journaling: Optional[bool] = None
    calendar: Optional[bool] = None
