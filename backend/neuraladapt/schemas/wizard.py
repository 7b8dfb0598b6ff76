from pydantic import Field
from typing import Any, Dict, List, Optional

from neuraladapt.schemas.workout import CamelModel


class WizardFieldSchema(CamelModel):
    name: str
    label: str
    kind: str
    required: bool = False
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    suffix: Optional[str] = None
    placeholder: Optional[str] = None
    options: List[str] = []


class WizardStepSchema(CamelModel):
    id: str
    title: str
    description: str
    fields: List[WizardFieldSchema]


class WizardStateResponse(CamelModel):
    id: str
    step_index: int
    step_count: int
    progress: float
    step: WizardStepSchema
    values: Dict[str, Any]
    error: Optional[str] = None
    is_loading: bool
    completed: bool
    redirect_to: Optional[str] = None
    plan_id: Optional[str] = None


class WizardAdvanceRequest(CamelModel):
    values: Dict[str, Any] = Field(default_factory=dict)
