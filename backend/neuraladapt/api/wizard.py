import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from neuraladapt.api.deps import get_current_user_id, get_wizard_registry
from neuraladapt.crud import workout_plan as crud_workout_plan
from neuraladapt.database import get_db
from neuraladapt.exceptions import WizardBusyError
from neuraladapt.schemas.wizard import (
    WizardAdvanceRequest,
    WizardFieldSchema,
    WizardStateResponse,
    WizardStepSchema,
)
from neuraladapt.schemas.workout import WorkoutRequest
from neuraladapt.services.form_wizard import FormWizard
from neuraladapt.services.intake_wizard import WizardRegistry, completion_handler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wizard", tags=["wizard"])


def _state(wizard: FormWizard) -> WizardStateResponse:
    step = wizard.current_step
    return WizardStateResponse(
        id=wizard.id,
        step_index=wizard.step_index,
        step_count=len(wizard.steps),
        progress=wizard.progress,
        step=WizardStepSchema(
            id=step.id,
            title=step.title,
            description=step.description,
            fields=[WizardFieldSchema(**vars(f)) for f in step.fields],
        ),
        values=wizard.values,
        error=wizard.error,
        is_loading=wizard.is_loading,
        completed=wizard.completed,
        redirect_to=wizard.redirect_to,
        plan_id=wizard.result,
    )


def _get_or_404(registry: WizardRegistry, wizard_id: str) -> FormWizard:
    wizard = registry.get(wizard_id)
    if not wizard:
        raise HTTPException(status_code=404, detail="Wizard not found")
    return wizard


@router.post("/", response_model=WizardStateResponse, status_code=status.HTTP_201_CREATED)
def start_wizard(registry: WizardRegistry = Depends(get_wizard_registry)):
    return _state(registry.create())


@router.get("/{wizard_id}", response_model=WizardStateResponse)
def get_wizard(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry)):
    return _state(_get_or_404(registry, wizard_id))


@router.post("/{wizard_id}/next", response_model=WizardStateResponse)
async def next_step(
    wizard_id: str,
    body: WizardAdvanceRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    registry: WizardRegistry = Depends(get_wizard_registry)
):
    """
    Validate the current step with the submitted values. On the last step the
    intake is saved as a new workout plan (request only).
    """
    wizard = _get_or_404(registry, wizard_id)

    async def save_request(request: WorkoutRequest) -> str:
        record = crud_workout_plan.create_workout_plan(db, user_id, request)
        return record.id

    wizard.on_complete = completion_handler(save_request)
    try:
        await wizard.advance(body.values)
    except WizardBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return _state(wizard)


@router.post("/{wizard_id}/back", response_model=WizardStateResponse)
def previous_step(wizard_id: str, registry: WizardRegistry = Depends(get_wizard_registry)):
    wizard = _get_or_404(registry, wizard_id)
    wizard.back()
    return _state(wizard)
