from fastapi import Request

from neuraladapt import config
from neuraladapt.services import llm_service
from neuraladapt.services.intake_wizard import WizardRegistry
from neuraladapt.services.usage_budget import UsageBudget


def get_current_user_id() -> str:
    # Single demo user; every record is scoped to it
    return config.DEFAULT_USER_ID

def get_usage_budget(request: Request) -> UsageBudget:
    return request.app.state.usage_budget

def get_wizard_registry(request: Request) -> WizardRegistry:
    return request.app.state.wizards

def get_llm_call():
    return llm_service.call_llm_structured

def get_artifact_dir() -> str:
    return config.ARTIFACT_DIR
