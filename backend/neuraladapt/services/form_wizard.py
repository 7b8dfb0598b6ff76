import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from neuraladapt.exceptions import WizardBusyError

logger = logging.getLogger(__name__)

DEFAULT_STEP_ERROR = "Please check the highlighted fields and try again."
UNEXPECTED_ERROR = "An unexpected error occurred"


@dataclass
class WizardField:
    """What a client needs to draw one input."""
    name: str
    label: str
    kind: str = "text"  # text, textarea, number, select
    required: bool = False
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    suffix: Optional[str] = None
    placeholder: Optional[str] = None
    options: List[str] = field(default_factory=list)


@dataclass
class StepContext:
    """Handed to a step predicate: the shared form values and a place for messages."""
    values: Dict[str, Any]
    errors: List[str] = field(default_factory=list)


@dataclass
class WizardStep:
    id: str
    title: str
    description: str
    fields: List[WizardField]
    validate: Callable[[StepContext], Awaitable[bool]]


class FormWizard:
    """
    Ordered, validated multi-step form.

    advance() runs the current step's predicate and only moves forward when it
    passes; the last step hands the merged values to on_complete. back() always
    moves one step back and clears the error.
    """

    def __init__(
        self,
        steps: List[WizardStep],
        on_complete: Optional[Callable[[Dict[str, Any]], Awaitable[Any]]] = None,
        initial_values: Optional[Dict[str, Any]] = None,
        redirect_to: str = "/",
        wizard_id: Optional[str] = None
    ):
        if not steps:
            raise ValueError("A wizard needs at least one step")
        self.id = wizard_id or uuid.uuid4().hex
        self.steps = steps
        self.on_complete = on_complete
        self.values: Dict[str, Any] = dict(initial_values or {})
        self.redirect_to_on_complete = redirect_to

        self.step_index = 0
        self.error: Optional[str] = None
        self.is_loading = False
        self.completed = False
        self.redirect_to: Optional[str] = None
        self.result: Any = None

    @property
    def current_step(self) -> WizardStep:
        return self.steps[self.step_index]

    @property
    def is_first_step(self) -> bool:
        return self.step_index == 0

    @property
    def is_last_step(self) -> bool:
        return self.step_index == len(self.steps) - 1

    @property
    def progress(self) -> float:
        return (self.step_index + 1) / len(self.steps)

    async def advance(self, values: Optional[Dict[str, Any]] = None) -> bool:
        """
        Validate the current step and move on. Returns True when the wizard
        moved forward (or completed), False when it stayed put.
        """
        if self.is_loading:
            raise WizardBusyError("This step is still being validated")
        if self.completed:
            return False

        self.error = None
        self.is_loading = True
        step = self.current_step
        try:
            if values:
                self.values.update(values)

            ctx = StepContext(values=self.values)
            if not await step.validate(ctx):
                self.error = "; ".join(ctx.errors) if ctx.errors else DEFAULT_STEP_ERROR
                logger.info(f"Wizard {self.id}: step '{step.id}' rejected: {self.error}")
                return False

            if self.is_last_step:
                if self.on_complete is not None:
                    self.result = await self.on_complete(dict(self.values))
                self.completed = True
                self.redirect_to = self.redirect_to_on_complete
                logger.info(f"Wizard {self.id} completed")
            else:
                self.step_index += 1
            return True
        except Exception as e:
            # Surface to the user; the step index stays where it was
            logger.warning(f"Wizard {self.id}: step '{step.id}' failed: {e}")
            self.error = str(e) or UNEXPECTED_ERROR
            return False
        finally:
            self.is_loading = False

    def back(self) -> None:
        if self.is_first_step:
            return
        self.error = None
        self.step_index -= 1
