"""
Error taxonomy
--------------
Every failure the service surfaces maps to one of these. The API routers
translate them into HTTP responses; nothing here rolls back other entities.
"""
from typing import List, Optional


class NeuralAdaptError(Exception):
    """Base class for all application errors."""


class IntakeValidationError(NeuralAdaptError, ValueError):
    """The workout request is missing fields or has out-of-range values."""

    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class PlanValidationError(NeuralAdaptError, ValueError):
    """The generated plan is not valid JSON or breaks the plan schema. Never retried."""


class PlanAdherenceError(NeuralAdaptError):
    """The plan is schema-valid but its week/session structure does not match the request."""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__(
            "Generated plan did not satisfy enforced constraints:\n" + "\n".join(self.issues)
        )


class BudgetExceededError(NeuralAdaptError):
    def __init__(self, spent_cents: int, limit_cents: int):
        self.spent_cents = spent_cents
        self.limit_cents = limit_cents
        super().__init__(
            f"Daily LLM budget exceeded. Spent {spent_cents} cents, limit {limit_cents} cents."
        )


class LLMServiceError(NeuralAdaptError):
    """The LLM provider failed or returned no content."""


class StorageError(NeuralAdaptError):
    """A local store read or write failed."""


class ExportError(NeuralAdaptError):
    """Writing the spreadsheet artifact failed."""


class WizardBusyError(NeuralAdaptError):
    """A step validation is already running for this wizard."""
