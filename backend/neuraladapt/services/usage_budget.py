import logging
from datetime import date
from typing import Callable, Dict, Optional

from neuraladapt.exceptions import BudgetExceededError

logger = logging.getLogger(__name__)


class UsageBudget:
    """
    Date-scoped spend counter for LLM calls.

    One instance is created at startup and passed to whatever issues calls;
    tests build their own. The counter resets itself the first time it is
    touched on a new day.
    """

    def __init__(self, limit_cents: int, today: Callable[[], date] = date.today):
        self.limit_cents = limit_cents
        self._today = today
        self._date = today()
        self._cents = 0

    def _roll_over(self):
        current = self._today()
        if current != self._date:
            logger.info(f"Usage budget reset for {current} (spent {self._cents} cents on {self._date})")
            self._date = current
            self._cents = 0

    def charge(self, cents: int) -> int:
        """
        Record an estimated spend before a call is issued. Raises
        BudgetExceededError without charging when the ceiling would be passed.
        """
        self._roll_over()
        projected = self._cents + cents
        if projected > self.limit_cents:
            logger.warning(f"Daily LLM budget exhausted: {projected} > {self.limit_cents} cents")
            raise BudgetExceededError(projected, self.limit_cents)
        self._cents = projected
        return self._cents

    @property
    def spent_cents(self) -> int:
        self._roll_over()
        return self._cents

    def remaining_cents(self) -> int:
        return max(self.limit_cents - self.spent_cents, 0)

    def reset(self, on: Optional[date] = None):
        self._date = on or self._today()
        self._cents = 0

    def snapshot(self) -> Dict:
        self._roll_over()
        return {
            "date": self._date.isoformat(),
            "cents": self._cents,
            "limitCents": self.limit_cents,
        }
