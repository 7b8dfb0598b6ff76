import unittest
from datetime import date

from neuraladapt.exceptions import BudgetExceededError
from neuraladapt.services.usage_budget import UsageBudget


class FakeCalendar:
    def __init__(self, day):
        self.day = day

    def __call__(self):
        return self.day


class TestUsageBudget(unittest.TestCase):

    def setUp(self):
        self.calendar = FakeCalendar(date(2026, 5, 1))
        self.budget = UsageBudget(limit_cents=10, today=self.calendar)

    def test_charges_accumulate(self):
        self.assertEqual(self.budget.charge(4), 4)
        self.assertEqual(self.budget.charge(6), 10)
        self.assertEqual(self.budget.remaining_cents(), 0)

    def test_exceeding_charge_is_rejected_without_spending(self):
        self.budget.charge(8)
        with self.assertRaises(BudgetExceededError) as ctx:
            self.budget.charge(3)

        self.assertEqual(ctx.exception.spent_cents, 11)
        self.assertEqual(ctx.exception.limit_cents, 10)
        self.assertEqual(self.budget.spent_cents, 8)

    def test_counter_resets_on_new_day(self):
        self.budget.charge(10)
        self.calendar.day = date(2026, 5, 2)

        self.assertEqual(self.budget.spent_cents, 0)
        self.assertEqual(self.budget.charge(5), 5)

    def test_snapshot(self):
        self.budget.charge(3)
        self.assertEqual(
            self.budget.snapshot(),
            {"date": "2026-05-01", "cents": 3, "limitCents": 10},
        )

    def test_reset(self):
        self.budget.charge(7)
        self.budget.reset()
        self.assertEqual(self.budget.spent_cents, 0)


if __name__ == '__main__':
    unittest.main()
