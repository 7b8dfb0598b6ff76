import asyncio
import unittest

from neuraladapt.exceptions import WizardBusyError
from neuraladapt.services.form_wizard import DEFAULT_STEP_ERROR, FormWizard, WizardField, WizardStep


def _require(field_name):
    async def validate(ctx):
        if not ctx.values.get(field_name):
            ctx.errors.append(f"{field_name} is required")
            return False
        return True
    return validate


async def _always_false(ctx):
    return False


async def _explode(ctx):
    raise RuntimeError("validator crashed")


def _step(step_id, validate):
    return WizardStep(id=step_id, title=step_id.title(), description="", fields=[WizardField(step_id, step_id)], validate=validate)


class TestFormWizard(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.completed_with = []

        async def on_complete(values):
            self.completed_with.append(values)
            return "plan-123"

        self.wizard = FormWizard(
            steps=[_step("one", _require("one")), _step("two", _require("two")), _step("three", _require("three"))],
            on_complete=on_complete,
            redirect_to="/dashboard",
        )

    def test_initial_state(self):
        self.assertEqual(self.wizard.step_index, 0)
        self.assertTrue(self.wizard.is_first_step)
        self.assertFalse(self.wizard.is_last_step)
        self.assertAlmostEqual(self.wizard.progress, 1 / 3)
        self.assertIsNone(self.wizard.error)

    def test_empty_steps_are_rejected(self):
        with self.assertRaises(ValueError):
            FormWizard(steps=[])

    async def test_invalid_step_does_not_advance(self):
        moved = await self.wizard.advance({})

        self.assertFalse(moved)
        self.assertEqual(self.wizard.step_index, 0)
        self.assertEqual(self.wizard.error, "one is required")
        self.assertFalse(self.wizard.is_loading)

    async def test_generic_error_when_predicate_gives_no_message(self):
        wizard = FormWizard(steps=[_step("only", _always_false)])
        await wizard.advance()
        self.assertEqual(wizard.error, DEFAULT_STEP_ERROR)

    async def test_predicate_exception_is_surfaced(self):
        wizard = FormWizard(steps=[_step("only", _explode)])
        moved = await wizard.advance()

        self.assertFalse(moved)
        self.assertEqual(wizard.error, "validator crashed")
        self.assertFalse(wizard.is_loading)
        self.assertFalse(wizard.completed)

    async def test_full_walkthrough_calls_on_complete_once(self):
        self.assertTrue(await self.wizard.advance({"one": "a"}))
        self.assertTrue(await self.wizard.advance({"two": "b"}))
        self.assertTrue(self.wizard.is_last_step)
        self.assertEqual(self.wizard.progress, 1.0)
        self.assertTrue(await self.wizard.advance({"three": "c"}))

        self.assertTrue(self.wizard.completed)
        self.assertEqual(self.wizard.redirect_to, "/dashboard")
        self.assertEqual(self.wizard.result, "plan-123")
        self.assertEqual(self.completed_with, [{"one": "a", "two": "b", "three": "c"}])

        # Further advances are ignored
        self.assertFalse(await self.wizard.advance())
        self.assertEqual(len(self.completed_with), 1)

    async def test_error_clears_when_step_passes(self):
        await self.wizard.advance({})
        self.assertIsNotNone(self.wizard.error)
        await self.wizard.advance({"one": "a"})
        self.assertIsNone(self.wizard.error)

    async def test_back_moves_one_step_and_clears_error(self):
        await self.wizard.advance({"one": "a"})
        await self.wizard.advance({})
        self.assertIsNotNone(self.wizard.error)

        self.wizard.back()
        self.assertEqual(self.wizard.step_index, 0)
        self.assertIsNone(self.wizard.error)
        # Entered values survive navigation
        self.assertEqual(self.wizard.values["one"], "a")

    def test_back_on_first_step_is_noop(self):
        self.wizard.back()
        self.assertEqual(self.wizard.step_index, 0)

    async def test_failed_completion_keeps_wizard_open(self):
        async def failing(values):
            raise RuntimeError("storage unavailable")

        wizard = FormWizard(steps=[_step("only", _require("only"))], on_complete=failing)
        moved = await wizard.advance({"only": "x"})

        self.assertFalse(moved)
        self.assertFalse(wizard.completed)
        self.assertIsNone(wizard.redirect_to)
        self.assertEqual(wizard.error, "storage unavailable")

    async def test_concurrent_advance_is_rejected(self):
        release = asyncio.Event()

        async def slow(ctx):
            await release.wait()
            return True

        wizard = FormWizard(steps=[_step("first", slow), _step("second", _require("second"))])
        pending = asyncio.create_task(wizard.advance())
        await asyncio.sleep(0)
        self.assertTrue(wizard.is_loading)

        with self.assertRaises(WizardBusyError):
            await wizard.advance()

        release.set()
        self.assertTrue(await pending)
        self.assertEqual(wizard.step_index, 1)
        self.assertFalse(wizard.is_loading)


if __name__ == '__main__':
    unittest.main()
