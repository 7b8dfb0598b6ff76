import unittest
from datetime import date
from unittest.mock import MagicMock, patch

from neuraladapt.exceptions import (
    BudgetExceededError,
    IntakeValidationError,
    LLMServiceError,
    PlanAdherenceError,
    PlanValidationError,
)
from neuraladapt.schemas.workout import WorkoutPlan, WorkoutRequest
from neuraladapt.services import workout_service
from neuraladapt.services.usage_budget import UsageBudget
from neuraladapt.utils.llm_prompts.workout_prompts import WORKOUT_PLAN_RESPONSE_FORMAT
from neuraladapt.utils.utils import make_artifact_id, slugify

from plan_factory import StubLLM, make_plan, make_request


def _budget(limit=800):
    return UsageBudget(limit_cents=limit, today=lambda: date(2026, 3, 1))


class TestIntakeValidation(unittest.TestCase):

    def test_accepts_camel_case_payload(self):
        request = workout_service.validate_intake(make_request())
        self.assertEqual(request.cycle_length_weeks, 8)
        self.assertEqual(request.powerlifting_stats.squat_max, "180kg")

    def test_missing_field_is_rejected(self):
        data = make_request()
        del data["goals"]
        with self.assertRaises(IntakeValidationError) as ctx:
            workout_service.validate_intake(data)
        self.assertTrue(any(err["loc"] == ("goals",) for err in ctx.exception.errors))

    def test_out_of_range_cycle_length_is_rejected(self):
        for weeks in (0, -3, 53):
            with self.assertRaises(IntakeValidationError):
                workout_service.validate_intake(make_request(cycleLengthWeeks=weeks))

    def test_unknown_enum_is_rejected(self):
        with self.assertRaises(IntakeValidationError):
            workout_service.validate_intake(make_request(programType="Forever"))

    def test_training_focus_defaults_to_general_fitness(self):
        data = make_request()
        del data["trainingFocus"]
        request = workout_service.validate_intake(data)
        self.assertEqual(request.training_focus, "General Fitness")


class TestPlanAdherence(unittest.TestCase):

    def setUp(self):
        self.request = WorkoutRequest.model_validate(make_request(cycleLengthWeeks=8, trainingFrequency=4))

    def _issues(self, **kwargs):
        plan = WorkoutPlan.model_validate(make_plan(**kwargs))
        return workout_service.evaluate_plan_adherence(plan, self.request)

    def test_compliant_plan_has_no_issues(self):
        self.assertEqual(self._issues(weeks=8, sessions=4), [])

    def test_missing_week_is_reported(self):
        issues = self._issues(weeks=7, sessions=4, cycle_length_weeks=8)
        self.assertIn("Generated 7 weeks instead of 8.", issues)
        self.assertIn("Missing week number 8 in weeks array.", issues)

    def test_wrong_numbering_is_reported(self):
        issues = self._issues(week_numbers=[1, 2, 3, 4, 5, 6, 7, 9], sessions=4, cycle_length_weeks=8)
        self.assertIn("Missing week number 8 in weeks array.", issues)
        self.assertTrue(any("Week number 9" in issue for issue in issues))

    def test_session_count_mismatch_is_reported_per_week(self):
        issues = self._issues(weeks=8, sessions=3)
        self.assertEqual(len(issues), 8)
        self.assertIn("Week 1 has 3 sessions but expected 4.", issues)

    def test_declared_cycle_length_mismatch(self):
        issues = self._issues(weeks=8, sessions=4, cycle_length_weeks=6)
        self.assertEqual(issues, ["cycleLengthWeeks was 6 but expected 8."])


class TestGenerateWorkoutPlan(unittest.TestCase):

    def test_first_attempt_accepted(self):
        llm = StubLLM(make_plan(weeks=8, sessions=4))
        result = workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm, clock=lambda: 1700000000000)

        self.assertEqual(len(llm.calls), 1)
        self.assertEqual(result.attempts, 1)
        self.assertEqual([w.week for w in result.plan.weeks], list(range(1, 9)))
        self.assertTrue(all(len(w.sessions) == 4 for w in result.plan.weeks))
        self.assertEqual(result.artifact_id, "1700000000000-spring-strength-block")

    def test_prompt_carries_structural_directives(self):
        llm = StubLLM(make_plan(weeks=8, sessions=4))
        workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)

        prompt = llm.calls[0]["prompt"]
        self.assertIn("exactly 8 week entries", prompt)
        self.assertIn("numbered 1 through 8", prompt)
        self.assertIn("exactly 4 session entries", prompt)
        self.assertIn("Add 20kg to my total", prompt)
        self.assertIn("180kg", prompt)
        self.assertIs(llm.calls[0]["format"], WORKOUT_PLAN_RESPONSE_FORMAT)

    def test_seven_week_draft_triggers_one_regeneration(self):
        llm = StubLLM(
            make_plan(weeks=7, sessions=4, cycle_length_weeks=8),
            make_plan(weeks=8, sessions=4),
        )
        result = workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)

        self.assertEqual(len(llm.calls), 2)
        self.assertEqual(result.attempts, 2)
        second_prompt = llm.calls[1]["prompt"]
        self.assertIn("Previous attempt failed validation:", second_prompt)
        self.assertIn("- Generated 7 weeks instead of 8.", second_prompt)
        self.assertTrue(second_prompt.startswith(llm.calls[0]["prompt"]))

    def test_fails_after_second_noncompliant_attempt(self):
        llm = StubLLM(
            make_plan(weeks=8, sessions=3),
            make_plan(weeks=8, sessions=5),
            make_plan(weeks=8, sessions=4),
        )
        with self.assertRaises(PlanAdherenceError) as ctx:
            workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)

        self.assertEqual(len(llm.calls), 2)
        # Issues reported are from the final attempt
        self.assertIn("Week 1 has 5 sessions but expected 4.", ctx.exception.issues)
        self.assertNotIn("Week 1 has 3 sessions but expected 4.", ctx.exception.issues)

    def test_schema_failure_is_not_retried(self):
        broken = make_plan()
        del broken["monitoring"]
        llm = StubLLM(broken, make_plan())
        with self.assertRaises(PlanValidationError):
            workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)
        self.assertEqual(len(llm.calls), 1)

    def test_additional_properties_are_rejected(self):
        extra = make_plan()
        extra["weeks"][0]["bonus"] = "surprise"
        llm = StubLLM(extra)
        with self.assertRaises(PlanValidationError):
            workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)

    def test_missing_nullable_field_is_rejected(self):
        plan = make_plan()
        del plan["weeks"][0]["sessions"][0]["mainLifts"][0]["tempo"]
        with self.assertRaises(PlanValidationError):
            workout_service.parse_workout_plan(workout_service.json.dumps(plan))

    def test_integers_are_not_coerced(self):
        cases = [
            ("cycle length as string", lambda p: p.update(cycleLengthWeeks="8")),
            ("week number as string", lambda p: p["weeks"][0].update(week="1")),
            ("sets as bool", lambda p: p["weeks"][0]["sessions"][0]["mainLifts"][0].update(sets=True)),
            ("reps as bool", lambda p: p["weeks"][0]["sessions"][0]["accessoryWork"][0].update(reps=False)),
            ("deload week as string", lambda p: p["phases"][1].update(deloadWeek="8")),
            ("session minutes as float", lambda p: p["weeks"][0]["sessions"][0].update(sessionMinutes=70.0)),
        ]
        for label, mutate in cases:
            with self.subTest(label):
                plan = make_plan()
                mutate(plan)
                with self.assertRaises(PlanValidationError):
                    workout_service.parse_workout_plan(workout_service.json.dumps(plan))

    def test_string_and_int_reps_are_both_accepted(self):
        plan = make_plan()
        plan["weeks"][0]["sessions"][0]["mainLifts"][0]["reps"] = "5-3-1"
        plan["weeks"][0]["sessions"][0]["mainLifts"][0]["rest"] = 180
        parsed = workout_service.parse_workout_plan(workout_service.json.dumps(plan))
        lift = parsed.weeks[0].sessions[0].main_lifts[0]
        self.assertEqual(lift.reps, "5-3-1")
        self.assertEqual(lift.rest, 180)

    def test_string_integer_draft_is_not_retried(self):
        plan = make_plan()
        plan["cycleLengthWeeks"] = "8"
        llm = StubLLM(plan, make_plan())
        with self.assertRaises(PlanValidationError):
            workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)
        self.assertEqual(len(llm.calls), 1)

    def test_invalid_json_is_a_validation_error(self):
        llm = StubLLM("not json at all")
        with self.assertRaises(PlanValidationError):
            workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)

    def test_code_fenced_json_is_accepted(self):
        fenced = "```json\n" + workout_service.json.dumps(make_plan()) + "\n```"
        plan = workout_service.parse_workout_plan(fenced)
        self.assertEqual(plan.program_name, "Spring Strength Block")

    def test_llm_error_propagates(self):
        llm = StubLLM(LLMServiceError("provider down"))
        with self.assertRaises(LLMServiceError):
            workout_service.generate_workout_plan(make_request(), _budget(), llm_call=llm)

    def test_invalid_intake_never_calls_llm(self):
        llm = StubLLM(make_plan())
        with self.assertRaises(IntakeValidationError):
            workout_service.generate_workout_plan(make_request(trainingFrequency=0), _budget(), llm_call=llm)
        self.assertEqual(llm.calls, [])

    @patch("neuraladapt.services.workout_service.config.ESTIMATED_CALL_CENTS", 2)
    def test_each_attempt_is_charged(self):
        budget = _budget()
        llm = StubLLM(make_plan(weeks=7, cycle_length_weeks=8), make_plan())
        workout_service.generate_workout_plan(make_request(), budget, llm_call=llm)
        self.assertEqual(budget.spent_cents, 4)

    @patch("neuraladapt.services.workout_service.config.ESTIMATED_CALL_CENTS", 2)
    def test_exhausted_budget_fails_before_calling(self):
        budget = _budget(limit=3)
        budget.charge(2)
        llm = StubLLM(make_plan())
        with self.assertRaises(BudgetExceededError):
            workout_service.generate_workout_plan(make_request(), budget, llm_call=llm)
        self.assertEqual(llm.calls, [])
        self.assertEqual(budget.spent_cents, 2)

    @patch("neuraladapt.services.workout_service.config.ESTIMATED_CALL_CENTS", 2)
    def test_budget_runs_out_before_regeneration(self):
        budget = _budget(limit=2)
        llm = StubLLM(make_plan(weeks=7, cycle_length_weeks=8), make_plan())
        with self.assertRaises(BudgetExceededError):
            workout_service.generate_workout_plan(make_request(), budget, llm_call=llm)
        self.assertEqual(len(llm.calls), 1)

    def test_artifact_id_falls_back_to_request_name(self):
        llm = StubLLM(make_plan(program_name=""))
        result = workout_service.generate_workout_plan(
            make_request(programName="My Plan!"), _budget(), llm_call=llm, clock=lambda: 42
        )
        self.assertEqual(result.artifact_id, "42-my-plan")


class TestGenerateForStoredPlan(unittest.TestCase):

    @patch("neuraladapt.services.workout_service.export_service.write_workbook")
    @patch("neuraladapt.services.workout_service.crud_workout_plan")
    def test_plan_deleted_during_generation_returns_none(self, mock_crud, mock_write):
        mock_crud.get_workout_plan.return_value = MagicMock(id="plan-1")
        mock_crud.load_request.return_value = WorkoutRequest.model_validate(make_request())
        mock_crud.attach_plan_response.return_value = None
        llm = StubLLM(make_plan())

        outcome = workout_service.generate_for_stored_plan(
            MagicMock(), "user-a", "plan-1", _budget(), llm_call=llm
        )

        self.assertIsNone(outcome)
        self.assertEqual(len(llm.calls), 1)
        mock_write.assert_not_called()

    @patch("neuraladapt.services.workout_service.crud_workout_plan")
    def test_unknown_plan_returns_none_without_calling(self, mock_crud):
        mock_crud.get_workout_plan.return_value = None
        llm = StubLLM(make_plan())

        self.assertIsNone(workout_service.generate_for_stored_plan(MagicMock(), "user-a", "plan-x", _budget(), llm_call=llm))
        self.assertEqual(llm.calls, [])


class TestSlugify(unittest.TestCase):

    def test_slugify(self):
        self.assertEqual(slugify("  Spring -- Strength!! Block "), "spring-strength-block")
        self.assertEqual(slugify("***"), "")
        self.assertEqual(len(slugify("a" * 100)), 64)

    def test_make_artifact_id(self):
        self.assertEqual(make_artifact_id("Hypertrophy 2.0", 5), "5-hypertrophy-2-0")
        self.assertEqual(make_artifact_id("Base", 0), "0-base")

    @patch("neuraladapt.utils.utils.epoch_millis", return_value=1234)
    def test_make_artifact_id_defaults_to_now(self, _millis):
        self.assertEqual(make_artifact_id("Base"), "1234-base")


if __name__ == '__main__':
    unittest.main()
