WORKOUT_SYSTEM_PROMPT = "You are an elite strength and wellness coach generating periodized training plans."

WORKOUT_PLAN_PROMPT = """Generate a structured workout program in JSON format.
User context:
- Program Name: {program_name}
- Program Type: {program_type}
- Cycle Length: {cycle_length_weeks} weeks (MUST generate exactly {cycle_length_weeks} weeks)
- Training Focus: {training_focus}
- Session Length: {session_length_minutes} minutes
- Goals: {goals}
- Equipment: {equipment}
- Training Frequency: {training_frequency} sessions/week (MUST schedule exactly {training_frequency} sessions in EVERY week)
- Injuries: {injuries}
- Experience: {experience_level}
- Start Date: {start_date}
- Powerlifting Stats: {powerlifting_stats}

Design an elite-level multi-week training plan that aligns with evidence-based methodologies for {training_focus} athletes. Follow these guardrails:
- Set cycleLengthWeeks to exactly {cycle_length_weeks}.
- Produce exactly {cycle_length_weeks} week entries in the weeks array, numbered 1 through {cycle_length_weeks}.
- Each week must contain exactly {training_frequency} session entries in its sessions array.
- Periodize volume and intensity across phases (accumulation, intensification, realization/deload as appropriate).
- Keep sessionMinutes close to {session_length_minutes} without exceeding it significantly.
- Provide main lift prescriptions with sets x reps, precise intensity targets (RPE or %1RM), and note tempo when useful.
- Integrate accessory work, conditioning, and recovery aligned with the athlete's goals, equipment, injuries, and experience level.
- Include readiness monitoring, nutrition priorities, and coaching notes rooted in elite coaching frameworks (e.g., managing MRV, using RPE, monitoring HRV/sleep).
- Ensure phases and weeks align (weeks must cover the entire cycleLengthWeeks window and respect deload timing). Compute an end date consistent with cycle length.
- When a field expects an array but you have no data, respond with an empty array instead of omitting the field.
- Always include the deloadWeek field for each phase; use null when that phase does not include a deload.
- Every main lift entry must include a tempo field; use null if no tempo cue is required.
- Every main lift entry must include a notes field; use null when no coaching note is necessary.
- Accessory and conditioning entries must include a notes field; use null when no note applies.
- For every session, include readinessCues, accessoryWork, conditioning, and recovery arrays; use [] when nothing applies.
- Keep terminology professional and concise so it can be rendered directly in the UI."""

WORKOUT_PLAN_CORRECTION_PROMPT = """{base_prompt}

Previous attempt failed validation:
{feedback}

Regenerate the entire plan so every week count, week numbering, and session totals match the constraints exactly. The next draft must be fully compliant."""


def _nullable(type_name: str) -> dict:
    return {"type": [type_name, "null"]}


_STRING = {"type": "string"}
_STRING_LIST = {"type": "array", "items": _STRING}
_NON_EMPTY_STRING_LIST = {"type": "array", "items": _STRING, "minItems": 1}
_STRING_OR_INT = {"anyOf": [{"type": "string"}, {"type": "integer"}]}


def _object(properties: dict) -> dict:
    # Strict mode: every property is required and nothing else is allowed
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
        "required": list(properties.keys()),
    }


_MAIN_LIFT = _object({
    "name": _STRING,
    "sets": {"type": "integer"},
    "reps": _STRING_OR_INT,
    "intensity": _STRING,
    "rest": _STRING_OR_INT,
    "tempo": _nullable("string"),
    "notes": _nullable("string"),
})

_ACCESSORY = _object({
    "name": _STRING,
    "sets": {"type": "integer"},
    "reps": _STRING_OR_INT,
    "notes": _nullable("string"),
})

_CONDITIONING = _object({
    "modality": _STRING,
    "durationMinutes": {"type": "integer"},
    "notes": _nullable("string"),
})

_SESSION = _object({
    "day": _STRING,
    "emphasis": _STRING,
    "sessionMinutes": {"type": "integer", "minimum": 1},
    "readinessCues": _STRING_LIST,
    "mainLifts": {"type": "array", "minItems": 1, "items": _MAIN_LIFT},
    "accessoryWork": {"type": "array", "items": _ACCESSORY},
    "conditioning": {"type": "array", "items": _CONDITIONING},
    "recovery": _STRING_LIST,
})

_WEEK = _object({
    "week": {"type": "integer", "minimum": 1},
    "focus": _STRING,
    "keyOutcomes": _NON_EMPTY_STRING_LIST,
    "sessions": {"type": "array", "minItems": 1, "items": _SESSION},
})

_PHASE = _object({
    "name": _STRING,
    "startWeek": {"type": "integer", "minimum": 1},
    "endWeek": {"type": "integer", "minimum": 1},
    "objectives": _NON_EMPTY_STRING_LIST,
    "keyMetrics": _NON_EMPTY_STRING_LIST,
    "deloadWeek": _nullable("integer"),
})

WORKOUT_PLAN_SCHEMA_NAME = "elite_workout_plan_schema"

WORKOUT_PLAN_JSON_SCHEMA = _object({
    "programName": _STRING,
    "trainingFocus": _STRING,
    "programType": _STRING,
    "cycleLengthWeeks": {"type": "integer", "minimum": 1},
    "startDate": _STRING,
    "endDate": _STRING,
    "athleteProfile": _object({
        "summary": _STRING,
        "primaryGoals": _NON_EMPTY_STRING_LIST,
        "constraints": _STRING_LIST,
    }),
    "methodology": _object({
        "periodizationModel": _STRING,
        "volumeStrategy": _STRING,
        "intensityStrategy": _STRING,
        "frequencyStrategy": _STRING,
    }),
    "phases": {"type": "array", "minItems": 1, "items": _PHASE},
    "weeks": {"type": "array", "minItems": 1, "items": _WEEK},
    "monitoring": _object({
        "readinessChecks": _NON_EMPTY_STRING_LIST,
        "nutritionFocus": _NON_EMPTY_STRING_LIST,
        "recoveryProtocols": _NON_EMPTY_STRING_LIST,
    }),
    "coachingNotes": _NON_EMPTY_STRING_LIST,
})

WORKOUT_PLAN_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": WORKOUT_PLAN_SCHEMA_NAME,
        "schema": WORKOUT_PLAN_JSON_SCHEMA,
        "strict": True,
    },
}
