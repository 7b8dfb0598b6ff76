import logging
import os
from typing import Dict, List, Optional, Tuple

import pandas as pd
from openpyxl.styles import Font
from sqlalchemy.orm import Session

from neuraladapt import config
from neuraladapt.crud import workout_plan as crud_workout_plan
from neuraladapt.exceptions import ExportError
from neuraladapt.schemas.workout import WorkoutPlan
from neuraladapt.utils.utils import make_artifact_id

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
SESSIONS_SHEET = "Sessions"

SUMMARY_COLUMNS = ["Key", "Details"]
SESSION_COLUMNS = [
    "Week", "Day", "Emphasis", "Session Minutes", "Lift/Block",
    "Sets", "Reps", "Intensity", "Rest", "Notes",
]

SUMMARY_WIDTHS = {"A": 26, "B": 90}
SESSION_WIDTHS = {"A": 8, "B": 14, "C": 24, "D": 14, "E": 28, "F": 8, "G": 10, "H": 16, "I": 12, "J": 50}

NOT_APPLICABLE = "N/A"


def build_summary_rows(plan: WorkoutPlan) -> Tuple[List[Tuple[str, str]], List[int]]:
    """
    Key/value rows for the Summary sheet, plus the indexes (0-based) of the
    rows that should be bold.
    """
    rows: List[Tuple[str, str]] = []
    bold: List[int] = []

    def add(key, value="", strong=False):
        if strong:
            bold.append(len(rows))
        rows.append((key, value))

    profile = plan.athlete_profile
    method = plan.methodology

    add("Program", plan.program_name, strong=True)
    add("Focus", plan.training_focus)
    add("Type", plan.program_type)
    add("Cycle Length", f"{plan.cycle_length_weeks} weeks")
    add("Timeline", f"{plan.start_date} to {plan.end_date}")
    add("Athlete Summary", profile.summary)
    add("Primary Goals", " | ".join(profile.primary_goals))
    add("Constraints", " | ".join(profile.constraints) if profile.constraints else "None noted")
    add("Periodization", method.periodization_model)
    add("Volume Strategy", method.volume_strategy)
    add("Intensity Strategy", method.intensity_strategy)
    add("Frequency Strategy", method.frequency_strategy)

    add("")
    add("Phases", strong=True)
    add("Phase", "Focus", strong=True)
    for phase in plan.phases:
        deload = f", deload week {phase.deload_week}" if phase.deload_week is not None else ""
        add(
            f"{phase.name} (Weeks {phase.start_week}-{phase.end_week}{deload})",
            f"{'; '.join(phase.objectives)} | Metrics: {', '.join(phase.key_metrics)}",
        )

    add("")
    add("Monitoring", strong=True)
    add("Readiness Checks", " | ".join(plan.monitoring.readiness_checks))
    add("Nutrition Focus", " | ".join(plan.monitoring.nutrition_focus))
    add("Recovery Protocols", " | ".join(plan.monitoring.recovery_protocols))

    add("")
    add("Coaching Notes", strong=True)
    for note in plan.coaching_notes:
        add("-", note)

    return rows, bold


def _block_row(common: Dict, label: str, notes: str) -> Dict:
    return {
        **common,
        "Lift/Block": label,
        "Sets": NOT_APPLICABLE,
        "Reps": NOT_APPLICABLE,
        "Intensity": NOT_APPLICABLE,
        "Rest": NOT_APPLICABLE,
        "Notes": notes,
    }


def build_session_rows(plan: WorkoutPlan) -> List[Dict]:
    """One row per main lift, accessory, conditioning block, recovery and readiness group."""
    rows = []
    for week in plan.weeks:
        for session in week.sessions:
            common = {
                "Week": week.week,
                "Day": session.day,
                "Emphasis": session.emphasis,
                "Session Minutes": session.session_minutes,
            }

            for lift in session.main_lifts:
                notes = [f"Tempo: {lift.tempo}" if lift.tempo else None, lift.notes]
                rows.append({
                    **common,
                    "Lift/Block": lift.name,
                    "Sets": lift.sets,
                    "Reps": lift.reps,
                    "Intensity": lift.intensity,
                    "Rest": lift.rest,
                    "Notes": " | ".join(n for n in notes if n),
                })

            for accessory in session.accessory_work:
                rows.append({
                    **common,
                    "Lift/Block": f"Accessory - {accessory.name}",
                    "Sets": accessory.sets,
                    "Reps": accessory.reps,
                    "Intensity": NOT_APPLICABLE,
                    "Rest": NOT_APPLICABLE,
                    "Notes": accessory.notes or "",
                })

            for block in session.conditioning:
                notes = f"{block.duration_minutes} min"
                if block.notes:
                    notes += f" | {block.notes}"
                rows.append(_block_row(common, f"Conditioning - {block.modality}", notes))

            if session.recovery:
                rows.append(_block_row(common, "Recovery", " | ".join(session.recovery)))

            if session.readiness_cues:
                rows.append(_block_row(common, "Readiness", " | ".join(session.readiness_cues)))

    return rows


def write_workbook(plan: WorkoutPlan, artifact_id: str, artifact_dir: Optional[str] = None) -> str:
    """Write <artifact_dir>/<artifact_id>.xlsx and return its path."""
    artifact_dir = artifact_dir or config.ARTIFACT_DIR
    artifact_path = os.path.join(artifact_dir, f"{artifact_id}.xlsx")

    summary_rows, bold_rows = build_summary_rows(plan)
    summary_df = pd.DataFrame(summary_rows, columns=SUMMARY_COLUMNS)
    sessions_df = pd.DataFrame(build_session_rows(plan), columns=SESSION_COLUMNS)

    try:
        os.makedirs(artifact_dir, exist_ok=True)
        with pd.ExcelWriter(artifact_path, engine="openpyxl") as writer:
            summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
            sessions_df.to_excel(writer, sheet_name=SESSIONS_SHEET, index=False)

            summary_ws = writer.sheets[SUMMARY_SHEET]
            for idx in bold_rows:
                # +2: 1-based rows and the header row
                for cell in summary_ws[idx + 2]:
                    cell.font = Font(bold=True)
            for col, width in SUMMARY_WIDTHS.items():
                summary_ws.column_dimensions[col].width = width

            sessions_ws = writer.sheets[SESSIONS_SHEET]
            for cell in sessions_ws[1]:
                cell.font = Font(bold=True)
            for col, width in SESSION_WIDTHS.items():
                sessions_ws.column_dimensions[col].width = width
    except Exception as e:
        logger.error(f"Failed to write workbook {artifact_path}: {e}")
        raise ExportError(f"Could not export workout plan: {e}") from e

    logger.info(f"Exported {len(sessions_df)} session rows to {artifact_path}")
    return artifact_path


def export_stored_plan(db: Session, user_id: str, plan_id: str, artifact_dir: Optional[str] = None) -> Optional[str]:
    """
    Export a stored plan on demand and remember the artifact path.
    Returns None when the plan does not exist.
    """
    record = crud_workout_plan.get_workout_plan(db, user_id, plan_id)
    if not record:
        return None

    plan = crud_workout_plan.load_response(record)
    if plan is None:
        raise ExportError("This plan has not been generated yet, so there is nothing to export.")

    artifact_path = write_workbook(plan, make_artifact_id(plan.program_name or record.program_name), artifact_dir)
    crud_workout_plan.attach_plan_response(db, user_id, plan_id, artifact_path=artifact_path)
    return artifact_path
