from typing import List, Optional

from neuraladapt.schemas.workout import WorkoutPlan, WorkoutSession


def _bullets(items: List[str], indent: str = "  ") -> List[str]:
    return [f"{indent}- {item}" for item in items]


def _render_session(session: WorkoutSession) -> List[str]:
    lines = [f"  {session.day}: {session.emphasis} ({session.session_minutes} min)"]

    if session.readiness_cues:
        lines.append(f"    Readiness: {' | '.join(session.readiness_cues)}")

    lines.append("    Main lifts:")
    for lift in session.main_lifts:
        line = f"      {lift.name}: {lift.sets} x {lift.reps} @ {lift.intensity}, rest {lift.rest}"
        if lift.tempo:
            line += f", tempo {lift.tempo}"
        if lift.notes:
            line += f" ({lift.notes})"
        lines.append(line)

    if session.accessory_work:
        lines.append("    Accessory work:")
        for accessory in session.accessory_work:
            line = f"      {accessory.name}: {accessory.sets} x {accessory.reps}"
            if accessory.notes:
                line += f" ({accessory.notes})"
            lines.append(line)

    if session.conditioning:
        lines.append("    Conditioning:")
        for block in session.conditioning:
            line = f"      {block.modality}: {block.duration_minutes} min"
            if block.notes:
                line += f" ({block.notes})"
            lines.append(line)

    if session.recovery:
        lines.append(f"    Recovery: {' | '.join(session.recovery)}")

    return lines


def render_plan(plan: WorkoutPlan, week: Optional[int] = None) -> str:
    """
    Read-only outline of a plan: profile, methodology, phases, one selected
    week (the first by default) with its sessions, then monitoring and notes.
    """
    selected = plan.get_week(week) if week is not None else (plan.weeks[0] if plan.weeks else None)
    if week is not None and selected is None:
        raise ValueError(f"Week {week} is not part of this plan")

    profile = plan.athlete_profile
    method = plan.methodology

    lines = [
        plan.program_name,
        f"{plan.training_focus} | {plan.program_type}",
        f"{plan.start_date} to {plan.end_date} | {plan.cycle_length_weeks} weeks",
        "",
        "Athlete Profile",
        f"  {profile.summary}",
        "  Goals:",
        *_bullets(profile.primary_goals, "    "),
    ]
    if profile.constraints:
        lines.append("  Constraints:")
        lines.extend(_bullets(profile.constraints, "    "))

    lines += [
        "",
        "Methodology",
        f"  Periodization: {method.periodization_model}",
        f"  Volume: {method.volume_strategy}",
        f"  Intensity: {method.intensity_strategy}",
        f"  Frequency: {method.frequency_strategy}",
        "",
        "Phases",
    ]
    for phase in plan.phases:
        header = f"  {phase.name}: Weeks {phase.start_week} - {phase.end_week}"
        if phase.deload_week is not None:
            header += f" | Deload: Week {phase.deload_week}"
        lines.append(header)
        lines.append(f"    Objectives: {'; '.join(phase.objectives)}")
        lines.append(f"    Key metrics: {', '.join(phase.key_metrics)}")

    lines.append("")
    lines.append(f"Weeks: {', '.join(str(w.week) for w in plan.weeks)}")
    if selected:
        lines.append(f"Week {selected.week}: {selected.focus}")
        lines.append(f"  Key outcomes: {' | '.join(selected.key_outcomes)}")
        for session in selected.sessions:
            lines.extend(_render_session(session))

    lines += [
        "",
        "Monitoring",
        f"  Readiness checks: {' | '.join(plan.monitoring.readiness_checks)}",
        f"  Nutrition focus: {' | '.join(plan.monitoring.nutrition_focus)}",
        f"  Recovery protocols: {' | '.join(plan.monitoring.recovery_protocols)}",
        "",
        "Coaching Notes",
        *_bullets(plan.coaching_notes),
    ]
    return "\n".join(lines) + "\n"
