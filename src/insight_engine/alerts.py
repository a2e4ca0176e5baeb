"""Alert derivation: missing-data notices plus actionable insights.

Alerts are findings with a recommended follow-up. They come from two
sources: direct data-completeness checks on rostered athletes, and a
subset of the insight kinds produced by the detectors.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from insight_engine.math.power import has_meaningful_profile
from insight_engine.models.enums import (
    FATIGUED_STATES,
    AlertKind,
    DurationKey,
    FatigueState,
    InsightKind,
    Severity,
    SubjectType,
)
from insight_engine.models.insight import Alert, Insight
from insight_engine.models.subject import Athlete, ScoutingCandidate

HINT_MISSING_POWER = "Fill in the power profile on the athlete record"
HINT_MISSING_FATIGUE = "Record the 15/30/45 kJ/kg power curves on the athlete record"
HINT_PROFILE_MISMATCH = "Check the qualitative profile or the power data"
HINT_FATIGUE_REGRESSION = (
    "Work on fatigue resistance; check the fatigued power curves (15/30/45 kJ/kg)"
)
HINT_SCOUT = "Follow for recruitment"


def missing_data_alerts(athlete: Athlete) -> list[Alert]:
    """Completeness alerts for one athlete."""
    name = athlete.display_name
    alerts: list[Alert] = []

    fresh = athlete.power_profile_fresh
    if fresh is None or not fresh.has_data() or fresh.watts(DurationKey.CP) <= 0:
        alerts.append(
            Alert(
                id=f"missing-power-{athlete.id}",
                kind=AlertKind.MISSING_POWER_DATA,
                severity=Severity.INFO,
                title="Incomplete power profile",
                message=f"{name} has no power curve recorded.",
                subject_id=athlete.id,
                subject_name=name,
                subject_type=SubjectType.ATHLETE,
                action_hint=HINT_MISSING_POWER,
            )
        )

    has_fresh = has_meaningful_profile(athlete, FatigueState.FRESH)
    has_fatigue = any(has_meaningful_profile(athlete, s) for s in FATIGUED_STATES)
    if has_fresh and not has_fatigue:
        alerts.append(
            Alert(
                id=f"fatigue-data-missing-{athlete.id}",
                kind=AlertKind.FATIGUE_DATA_MISSING,
                severity=Severity.INFO,
                title="Fatigue profiles missing",
                message=(
                    f"{name} has a fresh power curve but no 15/30/45 kJ/kg curves. "
                    "Regression under fatigue cannot be analysed."
                ),
                subject_id=athlete.id,
                subject_name=name,
                subject_type=SubjectType.ATHLETE,
                action_hint=HINT_MISSING_FATIGUE,
            )
        )
    return alerts


def _alert_from_insight(insight: Insight) -> Alert | None:
    common = dict(
        id=f"alert-{insight.id}",
        title=insight.title,
        message=insight.description,
        subject_id=insight.subject_id,
        subject_name=insight.subject_name,
        subject_type=insight.subject_type,
        duration=insight.duration,
    )

    if insight.kind is InsightKind.PROFILE_MISMATCH:
        return Alert(
            kind=AlertKind.PROFILE_MISMATCH,
            severity=Severity.WARNING,
            action_hint=HINT_PROFILE_MISMATCH,
            **common,
        )

    if insight.kind is InsightKind.FATIGUE_REGRESSION:
        regression = insight.percent_regression_vs_fresh
        return Alert(
            kind=AlertKind.FATIGUE_REGRESSION,
            severity=Severity.WARNING,
            action_hint=HINT_FATIGUE_REGRESSION,
            fatigue_state=insight.fatigue_state,
            value=insight.value,
            unit=insight.unit,
            reference_value=insight.reference_value,
            reference_unit=insight.reference_unit,
            percent_regression_vs_fresh=regression,
            percent_vs_team=-abs(regression) if regression is not None else None,
            **common,
        )

    if insight.kind is InsightKind.ABOVE_TEAM_AVERAGE and insight.percent_above is not None:
        return Alert(
            kind=AlertKind.ABOVE_TEAM_AVERAGE,
            severity=Severity.POSITIVE,
            value=insight.value,
            unit=insight.unit,
            reference_value=insight.reference_value,
            reference_unit=insight.reference_unit,
            percent_vs_team=insight.percent_above,
            **common,
        )

    if insight.kind is InsightKind.BELOW_TEAM_AVERAGE and insight.percent_below is not None:
        return Alert(
            kind=AlertKind.BELOW_TEAM_AVERAGE,
            severity=Severity.WARNING,
            value=insight.value,
            unit=insight.unit,
            reference_value=insight.reference_value,
            reference_unit=insight.reference_unit,
            percent_vs_team=-insight.percent_below,
            **common,
        )

    return None


def _scout_alert(insight: Insight) -> Alert:
    return Alert(
        id=f"scout-above-{insight.subject_id}-{insight.duration.value if insight.duration else 'any'}",
        kind=AlertKind.SCOUT_ABOVE_TEAM,
        severity=Severity.POSITIVE,
        title="Scout at team level",
        message=(
            f"{insight.subject_name} is above the team average on "
            f"{insight.duration.value if insight.duration else 'power'}."
        ),
        subject_id=insight.subject_id,
        subject_name=insight.subject_name,
        subject_type=SubjectType.SCOUT,
        action_hint=HINT_SCOUT,
        duration=insight.duration,
        fatigue_state=insight.fatigue_state,
        value=insight.value,
        unit=insight.unit,
        reference_value=insight.reference_value,
        reference_unit=insight.reference_unit,
        percent_vs_team=insight.percent_above,
    )


def build_alerts(
    athletes: Sequence[Athlete],
    scouts: Sequence[ScoutingCandidate],
    insights: Iterable[Insight],
) -> list[Alert]:
    """Derive alerts from completeness checks and detector output.

    Args:
        athletes: Athletes eligible for alerts. Insights about athletes
            not in this sequence are ignored.
        scouts: Scouting candidates of the run.
        insights: Output of the detectors, in engine order.

    Returns:
        Missing-data alerts (athlete order), then insight-derived alerts
        (insight order), then at most one scout_above_team alert per scout
        (scout order).
    """
    alerts: list[Alert] = []
    for athlete in athletes:
        alerts.extend(missing_data_alerts(athlete))

    athlete_ids = {a.id for a in athletes}
    first_scout_match: dict[str, Insight] = {}
    for insight in insights:
        if insight.subject_type is SubjectType.ATHLETE and insight.subject_id not in athlete_ids:
            continue
        if insight.kind is InsightKind.SCOUT_MATCH:
            first_scout_match.setdefault(insight.subject_id, insight)
            continue
        alert = _alert_from_insight(insight)
        if alert is not None:
            alerts.append(alert)

    for scout in scouts:
        match = first_scout_match.get(scout.id)
        if match is not None:
            alerts.append(_scout_alert(match))
    return alerts
