"""Fatigue regression: fresh power curve vs the 15/30/45 kJ/kg curves.

For each fatigued state, the worst loss over the endurance-relevant
durations decides the outcome:

    loss ≥ regression floor (10%)    → fatigue_regression (warning)
    0 ≤ loss ≤ resistance ceiling (5%) → fatigue_resistance (positive)
    in between                       → nothing

A fatigued state without a single comparable duration is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from insight_engine.config import DEFAULT_THRESHOLDS, ThresholdConfig
from insight_engine.detectors.base import InsightDetector
from insight_engine.math.baselines import compute_baselines
from insight_engine.math.power import (
    compute_regression,
    format_power,
    get_power,
    has_meaningful_profile,
    round_half_up,
)
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.context import DetectionContext
from insight_engine.models.enums import (
    DEFAULT_MASS_KG,
    FATIGUE_CRITICAL_DURATIONS,
    FATIGUED_STATES,
    DurationKey,
    FatigueState,
    InsightKind,
    PowerMode,
    Severity,
    SubjectType,
)
from insight_engine.models.insight import Insight
from insight_engine.models.subject import Subject


@dataclass(frozen=True)
class RegressionSummary:
    """Losses for one athlete at one fatigued state.

    ``max_regression`` starts from zero, so a state where every duration
    held or improved reports 0.0 with no worst duration.
    """

    fatigue_state: FatigueState
    max_regression: float
    mean_regression: float
    measured_durations: int
    worst_duration: DurationKey | None = None
    worst_fatigued_value: float = 0.0


def summarize_regression(
    subject: Subject,
    fatigue_state: FatigueState,
    mode: PowerMode = PowerMode.PER_KG,
    default_mass_kg: float = DEFAULT_MASS_KG,
) -> RegressionSummary | None:
    """Regression over the critical durations, or None if nothing is comparable."""
    max_regression = 0.0
    worst_duration: DurationKey | None = None
    worst_value = 0.0
    total = 0.0
    count = 0

    for duration in FATIGUE_CRITICAL_DURATIONS:
        fresh = get_power(subject, duration, mode, FatigueState.FRESH, default_mass_kg)
        fatigued = get_power(subject, duration, mode, fatigue_state, default_mass_kg)
        regression = compute_regression(fresh, fatigued)
        if regression is None:
            continue
        if regression > max_regression:
            max_regression = regression
            worst_duration = duration
            worst_value = fatigued
        total += regression
        count += 1

    if count == 0:
        return None
    return RegressionSummary(
        fatigue_state=fatigue_state,
        max_regression=max_regression,
        mean_regression=total / count,
        measured_durations=count,
        worst_duration=worst_duration,
        worst_fatigued_value=worst_value,
    )


def detect_fatigue_regression(
    athletes: Sequence[Subject],
    mode: PowerMode = PowerMode.PER_KG,
    thresholds: ThresholdConfig | None = None,
    baselines: GroupAverages | None = None,
) -> list[Insight]:
    """Flag excessive losses, or good resistance, under each fatigue level.

    Args:
        athletes: Rostered athletes; scouting candidates are ignored.
        mode: Absolute watts or per-kilogram.
        thresholds: Regression floor and resistance ceiling.
        baselines: Fresh-state team means used as the reference shown with
            a regression. Computed from *athletes* when omitted.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    mass = thresholds.default_mass_kg
    if baselines is None:
        baselines = compute_baselines(athletes, mode, FatigueState.FRESH, default_mass_kg=mass)
    regression_floor = thresholds.regression_vs_fresh_pct / 100
    resistance_ceiling = thresholds.good_resistance_pct / 100
    unit = mode.unit

    insights: list[Insight] = []
    for athlete in athletes:
        if athlete.subject_type is not SubjectType.ATHLETE:
            continue
        if not has_meaningful_profile(athlete, FatigueState.FRESH, mode, mass):
            continue
        name = athlete.display_name

        for state in FATIGUED_STATES:
            if not has_meaningful_profile(athlete, state, mode, mass):
                continue
            summary = summarize_regression(athlete, state, mode, mass)
            if summary is None:
                continue

            percent = round_half_up(summary.max_regression * 100)
            if summary.max_regression >= regression_floor:
                worst = summary.worst_duration
                team_ref = baselines.team_value(worst) if worst is not None else None
                ref_text = (
                    f" (team average {format_power(team_ref, mode)} on {worst.value})"
                    if team_ref is not None and worst is not None
                    else ""
                )
                insights.append(
                    Insight(
                        id=f"fatigue-regression-{athlete.id}-{state.value}",
                        kind=InsightKind.FATIGUE_REGRESSION,
                        severity=Severity.WARNING,
                        title=f"Regression under fatigue ({state.label}) vs fresh profile",
                        description=(
                            f"{name}: loses up to {percent}% on "
                            f"{worst.value if worst else 'power'} at {state.label} "
                            f"compared with the fresh profile.{ref_text}"
                        ),
                        subject_id=athlete.id,
                        subject_name=name,
                        subject_type=SubjectType.ATHLETE,
                        duration=worst,
                        fatigue_state=state,
                        value=summary.worst_fatigued_value,
                        unit=unit,
                        reference_value=team_ref,
                        reference_unit=unit if team_ref is not None else None,
                        percent_regression_vs_fresh=-percent,
                    )
                )
            elif 0 <= summary.max_regression <= resistance_ceiling:
                insights.append(
                    Insight(
                        id=f"fatigue-resistance-{athlete.id}-{state.value}",
                        kind=InsightKind.FATIGUE_RESISTANCE,
                        severity=Severity.POSITIVE,
                        title=f"Good fatigue resistance ({state.label})",
                        description=(
                            f"{name} holds power well at {state.label}: worst loss "
                            f"{percent}%, average loss "
                            f"{round_half_up(summary.mean_regression * 100)}% "
                            f"over {summary.measured_durations} durations."
                        ),
                        subject_id=athlete.id,
                        subject_name=name,
                        subject_type=SubjectType.ATHLETE,
                        duration=summary.worst_duration,
                        fatigue_state=state,
                        percent_regression_vs_fresh=percent,
                    )
                )

    return insights


class FatigueRegressionDetector(InsightDetector):
    """Compares each athlete's fatigued curves with their fresh curve."""

    detector_id = "fatigue_regression"
    version = "1.0.0"
    order = 20

    def subjects(self, context: DetectionContext) -> Sequence[Subject]:
        return context.fatigue_athletes

    def detect(self, context: DetectionContext) -> list[Insight]:
        return detect_fatigue_regression(
            self.subjects(context),
            context.mode,
            context.thresholds,
            context.fresh_baselines,
        )
