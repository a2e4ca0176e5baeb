"""Deviation detection: values notably above or below team and category means.

A value at or beyond ``baseline × (1 ± threshold)`` is reported. The
percentage is always relative to the baseline. Durations without a
subject value or without a baseline are skipped.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from insight_engine.config import DEFAULT_THRESHOLDS, ThresholdConfig
from insight_engine.detectors.base import InsightDetector
from insight_engine.math.age import age_category
from insight_engine.math.power import (
    format_power,
    get_power,
    percent_difference,
    round_half_up,
)
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.context import DetectionContext
from insight_engine.models.enums import (
    DURATION_KEYS,
    UNKNOWN_CATEGORY,
    FatigueState,
    InsightKind,
    PowerMode,
    Severity,
)
from insight_engine.models.insight import Insight
from insight_engine.models.subject import Subject


def detect_deviations(
    subject: Subject,
    baselines: GroupAverages,
    mode: PowerMode | None = None,
    fatigue_state: FatigueState | None = None,
    thresholds: ThresholdConfig | None = None,
    as_of: date | None = None,
) -> list[Insight]:
    """Compare one subject against team and age-category baselines.

    Args:
        subject: Athlete or scouting candidate.
        baselines: Precomputed group averages.
        mode: Defaults to the mode the baselines were computed in.
        fatigue_state: Defaults to the baselines' fatigue state.
        thresholds: Detection thresholds (defaults 8% above / 8% below).
        as_of: Reference date for the subject's age category.

    Returns:
        At most one Insight per (duration, kind): above-team-average,
        below-team-average and above-category-average.
    """
    mode = mode or baselines.mode
    fatigue_state = fatigue_state or baselines.fatigue_state
    thresholds = thresholds or DEFAULT_THRESHOLDS
    above_factor = 1 + thresholds.above_team_pct / 100
    below_factor = 1 - thresholds.below_team_pct / 100
    unit = mode.unit
    category = age_category(subject.birth_date, as_of)
    name = subject.display_name

    insights: list[Insight] = []
    for duration in DURATION_KEYS:
        value = get_power(subject, duration, mode, fatigue_state, thresholds.default_mass_kg)
        if value <= 0:
            continue
        team_ref = baselines.team_value(duration)
        cat_ref = (
            baselines.category_value(category, duration)
            if category != UNKNOWN_CATEGORY
            else None
        )

        if team_ref and value >= team_ref * above_factor:
            pct = round_half_up(percent_difference(value, team_ref))
            insights.append(
                Insight(
                    id=f"above-team-{subject.id}-{duration.value}",
                    kind=InsightKind.ABOVE_TEAM_AVERAGE,
                    severity=Severity.POSITIVE,
                    title="Above team average",
                    description=(
                        f"{name}: {duration.value} +{pct}% vs team average "
                        f"({format_power(team_ref, mode)})."
                    ),
                    subject_id=subject.id,
                    subject_name=name,
                    subject_type=subject.subject_type,
                    duration=duration,
                    fatigue_state=fatigue_state,
                    value=value,
                    unit=unit,
                    reference_value=team_ref,
                    reference_unit=unit,
                    percent_above=pct,
                    category=category,
                )
            )

        if team_ref and value <= team_ref * below_factor:
            pct = round_half_up(-percent_difference(value, team_ref))
            insights.append(
                Insight(
                    id=f"below-team-{subject.id}-{duration.value}",
                    kind=InsightKind.BELOW_TEAM_AVERAGE,
                    severity=Severity.WARNING,
                    title="Below team average",
                    description=(
                        f"{name}: {duration.value} -{pct}% vs team average "
                        f"({format_power(team_ref, mode)})."
                    ),
                    subject_id=subject.id,
                    subject_name=name,
                    subject_type=subject.subject_type,
                    duration=duration,
                    fatigue_state=fatigue_state,
                    value=value,
                    unit=unit,
                    reference_value=team_ref,
                    reference_unit=unit,
                    percent_below=pct,
                    category=category,
                )
            )

        if cat_ref and value >= cat_ref * above_factor:
            pct = round_half_up(percent_difference(value, cat_ref))
            insights.append(
                Insight(
                    id=f"above-category-{subject.id}-{duration.value}",
                    kind=InsightKind.ABOVE_CATEGORY_AVERAGE,
                    severity=Severity.POSITIVE,
                    title=f"Above {category} average",
                    description=(
                        f"{name}: {duration.value} at {format_power(value, mode)} "
                        f"(+{pct}% vs {category})."
                    ),
                    subject_id=subject.id,
                    subject_name=name,
                    subject_type=subject.subject_type,
                    duration=duration,
                    fatigue_state=fatigue_state,
                    value=value,
                    unit=unit,
                    reference_value=cat_ref,
                    reference_unit=unit,
                    percent_above=pct,
                    category=category,
                )
            )

    return insights


class DeviationDetector(InsightDetector):
    """Flags values notably above/below the team and age-category means."""

    detector_id = "team_deviation"
    version = "1.0.0"
    order = 10

    def subjects(self, context: DetectionContext) -> Sequence[Subject]:
        return context.compared_subjects

    def detect(self, context: DetectionContext) -> list[Insight]:
        insights: list[Insight] = []
        for subject in self.subjects(context):
            insights.extend(
                detect_deviations(
                    subject,
                    context.baselines,
                    context.mode,
                    context.fatigue_state,
                    context.thresholds,
                    context.as_of,
                )
            )
        return insights
