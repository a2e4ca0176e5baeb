"""Profile consistency: does a declared role show up in the power curve?

Each role has signature durations. Power at a signature duration is
expressed as a ratio to the subject's own critical power and compared with
the same ratio over team means, which removes overall fitness from the
comparison.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from insight_engine.config import DEFAULT_THRESHOLDS, ThresholdConfig
from insight_engine.detectors.base import InsightDetector
from insight_engine.math.age import age_category
from insight_engine.math.power import get_power
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.context import DetectionContext
from insight_engine.models.enums import (
    SIGNATURE_DURATIONS,
    DurationKey,
    FatigueState,
    InsightKind,
    PowerMode,
    QualitativeProfile,
    Severity,
)
from insight_engine.models.insight import Insight
from insight_engine.models.subject import Subject

_ROLE_LABELS = {
    QualitativeProfile.SPRINTER: "sprinter",
    QualitativeProfile.CLIMBER: "climber",
    QualitativeProfile.ALL_ROUNDER: "all-rounder",
    QualitativeProfile.PUNCHER: "puncher",
    QualitativeProfile.CLASSICS_SPECIALIST: "classics specialist",
    QualitativeProfile.BREAKAWAY_SPECIALIST: "breakaway specialist",
    QualitativeProfile.COMPLETE: "complete rider",
    QualitativeProfile.OTHER: "other",
}


def role_label(profile: QualitativeProfile) -> str:
    return _ROLE_LABELS[profile]


def detect_profile_mismatch(
    subject: Subject,
    baselines: GroupAverages,
    mode: PowerMode | None = None,
    fatigue_state: FatigueState | None = None,
    thresholds: ThresholdConfig | None = None,
    as_of: date | None = None,
) -> list[Insight]:
    """Warn where a signature duration is weak relative to critical power.

    Subjects without a role, with a role that has no signature durations,
    or without critical power are skipped.
    """
    role = subject.qualitative_profile
    if role is None:
        return []
    signature = SIGNATURE_DURATIONS.get(role, ())
    if not signature:
        return []

    mode = mode or baselines.mode
    fatigue_state = fatigue_state or baselines.fatigue_state
    thresholds = thresholds or DEFAULT_THRESHOLDS
    mass = thresholds.default_mass_kg
    cp = get_power(subject, DurationKey.CP, mode, fatigue_state, mass)
    if cp <= 0:
        return []

    factor = 1 - thresholds.profile_mismatch_pct / 100
    name = subject.display_name
    label = role_label(role)
    category = age_category(subject.birth_date, as_of)

    insights: list[Insight] = []
    for duration in signature:
        value = get_power(subject, duration, mode, fatigue_state, mass)
        if value <= 0:
            continue
        team_ratio = baselines.team_ratio_to_cp(duration)
        if team_ratio is None:
            continue
        ratio = value / cp
        if ratio < team_ratio * factor:
            insights.append(
                Insight(
                    id=f"mismatch-{subject.id}-{duration.value}",
                    kind=InsightKind.PROFILE_MISMATCH,
                    severity=Severity.WARNING,
                    title=f"{label.capitalize()} profile: weak {duration.value}",
                    description=(
                        f"{name} is listed as {label} but {duration.value} is "
                        f"behind the team reference relative to critical power "
                        f"({ratio:.2f} vs {team_ratio:.2f} of CP)."
                    ),
                    subject_id=subject.id,
                    subject_name=name,
                    subject_type=subject.subject_type,
                    duration=duration,
                    fatigue_state=fatigue_state,
                    value=value,
                    unit=mode.unit,
                    reference_value=team_ratio * cp,
                    reference_unit=mode.unit,
                    category=category,
                )
            )
    return insights


class ProfileConsistencyDetector(InsightDetector):
    """Cross-checks each compared subject's role against its power curve."""

    detector_id = "profile_consistency"
    version = "1.0.0"
    order = 40

    def subjects(self, context: DetectionContext) -> Sequence[Subject]:
        return [s for s in context.compared_subjects if s.qualitative_profile is not None]

    def detect(self, context: DetectionContext) -> list[Insight]:
        insights: list[Insight] = []
        for subject in self.subjects(context):
            insights.extend(
                detect_profile_mismatch(
                    subject,
                    context.baselines,
                    context.mode,
                    context.fatigue_state,
                    context.thresholds,
                    context.as_of,
                )
            )
        return insights
