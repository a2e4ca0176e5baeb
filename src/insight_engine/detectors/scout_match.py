"""Scout match: scouting candidates already at or above team level."""

from __future__ import annotations

from typing import Sequence

from insight_engine.config import DEFAULT_THRESHOLDS, ThresholdConfig
from insight_engine.detectors.base import InsightDetector
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
    FatigueState,
    InsightKind,
    PowerMode,
    Severity,
    SubjectType,
)
from insight_engine.models.insight import Insight
from insight_engine.models.subject import Subject


def detect_scout_match(
    scout: Subject,
    baselines: GroupAverages,
    mode: PowerMode | None = None,
    fatigue_state: FatigueState | None = None,
    thresholds: ThresholdConfig | None = None,
) -> list[Insight]:
    """One scout_match insight per duration where the scout clears the team mean.

    The scout threshold (default 5%) is lower than the
    generic above-team threshold.
    """
    mode = mode or baselines.mode
    fatigue_state = fatigue_state or baselines.fatigue_state
    thresholds = thresholds or DEFAULT_THRESHOLDS
    factor = 1 + thresholds.scout_above_team_pct / 100
    name = scout.display_name

    insights: list[Insight] = []
    for duration in DURATION_KEYS:
        value = get_power(scout, duration, mode, fatigue_state, thresholds.default_mass_kg)
        if value <= 0:
            continue
        team_ref = baselines.team_value(duration)
        if not team_ref or value < team_ref * factor:
            continue
        pct = round_half_up(percent_difference(value, team_ref))
        insights.append(
            Insight(
                id=f"scout-match-{scout.id}-{duration.value}",
                kind=InsightKind.SCOUT_MATCH,
                severity=Severity.POSITIVE,
                title="Scout at team level",
                description=(
                    f"{name}: {duration.value} +{pct}% vs team average "
                    f"({format_power(team_ref, mode)})."
                ),
                subject_id=scout.id,
                subject_name=name,
                subject_type=SubjectType.SCOUT,
                duration=duration,
                fatigue_state=fatigue_state,
                value=value,
                unit=mode.unit,
                reference_value=team_ref,
                reference_unit=mode.unit,
                percent_above=pct,
            )
        )
    return insights


class ScoutMatchDetector(InsightDetector):
    detector_id = "scout_match"
    version = "1.0.0"
    order = 30

    def subjects(self, context: DetectionContext) -> Sequence[Subject]:
        return context.scouts

    def detect(self, context: DetectionContext) -> list[Insight]:
        insights: list[Insight] = []
        for scout in self.subjects(context):
            insights.extend(
                detect_scout_match(
                    scout,
                    context.baselines,
                    context.mode,
                    context.fatigue_state,
                    context.thresholds,
                )
            )
        return insights
