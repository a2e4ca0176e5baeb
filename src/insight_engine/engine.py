"""InsightEngine: the orchestrator that turns a roster snapshot into findings."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, Sequence

from insight_engine.alerts import build_alerts
from insight_engine.config import DEFAULT_THRESHOLDS, ThresholdConfig
from insight_engine.math.baselines import compute_baselines
from insight_engine.models.context import DetectionContext
from insight_engine.models.detection_trace import (
    DetectionTrace,
    DetectorResult,
    DetectorStatus,
    InsightReport,
)
from insight_engine.models.enums import FatigueState, PowerMode
from insight_engine.models.insight import Insight
from insight_engine.models.subject import Athlete, ScoutingCandidate
from insight_engine.registry import DetectorRegistry

logger = logging.getLogger(__name__)

AthleteFilter = Callable[[Athlete], bool]


class InsightEngine:
    """Computes baselines, runs every detector and derives alerts.

    Usage:
        engine = InsightEngine()
        report = engine.run(athletes, scouts)
        for insight in report.insights: ...

    The engine holds configuration only; each ``run`` is a pure function
    of its arguments.
    """

    def __init__(
        self,
        thresholds: ThresholdConfig | None = None,
        registry: DetectorRegistry | None = None,
        compared_roster_roles: Iterable[str] | None = ("reserve",),
        athlete_filter: AthleteFilter | None = None,
    ) -> None:
        """
        Args:
            thresholds: Detection thresholds; defaults when omitted.
            registry: Detector registry. The default registry discovers
                every detector in ``insight_engine.detectors``.
            compared_roster_roles: Roster roles whose athletes are compared
                against the team (deviation and consistency). ``None``
                compares every athlete.
            athlete_filter: Predicate selecting the athletes that get
                fatigue analysis and alerts. Defaults to all.
        """
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.registry = registry or DetectorRegistry()
        self.compared_roster_roles = (
            frozenset(compared_roster_roles) if compared_roster_roles is not None else None
        )
        self.athlete_filter = athlete_filter

        # Auto-discover detectors if using default registry
        if registry is None:
            self.registry.discover_detectors()

    def _is_compared(self, athlete: Athlete) -> bool:
        if self.compared_roster_roles is None:
            return True
        return athlete.roster_role in self.compared_roster_roles

    def _is_followed(self, athlete: Athlete) -> bool:
        if self.athlete_filter is None:
            return True
        return self.athlete_filter(athlete)

    def build_context(
        self,
        athletes: Sequence[Athlete],
        scouts: Sequence[ScoutingCandidate],
        mode: PowerMode = PowerMode.PER_KG,
        fatigue_state: FatigueState = FatigueState.FRESH,
        as_of: date | None = None,
    ) -> DetectionContext:
        """Compute all baselines and freeze the inputs for the detectors."""
        mass = self.thresholds.default_mass_kg
        baselines = compute_baselines(athletes, mode, fatigue_state, as_of, mass)
        if fatigue_state is FatigueState.FRESH:
            fresh_baselines = baselines
        else:
            fresh_baselines = compute_baselines(athletes, mode, FatigueState.FRESH, as_of, mass)

        compared = tuple(a for a in athletes if self._is_compared(a)) + tuple(scouts)
        followed = tuple(a for a in athletes if self._is_followed(a))
        return DetectionContext(
            athletes=tuple(athletes),
            scouts=tuple(scouts),
            baselines=baselines,
            fresh_baselines=fresh_baselines,
            mode=mode,
            fatigue_state=fatigue_state,
            thresholds=self.thresholds,
            compared_subjects=compared,
            fatigue_athletes=followed,
            as_of=as_of,
        )

    def run(
        self,
        athletes: Sequence[Athlete],
        scouts: Sequence[ScoutingCandidate] = (),
        mode: PowerMode = PowerMode.PER_KG,
        fatigue_state: FatigueState = FatigueState.FRESH,
        as_of: date | None = None,
    ) -> InsightReport:
        """Evaluate every detector over the snapshot.

        Args:
            athletes: Rostered athletes; the team baselines come from them.
            scouts: Scouting candidates.
            mode: Absolute watts or per-kilogram.
            fatigue_state: Profile used for baselines, deviation, scout
                and consistency checks.
            as_of: Reference date for age categories (default today).

        Returns:
            An InsightReport with insights, alerts, the detection trace and
            the baselines that were used.
        """
        context = self.build_context(athletes, scouts, mode, fatigue_state, as_of)
        logger.info(
            "Running insight detection: %d athletes, %d scouts, mode=%s, fatigue=%s",
            len(context.athletes),
            len(context.scouts),
            mode.name.lower(),
            fatigue_state.value,
        )

        insights: list[Insight] = []
        detector_results: list[DetectorResult] = []
        for detector in self.registry.get_all_detectors():
            if not detector.is_applicable(context):
                logger.debug("Detector %s not applicable", detector.detector_id)
                detector_results.append(
                    DetectorResult(
                        detector_id=detector.detector_id,
                        status=DetectorStatus.NOT_APPLICABLE,
                        explanation="No eligible subjects.",
                    )
                )
                continue

            found = detector.detect(context)
            if found:
                insights.extend(found)
                detector_results.append(
                    DetectorResult(
                        detector_id=detector.detector_id,
                        status=DetectorStatus.FIRED,
                        insight_count=len(found),
                        explanation=f"{len(found)} insight(s) emitted.",
                    )
                )
            else:
                detector_results.append(
                    DetectorResult(
                        detector_id=detector.detector_id,
                        status=DetectorStatus.SKIPPED,
                        explanation="Detector returned no insight.",
                    )
                )
            logger.debug("Detector %s emitted %d insight(s)", detector.detector_id, len(found))

        alerts = build_alerts(context.fatigue_athletes, context.scouts, insights)
        logger.info("Detection finished: %d insights, %d alerts", len(insights), len(alerts))

        subjects = {a.id for a in context.compared_subjects} | {a.id for a in context.fatigue_athletes}
        trace = DetectionTrace(
            detector_results=tuple(detector_results),
            subjects_analysed=len(subjects),
        )
        return InsightReport(
            insights=tuple(insights),
            alerts=tuple(alerts),
            trace=trace,
            baselines=context.baselines,
        )
