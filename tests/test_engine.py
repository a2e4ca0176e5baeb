"""Tests for InsightEngine — full orchestration tests."""

from __future__ import annotations

from datetime import date

import pytest

from insight_engine.config import ThresholdConfig
from insight_engine.detectors.deviation import DeviationDetector
from insight_engine.engine import InsightEngine
from insight_engine.models.detection_trace import DetectorStatus, InsightReport
from insight_engine.models.enums import (
    AlertKind,
    DurationKey,
    FatigueState,
    InsightKind,
    PowerMode,
)
from insight_engine.registry import DetectorRegistry


@pytest.fixture
def roster(athlete_factory):
    """Principals at 280/280/240 W and a reserve at 330 W critical power."""
    return [
        athlete_factory(id="p1", fresh={"cp": 280}),
        athlete_factory(id="p2", fresh={"cp": 280}),
        athlete_factory(id="p3", fresh={"cp": 240}),
        athlete_factory(id="r1", fresh={"cp": 330}, roster_role="reserve"),
    ]


def _kinds_for(report: InsightReport, subject_id: str) -> list[InsightKind]:
    return [i.kind for i in report.insights if i.subject_id == subject_id]


class TestInsightEngine:
    def test_run_returns_report(self, roster, as_of: date) -> None:
        report = InsightEngine().run(roster, as_of=as_of)
        assert isinstance(report, InsightReport)
        assert report.baselines.mode is PowerMode.PER_KG
        assert report.baselines.team[DurationKey.CP] == pytest.approx(282.5 / 70)

    def test_reserve_compared_by_default(self, roster, as_of: date) -> None:
        report = InsightEngine().run(roster, as_of=as_of)
        assert InsightKind.ABOVE_TEAM_AVERAGE in _kinds_for(report, "r1")
        assert _kinds_for(report, "p3") == []

    def test_compare_every_athlete(self, roster, as_of: date) -> None:
        engine = InsightEngine(compared_roster_roles=None)
        report = engine.run(roster, as_of=as_of)
        assert InsightKind.BELOW_TEAM_AVERAGE in _kinds_for(report, "p3")
        below = next(i for i in report.insights if i.id == "below-team-p3-cp")
        assert below.percent_below == 15

    def test_alerts_derived(self, roster, as_of: date) -> None:
        report = InsightEngine().run(roster, as_of=as_of)
        kinds = [a.kind for a in report.alerts]
        assert kinds.count(AlertKind.FATIGUE_DATA_MISSING) == 4
        assert AlertKind.ABOVE_TEAM_AVERAGE in kinds

    def test_idempotent(self, roster, as_of: date) -> None:
        engine = InsightEngine()
        first = engine.run(roster, as_of=as_of)
        second = engine.run(roster, as_of=as_of)
        assert first == second
        assert [i.id for i in first.insights] == [i.id for i in second.insights]

    def test_trace_records_every_detector(self, roster, as_of: date) -> None:
        report = InsightEngine().run(roster, as_of=as_of)
        statuses = {r.detector_id: r.status for r in report.trace.detector_results}
        assert statuses == {
            "team_deviation": DetectorStatus.FIRED,
            "fatigue_regression": DetectorStatus.SKIPPED,
            "scout_match": DetectorStatus.NOT_APPLICABLE,
            "profile_consistency": DetectorStatus.NOT_APPLICABLE,
        }
        assert report.trace.subjects_analysed == 4

    def test_trace_in_detector_order(self, roster, as_of: date) -> None:
        report = InsightEngine().run(roster, as_of=as_of)
        ids = [r.detector_id for r in report.trace.detector_results]
        assert ids == ["team_deviation", "fatigue_regression", "scout_match", "profile_consistency"]

    def test_empty_roster(self) -> None:
        report = InsightEngine().run([])
        assert report.insights == ()
        assert report.alerts == ()
        assert report.baselines.team == {}

    def test_scouts_checked_against_roster(self, roster, scout_factory, as_of: date) -> None:
        scout = scout_factory(id="s1", fresh={"cp": 305})
        report = InsightEngine().run(roster, [scout], as_of=as_of)
        assert InsightKind.SCOUT_MATCH in _kinds_for(report, "s1")
        assert [a.id for a in report.alerts if a.kind is AlertKind.SCOUT_ABOVE_TEAM] == [
            "scout-above-s1-cp"
        ]
        # Scouts never move the team baseline
        assert report.baselines.sample_count == 4

    def test_athlete_filter_limits_fatigue_and_alerts(self, athlete_factory) -> None:
        athletes = [
            athlete_factory(id="m", fresh={"cp": 300}, p15={"cp": 240}, sex="M"),
            athlete_factory(id="f", fresh={"cp": 250}, p15={"cp": 200}, sex="F"),
        ]
        engine = InsightEngine(athlete_filter=lambda a: a.sex != "F")
        report = engine.run(athletes)
        assert {i.subject_id for i in report.insights if i.kind is InsightKind.FATIGUE_REGRESSION} == {"m"}
        assert {a.subject_id for a in report.alerts} == {"m"}

    def test_fatigued_run_uses_fatigued_baselines(self, athlete_factory) -> None:
        athletes = [
            athlete_factory(id="p1", fresh={"cp": 300}, p15={"cp": 280}),
            athlete_factory(id="r1", fresh={"cp": 300}, p15={"cp": 200}, roster_role="reserve"),
        ]
        report = InsightEngine().run(athletes, mode=PowerMode.WATTS, fatigue_state=FatigueState.LOW)
        assert report.baselines.fatigue_state is FatigueState.LOW
        assert report.baselines.team[DurationKey.CP] == pytest.approx(240.0)
        below = next(i for i in report.insights if i.kind is InsightKind.BELOW_TEAM_AVERAGE)
        assert below.subject_id == "r1"
        assert below.fatigue_state is FatigueState.LOW

    def test_fatigue_reference_uses_fresh_team_mean(self, athlete_factory) -> None:
        athletes = [
            athlete_factory(id="p1", fresh={"cp": 300}, p15={"cp": 240}),
            athlete_factory(id="p2", fresh={"cp": 320}, p15={"cp": 310}),
        ]
        report = InsightEngine().run(athletes, mode=PowerMode.WATTS, fatigue_state=FatigueState.LOW)
        regression = next(i for i in report.insights if i.kind is InsightKind.FATIGUE_REGRESSION)
        assert regression.reference_value == pytest.approx(310.0)

    def test_custom_thresholds(self, roster, as_of: date) -> None:
        engine = InsightEngine(thresholds=ThresholdConfig(above_team_pct=20.0))
        report = engine.run(roster, as_of=as_of)
        assert InsightKind.ABOVE_TEAM_AVERAGE not in _kinds_for(report, "r1")

    def test_custom_registry(self, roster, as_of: date) -> None:
        registry = DetectorRegistry()
        registry.register(DeviationDetector())
        report = InsightEngine(registry=registry).run(roster, as_of=as_of)
        assert [r.detector_id for r in report.trace.detector_results] == ["team_deviation"]
