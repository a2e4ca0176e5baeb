"""Tests for JSON snapshot decoding and report encoding."""

from __future__ import annotations

import json
from datetime import date

import pytest

from insight_engine.archive import build_archive
from insight_engine.engine import InsightEngine
from insight_engine.exceptions import SnapshotFormatError
from insight_engine.models.enums import DurationKey, FatigueState, QualitativeProfile
from insight_engine.serialization import (
    archive_to_dict,
    report_to_dict,
    report_to_json,
    snapshot_from_dict,
)

SNAPSHOT = {
    "athletes": [
        {
            "id": "p1",
            "first_name": "Anna",
            "last_name": "Rossi",
            "weight_kg": 70,
            "birth_date": "1998-04-02",
            "sex": "M",
            "qualitative_profile": "all-rounder",
            "roster_role": "principal",
            "power_profiles": {
                "fresh": {"cp": 300, "20min": 320},
                "15kj": {"cp": 250},
                "30kj": None,
            },
        },
        {
            "id": "r1",
            "first_name": "Ben",
            "last_name": "Moreau",
            "weight_kg": 68,
            "roster_role": "reserve",
            "power_profiles": {"fresh": {"cp": 360}},
        },
    ],
    "scouts": [
        {
            "id": "s1",
            "first_name": "Carla",
            "last_name": "Diaz",
            "current_team": "Velo Club",
            "potential_rating": 4,
            "power_profiles": {"fresh": {"cp": 330}},
        }
    ],
    "events": [{"id": "e1", "name": "GP", "start_date": "2024-04-01"}],
    "debriefs": [
        {
            "id": "d1",
            "event_id": "e1",
            "entry_date": "2024-04-01",
            "overall_ranking": "5th",
            "results_summary": "Solid",
            "athlete_ratings": [
                {"athlete_id": "p1", "collective_score": 7, "technical_score": 6, "physical_score": 8}
            ],
            "staff_ratings": [{"staff_id": "c1", "rating": 4}],
        }
    ],
}


class TestSnapshotDecoding:
    def test_full_snapshot(self) -> None:
        snapshot = snapshot_from_dict(SNAPSHOT)
        p1, r1 = snapshot.athletes
        assert p1.qualitative_profile is QualitativeProfile.ALL_ROUNDER
        assert p1.power_profile_fresh.watts(DurationKey.MIN20) == 320
        assert p1.profile(FatigueState.LOW).watts(DurationKey.CP) == 250
        assert p1.power_profile_30kj is None
        assert r1.roster_role == "reserve"
        assert snapshot.scouts[0].current_team == "Velo Club"
        assert snapshot.scouts[0].potential_rating == 4
        assert snapshot.events[0].start_date == date(2024, 4, 1)
        entry = snapshot.debriefs[0]
        assert entry.athlete_ratings[0].is_complete
        assert entry.staff_ratings[0].rating == 4.0

    def test_empty_snapshot(self) -> None:
        snapshot = snapshot_from_dict({})
        assert snapshot.athletes == ()
        assert snapshot.scouts == ()

    def test_role_spellings(self) -> None:
        snapshot = snapshot_from_dict(
            {"athletes": [{"id": "x", "qualitative_profile": "Classics Specialist"}]}
        )
        assert snapshot.athletes[0].qualitative_profile is QualitativeProfile.CLASSICS_SPECIALIST

    @pytest.mark.parametrize(
        "athlete",
        [
            {"first_name": "No id"},
            {"id": "x", "power_profiles": {"60kj": {"cp": 200}}},
            {"id": "x", "power_profiles": {"fresh": {"2h": 200}}},
            {"id": "x", "power_profiles": {"fresh": {"cp": "fast"}}},
            {"id": "x", "qualitative_profile": "tt-machine"},
            {"id": "x", "weight_kg": "heavy"},
        ],
    )
    def test_malformed_athlete(self, athlete) -> None:
        with pytest.raises(SnapshotFormatError):
            snapshot_from_dict({"athletes": [athlete]})

    def test_bad_date(self) -> None:
        with pytest.raises(SnapshotFormatError, match="invalid date"):
            snapshot_from_dict({"events": [{"id": "e", "start_date": "01/04/2024"}]})

    def test_not_an_object(self) -> None:
        with pytest.raises(SnapshotFormatError):
            snapshot_from_dict([])  # type: ignore[arg-type]

    def test_records_must_be_a_list(self) -> None:
        with pytest.raises(SnapshotFormatError):
            snapshot_from_dict({"athletes": {"id": "x"}})

    @pytest.mark.parametrize(
        "debrief",
        [
            {"staff_ratings": [{"staff_id": "c1", "rating": "good"}]},
            {"staff_ratings": [{"staff_id": "c1", "rating": True}]},
            {"staff_ratings": ["c1"]},
            {"athlete_ratings": [7]},
            {"athlete_ratings": {"athlete_id": "p1"}},
            {"athlete_ratings": [{"athlete_id": "p1", "collective_score": "x"}]},
            {"athlete_ratings": [{"athlete_id": "p1", "physical_score": float("nan")}]},
        ],
    )
    def test_malformed_ratings(self, debrief) -> None:
        record = {"id": "d1", "entry_date": "2024-04-01", **debrief}
        with pytest.raises(SnapshotFormatError):
            snapshot_from_dict({"debriefs": [record]})

    def test_partial_rating_kept(self) -> None:
        record = {
            "id": "d1",
            "entry_date": "2024-04-01",
            "athlete_ratings": [{"athlete_id": "p1", "collective_score": 7}],
        }
        (rating,) = snapshot_from_dict({"debriefs": [record]}).debriefs[0].athlete_ratings
        assert rating.collective_score == 7
        assert not rating.is_complete

    def test_non_numeric_potential_rating(self) -> None:
        with pytest.raises(SnapshotFormatError, match="potential_rating"):
            snapshot_from_dict({"scouts": [{"id": "s", "potential_rating": "high"}]})

    @pytest.mark.parametrize("raw", ["false", 0, None])
    def test_is_active_must_be_boolean(self, raw) -> None:
        with pytest.raises(SnapshotFormatError, match="is_active"):
            snapshot_from_dict({"athletes": [{"id": "x", "is_active": raw}]})

    def test_is_active_defaults_true(self) -> None:
        assert snapshot_from_dict({"athletes": [{"id": "x"}]}).athletes[0].is_active
        inactive = snapshot_from_dict({"athletes": [{"id": "x", "is_active": False}]})
        assert not inactive.athletes[0].is_active


class TestReportEncoding:
    def test_report_to_dict(self) -> None:
        snapshot = snapshot_from_dict(SNAPSHOT)
        report = InsightEngine().run(snapshot.athletes, snapshot.scouts, as_of=date(2025, 6, 1))
        data = report_to_dict(report)
        assert set(data) == {"insights", "alerts", "trace", "baselines"}
        above = next(i for i in data["insights"] if i["id"] == "above-team-r1-cp")
        assert above["kind"] == "above_team_average"
        assert above["severity"] == "positive"
        assert above["subject_type"] == "athlete"
        assert above["duration"] == "cp"
        assert above["fatigue_state"] == "fresh"
        assert data["baselines"]["mode"] == "per_kg"
        assert "cp" in data["baselines"]["team"]
        assert data["trace"]["detectors"][0]["status"] == "fired"

    def test_report_to_json_parses(self) -> None:
        snapshot = snapshot_from_dict(SNAPSHOT)
        report = InsightEngine().run(snapshot.athletes, snapshot.scouts)
        assert json.loads(report_to_json(report)) == report_to_dict(report)

    def test_archive_to_dict(self) -> None:
        snapshot = snapshot_from_dict(SNAPSHOT)
        archive = build_archive(
            snapshot.athletes, snapshot.debriefs, snapshot.events, 2024, archived_on=date(2025, 2, 1)
        )
        data = archive_to_dict(archive)
        assert data["id"] == "archive-2024"
        assert data["archived_on"] == "2025-02-01"
        assert data["team_metrics"]["average_ranking"] == 5.0
        quality = data["athlete_quality"][0]
        assert quality["athlete_id"] == "p1"
        assert quality["quality_trend"] == "stable"
        assert quality["last_rating_date"] == "2024-04-01"
        assert set(quality["characteristics"]) >= {"sprint", "climbing", "general_performance"}
        json.dumps(data)
