"""Tests for season archive aggregation and the archiver."""

from __future__ import annotations

from datetime import date

import pytest

from insight_engine.archive import (
    SeasonArchiver,
    athlete_quality,
    build_archive,
    compare_archives,
    group_averages,
    parse_ranking,
    quality_trend,
    season_ended,
    staff_quality,
    team_metrics,
)
from insight_engine.models.archive import AthleteRating, DebriefEntry, RaceEvent, StaffRating
from insight_engine.models.enums import DurationKey, PowerMode, QualityTrend


def _entry(
    id: str,
    day: date,
    ranking: str | None = None,
    debriefed: bool = True,
    ratings: tuple[AthleteRating, ...] = (),
    staff: tuple[StaffRating, ...] = (),
) -> DebriefEntry:
    return DebriefEntry(
        id=id,
        event_id=f"ev-{id}",
        entry_date=day,
        results_summary="Team rode well" if debriefed else "",
        overall_ranking=ranking,
        athlete_ratings=ratings,
        staff_ratings=staff,
    )


@pytest.fixture
def roster(athlete_factory):
    return [
        athlete_factory(id="a1", fresh={"cp": 300, "20min": 320}, birth_date="1995-03-10"),
        athlete_factory(id="a2", birth_date="2004-08-20"),
    ]


@pytest.fixture
def history() -> list[DebriefEntry]:
    return [
        _entry(
            "d1",
            date(2024, 3, 10),
            ranking="3",
            ratings=(AthleteRating("a1", 6, 6, 6),),
            staff=(StaffRating("c1", 4), StaffRating("c2", 0)),
        ),
        _entry(
            "d2",
            date(2024, 5, 12),
            ranking="12th",
            ratings=(AthleteRating("a1", 7, 7, 7), AthleteRating("a2", 5, None, None)),
            staff=(StaffRating("c1", 5),),
        ),
        _entry(
            "d3",
            date(2024, 8, 4),
            ranking="DNF",
            debriefed=False,
            ratings=(AthleteRating("a1", 8, 8, 8),),
            staff=(StaffRating("c1", 0),),
        ),
        # Previous season, ignored for 2024
        _entry("d0", date(2023, 9, 1), ranking="1", ratings=(AthleteRating("a1", 1, 1, 1),)),
    ]


@pytest.fixture
def events() -> list[RaceEvent]:
    return [
        RaceEvent("e1", "Spring Classic", date(2024, 3, 10)),
        RaceEvent("e2", "Hill Climb", date(2024, 5, 12)),
        RaceEvent("e3", "Stage Race", date(2024, 8, 2)),
        RaceEvent("e4", "Criterium", date(2024, 9, 15)),
        RaceEvent("e0", "Old Race", date(2023, 9, 1)),
    ]


class TestParseRanking:
    @pytest.mark.parametrize(
        "raw,expected",
        [("3", 3), ("12th", 12), (" 7 / 120", 7), ("DNF", None), ("", None), (None, None)],
    )
    def test_leading_integer(self, raw, expected) -> None:
        assert parse_ranking(raw) == expected


class TestQualityTrend:
    def test_too_few_events_is_stable(self) -> None:
        assert quality_trend([1.0, 9.0]) is QualityTrend.STABLE

    def test_improving(self) -> None:
        assert quality_trend([6.0, 7.0, 8.0]) is QualityTrend.IMPROVING

    def test_declining(self) -> None:
        assert quality_trend([8.0, 7.0, 6.0]) is QualityTrend.DECLINING

    def test_flat(self) -> None:
        assert quality_trend([7.0, 7.0, 7.0, 7.0]) is QualityTrend.STABLE


class TestGroupAverages:
    def test_roster_snapshot(self, roster) -> None:
        group = group_averages(roster, 2024)
        assert group.total_athletes == 2
        assert group.average_age == 24.5
        assert group.category_counts == {"U19": 0, "U23": 1, "Senior": 1}
        assert group.power_coverage == 50
        assert group.baselines.mode is PowerMode.WATTS
        assert group.baselines.team[DurationKey.CP] == pytest.approx(300.0)

    def test_empty_roster(self) -> None:
        group = group_averages([], 2024)
        assert group.total_athletes == 0
        assert group.average_age == 0.0
        assert group.power_coverage == 0
        assert group.baselines.team == {}


class TestQualityRecords:
    def test_athlete_quality(self, roster, history) -> None:
        (record,) = athlete_quality(roster, history, 2024)
        assert record.athlete_id == "a1"
        assert record.average_collective_score == 7.0
        assert record.average_technical_score == 7.0
        assert record.average_physical_score == 7.0
        assert record.events_with_ratings == 3
        assert record.total_events == 3
        assert record.quality_trend is QualityTrend.IMPROVING
        assert record.last_rating_date == date(2024, 8, 4)

    def test_profile_only_athlete_kept(self, athlete_factory) -> None:
        athlete = athlete_factory(id="x", fresh={"cp": 300, "20min": 320, "5s": 1000})
        (record,) = athlete_quality([athlete], [], 2024)
        assert record.events_with_ratings == 0
        assert record.average_collective_score == 0.0
        assert record.characteristics.any_positive()

    def test_staff_quality(self, history) -> None:
        (record,) = staff_quality(history, 2024)
        assert record.staff_id == "c1"
        assert record.average_rating == 4.5
        assert record.total_events == 3
        assert record.events_with_ratings == 2
        assert record.last_rating_date == date(2024, 5, 12)


class TestTeamMetrics:
    def test_rankings_and_completion(self, history, events) -> None:
        metrics = team_metrics(history, events, 2024)
        assert metrics.total_events == 4
        assert metrics.average_ranking == 7.5
        assert metrics.best_ranking == 3
        assert metrics.worst_ranking == 12
        assert metrics.events_with_debriefs == 2
        assert metrics.completion_rate == 50

    def test_no_events(self) -> None:
        metrics = team_metrics([], [], 2024)
        assert metrics.total_events == 0
        assert metrics.average_ranking == 0.0
        assert metrics.completion_rate == 0


class TestBuildArchive:
    def test_archive(self, roster, history, events) -> None:
        archive = build_archive(roster, history, events, 2024, archived_on=date(2025, 2, 1))
        assert archive.id == "archive-2024"
        assert archive.season == 2024
        assert archive.archived_on == date(2025, 2, 1)
        assert len(archive.athlete_quality) == 1
        assert len(archive.staff_quality) == 1
        assert archive.team_metrics.total_events == 4

    def test_compare(self, roster, history, events, athlete_factory) -> None:
        previous = build_archive(
            [athlete_factory(id="old", fresh={"cp": 280, "20min": 300})],
            history,
            events,
            2023,
            archived_on=date(2024, 2, 1),
        )
        current = build_archive(roster, history, events, 2024, archived_on=date(2025, 2, 1))
        diff = compare_archives(current, previous)
        assert diff.current_season == 2024
        assert diff.previous_season == 2023
        assert diff.total_athletes_change == 1
        assert diff.power_coverage_change == -50
        assert diff.cp_change == pytest.approx(20.0)
        assert diff.power_20min_change == pytest.approx(20.0)
        assert diff.total_events_change == 3

    def test_compare_without_baseline(self, roster, history, events) -> None:
        empty = build_archive([], [], [], 2023, archived_on=date(2024, 2, 1))
        current = build_archive(roster, history, events, 2024, archived_on=date(2025, 2, 1))
        assert compare_archives(current, empty).cp_change is None


class TestSeasonEnded:
    def test_boundary(self) -> None:
        ready = season_ended(30)
        assert not ready(2024, date(2025, 1, 30))
        assert ready(2024, date(2025, 1, 31))

    def test_current_season_never_ready(self) -> None:
        assert not season_ended(0)(2025, date(2025, 12, 31))


class TestSeasonArchiver:
    def test_create_once(self, roster, history, events) -> None:
        archiver = SeasonArchiver()
        first = archiver.create(2024, roster, history, events, today=date(2025, 3, 1))
        assert first is not None
        assert archiver.is_archived(2024)
        assert archiver.create(2024, roster, history, events, today=date(2025, 3, 2)) is None
        assert archiver.get(2024) is first

    def test_not_ready(self, roster, history, events) -> None:
        archiver = SeasonArchiver()
        assert archiver.create(2024, roster, history, events, today=date(2025, 1, 15)) is None
        assert not archiver.is_archived(2024)

    def test_nothing_to_archive(self) -> None:
        archiver = SeasonArchiver()
        assert archiver.create(2024, [], [], [], today=date(2025, 3, 1)) is None

    def test_existing_archives_respected(self, roster, history, events) -> None:
        existing = build_archive(roster, history, events, 2024, archived_on=date(2025, 2, 1))
        archiver = SeasonArchiver(existing=[existing])
        assert not archiver.should_create(2024, True, date(2025, 6, 1))
        assert archiver.archives == [existing]

    def test_archive_missing(self, roster, history, events) -> None:
        archiver = SeasonArchiver()
        created = archiver.archive_missing(roster, history, events, today=date(2025, 2, 15))
        assert [a.season for a in created] == [2024, 2023, 2022, 2021, 2020]
        assert [a.season for a in archiver.archives] == [2020, 2021, 2022, 2023, 2024]
        assert archiver.archive_missing(roster, history, events, today=date(2025, 2, 16)) == []

    def test_custom_readiness(self, roster) -> None:
        archiver = SeasonArchiver(ready=lambda season, today: True)
        assert archiver.create(2025, roster, [], [], today=date(2025, 6, 1)) is not None
