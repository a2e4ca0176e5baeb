"""Season archive aggregation: yearly snapshots for historical comparison.

An archive binds a season to its roster baselines, per-athlete and
per-staff quality records and team metrics. History inputs (debrief
entries, events) are restricted to the calendar year of the season.
``SeasonArchiver`` creates at most one archive per season.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Callable, Iterable, Sequence

import numpy as np

from insight_engine.math.age import age_category, season_age
from insight_engine.math.baselines import compute_baselines
from insight_engine.math.characteristics import characteristic_scores
from insight_engine.math.power import round_half_up
from insight_engine.models.archive import (
    ArchiveComparison,
    AthleteQualityRecord,
    DebriefEntry,
    GroupAverageArchive,
    RaceEvent,
    SeasonArchive,
    StaffQualityRecord,
    TeamMetrics,
)
from insight_engine.models.enums import (
    AGE_CATEGORIES,
    DurationKey,
    FatigueState,
    PowerMode,
    QualityTrend,
)
from insight_engine.models.subject import Athlete

logger = logging.getLogger(__name__)

ReadinessPolicy = Callable[[int, date], bool]

# Least-squares slope (score points per rated event) needed to call a trend
_TREND_SLOPE = 0.1
_TREND_MIN_EVENTS = 3

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


def season_window(season: int) -> tuple[date, date]:
    return date(season, 1, 1), date(season, 12, 31)


def _in_season(day: date, season: int) -> bool:
    start, end = season_window(season)
    return start <= day <= end


def season_entries(entries: Iterable[DebriefEntry], season: int) -> list[DebriefEntry]:
    return [e for e in entries if _in_season(e.entry_date, season)]


def season_events(events: Iterable[RaceEvent], season: int) -> list[RaceEvent]:
    return [e for e in events if _in_season(e.start_date, season)]


def parse_ranking(ranking: str | None) -> int | None:
    """Leading integer of a free-text ranking ("12", "3rd"), else None."""
    if not ranking:
        return None
    match = _LEADING_INT.match(ranking)
    return int(match.group(1)) if match else None


# ---------------------------------------------------------------------------
# Group averages
# ---------------------------------------------------------------------------


def group_averages(athletes: Sequence[Athlete], season: int) -> GroupAverageArchive:
    """Roster snapshot for *season*: size, ages, categories, power coverage, baselines.

    Categories are taken as of January 1st of the season. Baselines are
    absolute watts from the fresh profiles.
    """
    jan_1 = date(season, 1, 1)
    ages = [a for a in (season_age(x.birth_date, season) for x in athletes) if a is not None]
    average_age = _one_decimal(sum(ages) / len(ages)) if ages else 0.0

    category_counts = {category: 0 for category in AGE_CATEGORIES}
    for athlete in athletes:
        category = age_category(athlete.birth_date, jan_1)
        if category in category_counts:
            category_counts[category] += 1

    with_cp = sum(
        1
        for a in athletes
        if a.power_profile_fresh is not None and a.power_profile_fresh.watts(DurationKey.CP) > 0
    )
    coverage = round_half_up(with_cp / len(athletes) * 100) if athletes else 0

    return GroupAverageArchive(
        season=season,
        total_athletes=len(athletes),
        average_age=average_age,
        category_counts=category_counts,
        power_coverage=coverage,
        baselines=compute_baselines(athletes, PowerMode.WATTS, FatigueState.FRESH, as_of=jan_1),
    )


# ---------------------------------------------------------------------------
# Quality records
# ---------------------------------------------------------------------------


def quality_trend(scores: Sequence[float]) -> QualityTrend:
    """Trend of per-event scores (oldest first) from a least-squares slope.

    Fewer than three rated events is always stable.
    """
    if len(scores) < _TREND_MIN_EVENTS:
        return QualityTrend.STABLE
    slope = float(np.polyfit(np.arange(len(scores), dtype=float), np.asarray(scores, dtype=float), 1)[0])
    if slope >= _TREND_SLOPE:
        return QualityTrend.IMPROVING
    if slope <= -_TREND_SLOPE:
        return QualityTrend.DECLINING
    return QualityTrend.STABLE


def athlete_quality(
    athletes: Sequence[Athlete],
    entries: Sequence[DebriefEntry],
    season: int,
) -> list[AthleteQualityRecord]:
    """Per-athlete ratings and characteristic scores for *season*.

    Athletes with neither a complete rating nor a positive characteristic
    score are omitted.
    """
    in_season = sorted(season_entries(entries, season), key=lambda e: e.entry_date)
    records: list[AthleteQualityRecord] = []

    for athlete in athletes:
        rated: list[tuple[date, float, float, float]] = []
        for entry in in_season:
            for rating in entry.athlete_ratings:
                if rating.athlete_id == athlete.id and rating.is_complete:
                    rated.append(
                        (
                            entry.entry_date,
                            float(rating.collective_score),  # type: ignore[arg-type]
                            float(rating.technical_score),  # type: ignore[arg-type]
                            float(rating.physical_score),  # type: ignore[arg-type]
                        )
                    )

        scores = characteristic_scores(athlete)
        if not rated and not scores.any_positive():
            logger.debug("Athlete %s omitted from %d archive: no ratings or scores", athlete.id, season)
            continue

        n = len(rated)
        records.append(
            AthleteQualityRecord(
                athlete_id=athlete.id,
                season=season,
                average_collective_score=_one_decimal(sum(r[1] for r in rated) / n) if n else 0.0,
                average_technical_score=_one_decimal(sum(r[2] for r in rated) / n) if n else 0.0,
                average_physical_score=_one_decimal(sum(r[3] for r in rated) / n) if n else 0.0,
                characteristics=scores,
                total_events=len(in_season),
                events_with_ratings=n,
                quality_trend=quality_trend([(r[1] + r[2] + r[3]) / 3 for r in rated]),
                last_rating_date=rated[-1][0] if rated else None,
            )
        )
    return records


def staff_quality(entries: Sequence[DebriefEntry], season: int) -> list[StaffQualityRecord]:
    """Per-staff average of positive ratings, in order of first appearance."""
    ratings: dict[str, list[tuple[date, float]]] = {}
    for entry in sorted(season_entries(entries, season), key=lambda e: e.entry_date):
        for rating in entry.staff_ratings:
            ratings.setdefault(rating.staff_id, []).append((entry.entry_date, rating.rating))

    records: list[StaffQualityRecord] = []
    for staff_id, rows in ratings.items():
        valid = [(day, value) for day, value in rows if value > 0]
        if not valid:
            continue
        records.append(
            StaffQualityRecord(
                staff_id=staff_id,
                season=season,
                average_rating=_one_decimal(sum(v for _, v in valid) / len(valid)),
                total_events=len(rows),
                events_with_ratings=len(valid),
                last_rating_date=valid[-1][0],
            )
        )
    return records


def team_metrics(
    entries: Sequence[DebriefEntry],
    events: Sequence[RaceEvent],
    season: int,
) -> TeamMetrics:
    """Event count, ranking statistics and debrief completion for *season*."""
    in_season = season_entries(entries, season)
    event_count = len(season_events(events, season))
    rankings = [r for r in (parse_ranking(e.overall_ranking) for e in in_season) if r is not None]
    debriefed = sum(1 for e in in_season if e.is_debriefed)

    return TeamMetrics(
        season=season,
        total_events=event_count,
        average_ranking=_one_decimal(sum(rankings) / len(rankings)) if rankings else 0.0,
        best_ranking=min(rankings) if rankings else 0,
        worst_ranking=max(rankings) if rankings else 0,
        events_with_debriefs=debriefed,
        completion_rate=round_half_up(debriefed / event_count * 100) if event_count else 0,
    )


# ---------------------------------------------------------------------------
# Archive assembly
# ---------------------------------------------------------------------------


def build_archive(
    athletes: Sequence[Athlete],
    rating_history: Sequence[DebriefEntry],
    events: Sequence[RaceEvent],
    season: int,
    archived_on: date | None = None,
) -> SeasonArchive:
    """Aggregate one season into a SeasonArchive.

    Args:
        athletes: Roster snapshot for the season.
        rating_history: Debrief entries with athlete and staff ratings.
        events: Race events.
        season: Calendar year to archive.
        archived_on: Archive date (default today).
    """
    return SeasonArchive(
        id=f"archive-{season}",
        season=season,
        archived_on=archived_on or date.today(),
        group_averages=group_averages(athletes, season),
        athlete_quality=tuple(athlete_quality(athletes, rating_history, season)),
        staff_quality=tuple(staff_quality(rating_history, season)),
        team_metrics=team_metrics(rating_history, events, season),
    )


def season_ended(min_days: int = 30) -> ReadinessPolicy:
    """Readiness policy: at least *min_days* full days since December 31st."""

    def ready(season: int, today: date) -> bool:
        return (today - date(season + 1, 1, 1)).days >= min_days

    return ready


class SeasonArchiver:
    """Creates season archives at most once per season.

    Usage:
        archiver = SeasonArchiver(existing=stored_archives)
        created = archiver.archive_missing(athletes, entries, events)
        persist(archiver.archives)
    """

    def __init__(
        self,
        existing: Iterable[SeasonArchive] = (),
        ready: ReadinessPolicy | None = None,
    ) -> None:
        self._archives: dict[int, SeasonArchive] = {a.season: a for a in existing}
        self.ready = ready or season_ended(30)

    @property
    def archives(self) -> list[SeasonArchive]:
        """All known archives, oldest season first."""
        return [self._archives[s] for s in sorted(self._archives)]

    def get(self, season: int) -> SeasonArchive | None:
        return self._archives.get(season)

    def is_archived(self, season: int) -> bool:
        return season in self._archives

    def should_create(self, season: int, has_data: bool, today: date | None = None) -> bool:
        """Not yet archived, ready according to the policy, and something to archive."""
        if self.is_archived(season):
            return False
        if not self.ready(season, today or date.today()):
            return False
        return has_data

    def create(
        self,
        season: int,
        athletes: Sequence[Athlete],
        entries: Sequence[DebriefEntry],
        events: Sequence[RaceEvent],
        today: date | None = None,
    ) -> SeasonArchive | None:
        """Build and keep the archive for *season*, or None if it should not be created."""
        today = today or date.today()
        has_data = bool(athletes) or bool(entries) or bool(events)
        if not self.should_create(season, has_data, today):
            logger.debug("Archive for season %d not created", season)
            return None

        archive = build_archive(athletes, entries, events, season, archived_on=today)
        self._archives[season] = archive
        logger.info(
            "Created archive %s: %d athletes, %d staff, %d events",
            archive.id,
            len(archive.athlete_quality),
            len(archive.staff_quality),
            archive.team_metrics.total_events,
        )
        return archive

    def archive_missing(
        self,
        athletes: Sequence[Athlete],
        entries: Sequence[DebriefEntry],
        events: Sequence[RaceEvent],
        today: date | None = None,
        lookback: int = 5,
    ) -> list[SeasonArchive]:
        """Create the missing archives of the *lookback* previous seasons, newest first."""
        today = today or date.today()
        created: list[SeasonArchive] = []
        for season in range(today.year - 1, today.year - lookback - 1, -1):
            archive = self.create(season, athletes, entries, events, today)
            if archive is not None:
                created.append(archive)
        return created


def _delta(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None:
        return None
    return current - previous


def compare_archives(current: SeasonArchive, previous: SeasonArchive) -> ArchiveComparison:
    """Season-over-season deltas, current minus previous."""
    cur_group, prev_group = current.group_averages, previous.group_averages
    cur_team, prev_team = current.team_metrics, previous.team_metrics
    return ArchiveComparison(
        current_season=current.season,
        previous_season=previous.season,
        total_athletes_change=cur_group.total_athletes - prev_group.total_athletes,
        average_age_change=_one_decimal(cur_group.average_age - prev_group.average_age),
        power_coverage_change=cur_group.power_coverage - prev_group.power_coverage,
        cp_change=_delta(
            cur_group.baselines.team_value(DurationKey.CP),
            prev_group.baselines.team_value(DurationKey.CP),
        ),
        power_20min_change=_delta(
            cur_group.baselines.team_value(DurationKey.MIN20),
            prev_group.baselines.team_value(DurationKey.MIN20),
        ),
        total_events_change=cur_team.total_events - prev_team.total_events,
        average_ranking_change=_one_decimal(cur_team.average_ranking - prev_team.average_ranking),
        completion_rate_change=cur_team.completion_rate - prev_team.completion_rate,
    )
