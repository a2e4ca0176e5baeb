"""Season history inputs and season archive records.

Inputs (events, debrief entries, ratings) come from the roster
application. Archive records are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from insight_engine.models.baselines import GroupAverages
from insight_engine.models.enums import QualityTrend


# -- History inputs --------------------------------------------------------


@dataclass(frozen=True)
class RaceEvent:
    id: str
    name: str
    start_date: date


@dataclass(frozen=True)
class AthleteRating:
    """Staff scoring of one athlete after one event (scores are 1-10)."""

    athlete_id: str
    collective_score: float | None = None
    technical_score: float | None = None
    physical_score: float | None = None

    @property
    def is_complete(self) -> bool:
        return (
            self.collective_score is not None
            and self.technical_score is not None
            and self.physical_score is not None
        )

    @property
    def mean_score(self) -> float:
        scores = [
            s
            for s in (self.collective_score, self.technical_score, self.physical_score)
            if s is not None
        ]
        return sum(scores) / len(scores) if scores else 0.0


@dataclass(frozen=True)
class StaffRating:
    staff_id: str
    rating: float  # 1-5, 0 when not rated
    event_id: str = ""


@dataclass(frozen=True)
class DebriefEntry:
    """Post-event performance debrief for one event."""

    id: str
    event_id: str
    entry_date: date
    general_objectives: str = ""
    results_summary: str = ""
    key_learnings: str = ""
    overall_ranking: str | None = None
    athlete_ratings: tuple[AthleteRating, ...] = field(default_factory=tuple)
    staff_ratings: tuple[StaffRating, ...] = field(default_factory=tuple)

    @property
    def is_debriefed(self) -> bool:
        return bool(self.general_objectives or self.results_summary or self.key_learnings)


# -- Archive records -------------------------------------------------------


@dataclass(frozen=True)
class GroupAverageArchive:
    season: int
    total_athletes: int
    average_age: float
    category_counts: dict[str, int]
    power_coverage: int  # % of athletes with a fresh critical power
    baselines: GroupAverages


@dataclass(frozen=True)
class CharacteristicScores:
    """Role characteristic scores on a 0-100 scale."""

    sprint: int = 0
    anaerobic: int = 0
    puncher: int = 0
    climbing: int = 0
    all_round: int = 0
    general_performance: int = 0
    fatigue_resistance: int = 0

    def any_positive(self) -> bool:
        return any(
            score > 0
            for score in (
                self.sprint,
                self.anaerobic,
                self.puncher,
                self.climbing,
                self.all_round,
                self.general_performance,
            )
        )


@dataclass(frozen=True)
class AthleteQualityRecord:
    athlete_id: str
    season: int
    average_collective_score: float
    average_technical_score: float
    average_physical_score: float
    characteristics: CharacteristicScores
    total_events: int
    events_with_ratings: int
    quality_trend: QualityTrend = QualityTrend.STABLE
    last_rating_date: date | None = None


@dataclass(frozen=True)
class StaffQualityRecord:
    staff_id: str
    season: int
    average_rating: float
    total_events: int
    events_with_ratings: int
    last_rating_date: date | None = None


@dataclass(frozen=True)
class TeamMetrics:
    season: int
    total_events: int
    average_ranking: float
    best_ranking: int
    worst_ranking: int
    events_with_debriefs: int
    completion_rate: int  # % of season events with a debrief


@dataclass(frozen=True)
class SeasonArchive:
    """Point-in-time snapshot of one season's aggregated statistics."""

    id: str
    season: int
    archived_on: date
    group_averages: GroupAverageArchive
    athlete_quality: tuple[AthleteQualityRecord, ...]
    staff_quality: tuple[StaffQualityRecord, ...]
    team_metrics: TeamMetrics


@dataclass(frozen=True)
class ArchiveComparison:
    """Season-over-season deltas (current minus previous)."""

    current_season: int
    previous_season: int
    total_athletes_change: int
    average_age_change: float
    power_coverage_change: int
    cp_change: float | None
    power_20min_change: float | None
    total_events_change: int
    average_ranking_change: float
    completion_rate_change: int
