"""Data models for the insight engine."""

from insight_engine.models.archive import (
    AthleteQualityRecord,
    AthleteRating,
    DebriefEntry,
    GroupAverageArchive,
    RaceEvent,
    SeasonArchive,
    StaffQualityRecord,
    StaffRating,
    TeamMetrics,
)
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.detection_trace import DetectionTrace, DetectorResult, InsightReport
from insight_engine.models.enums import (
    AlertKind,
    DurationKey,
    FatigueState,
    InsightKind,
    PowerMode,
    QualitativeProfile,
    Severity,
    SubjectType,
)
from insight_engine.models.insight import Alert, Insight
from insight_engine.models.subject import Athlete, PowerProfile, ScoutingCandidate, Subject

__all__ = [
    "Alert",
    "AlertKind",
    "Athlete",
    "AthleteQualityRecord",
    "AthleteRating",
    "DebriefEntry",
    "DetectionTrace",
    "DetectorResult",
    "DurationKey",
    "FatigueState",
    "GroupAverageArchive",
    "GroupAverages",
    "Insight",
    "InsightKind",
    "InsightReport",
    "PowerMode",
    "PowerProfile",
    "QualitativeProfile",
    "RaceEvent",
    "ScoutingCandidate",
    "SeasonArchive",
    "Severity",
    "StaffQualityRecord",
    "StaffRating",
    "Subject",
    "SubjectType",
    "TeamMetrics",
]
