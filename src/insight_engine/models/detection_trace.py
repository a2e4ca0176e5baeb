"""Detection trace: audit trail of which detectors fired during a run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import auto, IntEnum

from insight_engine.models.baselines import GroupAverages
from insight_engine.models.insight import Alert, Insight


class DetectorStatus(IntEnum):
    """Whether a detector produced findings, found nothing, or had no subjects."""

    FIRED = auto()
    SKIPPED = auto()
    NOT_APPLICABLE = auto()


@dataclass(frozen=True)
class DetectorResult:
    """Record of a single detector's evaluation during an engine run."""

    detector_id: str
    status: DetectorStatus
    insight_count: int = 0
    explanation: str = ""


@dataclass(frozen=True)
class DetectionTrace:
    detector_results: tuple[DetectorResult, ...] = field(default_factory=tuple)
    subjects_analysed: int = 0


@dataclass(frozen=True)
class InsightReport:
    """Everything one engine run returns."""

    insights: tuple[Insight, ...]
    alerts: tuple[Alert, ...]
    trace: DetectionTrace
    baselines: GroupAverages
