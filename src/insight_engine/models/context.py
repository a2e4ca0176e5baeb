"""Detection context: frozen inputs shared by every detector in one run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from insight_engine.config import DEFAULT_THRESHOLDS, ThresholdConfig
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.enums import FatigueState, PowerMode
from insight_engine.models.subject import Athlete, ScoutingCandidate, Subject


@dataclass(frozen=True)
class DetectionContext:
    """Immutable snapshot handed to detectors.

    Baselines are fully computed before the context is built; detectors
    only read them.

    Attributes:
        compared_subjects: Subjects checked against team/category means
            and their declared role.
        fatigue_athletes: Rostered athletes eligible for fatigue analysis.
        baselines: Means for the run's (mode, fatigue_state).
        fresh_baselines: Fresh-state means in the run's mode, used as the
            team reference for fatigue findings.
    """

    athletes: tuple[Athlete, ...]
    scouts: tuple[ScoutingCandidate, ...]
    baselines: GroupAverages
    fresh_baselines: GroupAverages
    mode: PowerMode = PowerMode.PER_KG
    fatigue_state: FatigueState = FatigueState.FRESH
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
    compared_subjects: tuple[Subject, ...] = field(default_factory=tuple)
    fatigue_athletes: tuple[Athlete, ...] = field(default_factory=tuple)
    as_of: date | None = None
