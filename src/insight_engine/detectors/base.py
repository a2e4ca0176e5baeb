"""Abstract base class for all insight detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from insight_engine.models.context import DetectionContext
from insight_engine.models.insight import Insight
from insight_engine.models.subject import Subject


class InsightDetector(ABC):
    """Base class for all detectors run by the insight engine.

    Each detector encapsulates one kind of finding. Detectors are
    discovered automatically by the DetectorRegistry and evaluated by the
    InsightEngine in ascending ``order``.

    Subclasses must define:
        detector_id: unique identifier (e.g. "team_deviation")
        version: semantic version string
        order: evaluation order, lowest first
        subjects(): the subjects this detector looks at
        detect(): the detector's logic
    """

    detector_id: str
    version: str
    order: int

    @abstractmethod
    def subjects(self, context: DetectionContext) -> Sequence[Subject]:
        """Subjects from *context* that this detector examines."""
        ...

    def is_applicable(self, context: DetectionContext) -> bool:
        """A detector with no subjects to examine is not applicable."""
        return len(self.subjects(context)) > 0

    @abstractmethod
    def detect(self, context: DetectionContext) -> list[Insight]:
        """Return the findings for this run, possibly empty."""
        ...
