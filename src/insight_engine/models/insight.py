"""Insight and Alert records: the engine's findings."""

from __future__ import annotations

from dataclasses import dataclass

from insight_engine.models.enums import (
    AlertKind,
    DurationKey,
    FatigueState,
    InsightKind,
    Severity,
    SubjectType,
)


@dataclass(frozen=True)
class Insight:
    """One statistical finding about one subject.

    ``id`` is derived from kind, subject and duration/fatigue level so the
    same input snapshot always yields the same ids.
    """

    id: str
    kind: InsightKind
    severity: Severity
    title: str
    description: str
    subject_id: str
    subject_name: str
    subject_type: SubjectType

    duration: DurationKey | None = None
    fatigue_state: FatigueState | None = None
    value: float | None = None  # Subject's value in ``unit``
    unit: str | None = None
    reference_value: float | None = None  # Baseline the value was compared to
    reference_unit: str | None = None
    percent_above: int | None = None
    percent_below: int | None = None
    percent_regression_vs_fresh: int | None = None  # Negative for a loss
    category: str | None = None


@dataclass(frozen=True)
class Alert:
    """A finding plus a recommended follow-up."""

    id: str
    kind: AlertKind
    severity: Severity
    title: str
    message: str
    subject_id: str
    subject_name: str
    subject_type: SubjectType
    action_hint: str | None = None

    duration: DurationKey | None = None
    fatigue_state: FatigueState | None = None
    value: float | None = None
    unit: str | None = None
    reference_value: float | None = None
    reference_unit: str | None = None
    percent_vs_team: int | None = None  # +X above, -X below
    percent_regression_vs_fresh: int | None = None
