"""Subjects with power profiles: rostered athletes and scouting candidates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Mapping

from insight_engine.models.enums import (
    DURATION_KEYS,
    DurationKey,
    FatigueState,
    QualitativeProfile,
    SubjectType,
)


@dataclass(frozen=True)
class PowerProfile:
    """Best power (watts) at each canonical duration.

    ``None``, zero, negative and non-finite entries all mean "not measured".
    """

    power_1s: float | None = None
    power_5s: float | None = None
    power_30s: float | None = None
    power_1min: float | None = None
    power_3min: float | None = None
    power_5min: float | None = None
    power_12min: float | None = None
    power_20min: float | None = None
    critical_power: float | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[DurationKey | str, float | None]) -> PowerProfile:
        """Build a profile from duration-key → watts pairs.

        Raises:
            UnknownDurationError: If any key is not a canonical duration.
        """
        kwargs = {
            _FIELD_BY_DURATION[DurationKey.parse(key)]: value
            for key, value in values.items()
        }
        return cls(**kwargs)

    def watts(self, duration: DurationKey) -> float:
        """Measured watts at *duration*, or 0.0 when not measured."""
        raw = getattr(self, _FIELD_BY_DURATION[duration])
        if raw is None:
            return 0.0
        value = float(raw)
        if not math.isfinite(value) or value <= 0:
            return 0.0
        return value

    def has_data(self) -> bool:
        """True if at least one duration carries a positive value."""
        return any(self.watts(d) > 0 for d in DURATION_KEYS)

    def to_mapping(self) -> dict[str, float]:
        """Measured values only, keyed by duration wire key."""
        return {d.value: self.watts(d) for d in DURATION_KEYS if self.watts(d) > 0}


_FIELD_BY_DURATION: dict[DurationKey, str] = {
    DurationKey.S1: "power_1s",
    DurationKey.S5: "power_5s",
    DurationKey.S30: "power_30s",
    DurationKey.MIN1: "power_1min",
    DurationKey.MIN3: "power_3min",
    DurationKey.MIN5: "power_5min",
    DurationKey.MIN12: "power_12min",
    DurationKey.MIN20: "power_20min",
    DurationKey.CP: "critical_power",
}


@dataclass(frozen=True)
class Subject:
    """Anything the engine can analyse: identity, demographics and power curves.

    Both concrete subject kinds share this surface, and every detector
    works only against it.
    """

    id: str
    first_name: str
    last_name: str
    weight_kg: float | None = None
    birth_date: date | str | None = None
    sex: str | None = None  # "M" or "F"
    qualitative_profile: QualitativeProfile | None = None
    power_profile_fresh: PowerProfile | None = None
    power_profile_15kj: PowerProfile | None = None
    power_profile_30kj: PowerProfile | None = None
    power_profile_45kj: PowerProfile | None = None

    subject_type = SubjectType.ATHLETE

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def profile(self, fatigue_state: FatigueState = FatigueState.FRESH) -> PowerProfile | None:
        """Return the power profile recorded under *fatigue_state*, if any."""
        if fatigue_state is FatigueState.LOW:
            return self.power_profile_15kj
        if fatigue_state is FatigueState.MEDIUM:
            return self.power_profile_30kj
        if fatigue_state is FatigueState.HIGH:
            return self.power_profile_45kj
        return self.power_profile_fresh


@dataclass(frozen=True)
class Athlete(Subject):
    """A rider on the team roster."""

    roster_role: str = "principal"  # "principal" or "reserve"
    is_active: bool = True

    subject_type = SubjectType.ATHLETE


@dataclass(frozen=True)
class ScoutingCandidate(Subject):
    """An external rider under observation for recruitment."""

    current_team: str | None = None
    potential_rating: int = 0  # 1-5, 0 when not rated

    subject_type = SubjectType.SCOUT
