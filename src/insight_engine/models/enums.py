"""Enumerations and fixed constants for the insight engine."""

from __future__ import annotations

from enum import Enum, IntEnum, auto

from insight_engine.exceptions import UnknownDurationError


class DurationKey(Enum):
    """Canonical effort durations at which power is measured.

    Values are the wire keys used by the roster application. ``CP`` is the
    critical power (FTP) endurance proxy.
    """

    S1 = "1s"
    S5 = "5s"
    S30 = "30s"
    MIN1 = "1min"
    MIN3 = "3min"
    MIN5 = "5min"
    MIN12 = "12min"
    MIN20 = "20min"
    CP = "cp"

    @classmethod
    def parse(cls, key: DurationKey | str) -> DurationKey:
        """Return the DurationKey for *key*, rejecting anything non-canonical."""
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            raise UnknownDurationError(key) from None


class FatigueState(Enum):
    """Condition under which a power profile was measured.

    The fatigued states correspond to accumulated work of 15, 30 and
    45 kJ/kg before the effort.
    """

    FRESH = "fresh"
    LOW = "15kj"
    MEDIUM = "30kj"
    HIGH = "45kj"

    @property
    def label(self) -> str:
        if self is FatigueState.FRESH:
            return "fresh"
        return f"{self.value[:-2]} kJ/kg"


class PowerMode(IntEnum):
    """Absolute watts or watts per kilogram of body mass."""

    WATTS = auto()
    PER_KG = auto()

    @property
    def unit(self) -> str:
        return "W" if self is PowerMode.WATTS else "W/kg"


class QualitativeProfile(IntEnum):
    """Coach-assigned rider role."""

    SPRINTER = auto()
    CLIMBER = auto()
    ALL_ROUNDER = auto()
    PUNCHER = auto()
    CLASSICS_SPECIALIST = auto()
    BREAKAWAY_SPECIALIST = auto()
    COMPLETE = auto()
    OTHER = auto()


class SubjectType(IntEnum):
    """Rostered athlete or external scouting candidate."""

    ATHLETE = auto()
    SCOUT = auto()


class Severity(IntEnum):
    POSITIVE = auto()
    WARNING = auto()
    INFO = auto()
    NEUTRAL = auto()


class InsightKind(IntEnum):
    """Kinds of statistical finding."""

    ABOVE_TEAM_AVERAGE = auto()
    BELOW_TEAM_AVERAGE = auto()
    ABOVE_CATEGORY_AVERAGE = auto()
    FATIGUE_REGRESSION = auto()
    FATIGUE_RESISTANCE = auto()
    PROFILE_MISMATCH = auto()
    SCOUT_MATCH = auto()
    PROFILE_HIGHLIGHT = auto()


class AlertKind(IntEnum):
    """Kinds of action-oriented alert."""

    MISSING_POWER_DATA = auto()
    FATIGUE_DATA_MISSING = auto()
    PROFILE_MISMATCH = auto()
    SCOUT_ABOVE_TEAM = auto()
    FATIGUE_REGRESSION = auto()
    ABOVE_TEAM_AVERAGE = auto()
    BELOW_TEAM_AVERAGE = auto()


class QualityTrend(IntEnum):
    IMPROVING = auto()
    STABLE = auto()
    DECLINING = auto()


# ---------------------------------------------------------------------------
# Fixed constants
# ---------------------------------------------------------------------------

DURATION_KEYS: tuple[DurationKey, ...] = tuple(DurationKey)

FATIGUED_STATES: tuple[FatigueState, ...] = (
    FatigueState.LOW,
    FatigueState.MEDIUM,
    FatigueState.HIGH,
)

# Endurance-relevant durations inspected for regression under fatigue
FATIGUE_CRITICAL_DURATIONS: tuple[DurationKey, ...] = (
    DurationKey.CP,
    DurationKey.MIN20,
    DurationKey.MIN5,
    DurationKey.MIN12,
    DurationKey.MIN1,
)

# Durations a rider of each role is expected to be strong at
SIGNATURE_DURATIONS: dict[QualitativeProfile, tuple[DurationKey, ...]] = {
    QualitativeProfile.SPRINTER: (DurationKey.S1, DurationKey.S5, DurationKey.S30),
    QualitativeProfile.CLIMBER: (
        DurationKey.MIN5,
        DurationKey.MIN12,
        DurationKey.MIN20,
        DurationKey.CP,
    ),
    QualitativeProfile.ALL_ROUNDER: (DurationKey.MIN20, DurationKey.CP, DurationKey.MIN12),
    QualitativeProfile.PUNCHER: (
        DurationKey.MIN1,
        DurationKey.MIN3,
        DurationKey.MIN5,
        DurationKey.S30,
    ),
    QualitativeProfile.CLASSICS_SPECIALIST: (DurationKey.MIN5, DurationKey.MIN20, DurationKey.S30),
    QualitativeProfile.BREAKAWAY_SPECIALIST: (DurationKey.MIN20, DurationKey.CP, DurationKey.MIN5),
    QualitativeProfile.COMPLETE: (
        DurationKey.S1,
        DurationKey.MIN5,
        DurationKey.MIN20,
        DurationKey.CP,
    ),
}

DEFAULT_MASS_KG = 70.0

UNKNOWN_CATEGORY = "N/A"
UNKNOWN_SEX = "unknown"
AGE_CATEGORIES: tuple[str, ...] = ("U19", "U23", "Senior")
