"""Role characteristic scores derived from a fresh power profile.

Each duration is scored on a 10-100 scale by linear interpolation between
the novice and world-class rows of a sex-specific power-profile reference
table (after Coggan's power profiling chart). Scores are combined into
sprint, anaerobic, puncher, climbing and all-round characteristics, then
weighted by the rider's declared role into a general performance score.
"""

from __future__ import annotations

from insight_engine.math.power import effective_mass_kg, has_meaningful_profile, round_half_up
from insight_engine.models.archive import CharacteristicScores
from insight_engine.models.enums import (
    DEFAULT_MASS_KG,
    FATIGUED_STATES,
    DurationKey,
    FatigueState,
    PowerMode,
    QualitativeProfile,
)
from insight_engine.models.subject import Subject

# (world class, novice) W/kg bounds per duration
_REFERENCE_WKG: dict[str, dict[DurationKey, tuple[float, float]]] = {
    "M": {
        DurationKey.S1: (29.5, 16.0),
        DurationKey.S5: (24.5, 8.4),
        DurationKey.S30: (16.8, 3.4),
        DurationKey.MIN1: (11.8, 2.8),
        DurationKey.MIN3: (9.0, 2.7),
        DurationKey.MIN5: (8.1, 2.7),
        DurationKey.MIN12: (7.4, 2.0),
        DurationKey.MIN20: (7.2, 1.8),
    },
    "F": {
        DurationKey.S1: (25.8, 12.3),
        DurationKey.S5: (21.3, 7.8),
        DurationKey.S30: (14.6, 3.8),
        DurationKey.MIN1: (10.3, 2.2),
        DurationKey.MIN3: (7.8, 2.5),
        DurationKey.MIN5: (7.1, 2.6),
        DurationKey.MIN12: (6.5, 2.0),
        DurationKey.MIN20: (6.2, 1.7),
    },
}

# Absolute-watt tables are the W/kg tables scaled to a reference rider
_REFERENCE_MASS_KG = {"M": 70.0, "F": 58.0}

# Critical power has no row of its own and is scored against 20 minutes
_REFERENCE_ROW = {DurationKey.CP: DurationKey.MIN20}

ROLE_WEIGHTS: dict[QualitativeProfile, dict[str, float]] = {
    QualitativeProfile.SPRINTER: {"sprint": 0.4, "anaerobic": 0.3, "puncher": 0.15, "climbing": 0.05, "all_round": 0.1},
    QualitativeProfile.CLIMBER: {"sprint": 0.05, "anaerobic": 0.1, "puncher": 0.2, "climbing": 0.5, "all_round": 0.15},
    QualitativeProfile.ALL_ROUNDER: {"sprint": 0.1, "anaerobic": 0.15, "puncher": 0.2, "climbing": 0.2, "all_round": 0.35},
    QualitativeProfile.PUNCHER: {"sprint": 0.15, "anaerobic": 0.25, "puncher": 0.4, "climbing": 0.15, "all_round": 0.05},
    QualitativeProfile.COMPLETE: {"sprint": 0.2, "anaerobic": 0.2, "puncher": 0.2, "climbing": 0.2, "all_round": 0.2},
    QualitativeProfile.CLASSICS_SPECIALIST: {"sprint": 0.2, "anaerobic": 0.2, "puncher": 0.25, "climbing": 0.1, "all_round": 0.25},
    QualitativeProfile.BREAKAWAY_SPECIALIST: {"sprint": 0.1, "anaerobic": 0.15, "puncher": 0.25, "climbing": 0.2, "all_round": 0.3},
    QualitativeProfile.OTHER: {"sprint": 0.2, "anaerobic": 0.2, "puncher": 0.2, "climbing": 0.2, "all_round": 0.2},
}

# Weighted durations for the fatigue-resistance score
_FATIGUE_WEIGHTS: dict[DurationKey, float] = {
    DurationKey.S5: 0.1,
    DurationKey.MIN1: 0.2,
    DurationKey.MIN5: 0.3,
    DurationKey.CP: 0.4,
}

_NEUTRAL_FATIGUE_SCORE = 50.0


def interpolate_score(value: float, world_class: float, novice: float) -> float:
    """Map *value* linearly onto 10 (novice) .. 100 (world class).

    Returns 0.0 for a missing (non-positive) value.
    """
    if value <= 0:
        return 0.0
    if value >= world_class:
        return 100.0
    if value <= novice:
        return 10.0
    return float(round_half_up(10 + (value - novice) / (world_class - novice) * 90))


def _reference_sex(sex: str | None) -> str:
    # Unknown sex uses the women's table
    return "M" if sex == "M" else "F"


def duration_score(subject: Subject, duration: DurationKey, absolute: bool = False) -> float:
    """Score one fresh-profile duration against the reference table."""
    profile = subject.power_profile_fresh
    if profile is None:
        return 0.0
    sex = _reference_sex(subject.sex)
    world_class, novice = _REFERENCE_WKG[sex][_REFERENCE_ROW.get(duration, duration)]
    watts = profile.watts(duration)
    if absolute:
        ref_mass = _REFERENCE_MASS_KG[sex]
        return interpolate_score(watts, round_half_up(world_class * ref_mass), round_half_up(novice * ref_mass))
    mass = effective_mass_kg(subject)
    if mass <= 0:
        return 0.0
    return interpolate_score(watts / mass, world_class, novice)


def fatigue_resistance_score(subject: Subject) -> float:
    """Squared weighted fatigued/fresh power ratio × 100, clamped to [0, 100].

    Uses the most severe fatigued profile with data; 50 when there is none.
    """
    fresh = subject.power_profile_fresh
    fatigued = None
    for state in reversed(FATIGUED_STATES):
        if has_meaningful_profile(subject, state):
            fatigued = subject.profile(state)
            break
    if fresh is None or fatigued is None:
        return _NEUTRAL_FATIGUE_SCORE

    total = 0.0
    total_weight = 0.0
    for duration, weight in _FATIGUE_WEIGHTS.items():
        fresh_watts = fresh.watts(duration)
        fatigued_watts = fatigued.watts(duration)
        if fresh_watts > 0 and fatigued_watts > 0:
            total += fatigued_watts / fresh_watts * weight
            total_weight += weight
    if total_weight == 0:
        return _NEUTRAL_FATIGUE_SCORE
    ratio = total / total_weight
    return max(0.0, min(100.0, ratio**2 * 100))


def characteristic_scores(subject: Subject) -> CharacteristicScores:
    """Compute all characteristic scores for *subject*.

    A subject without fresh data or without a valid recorded mass scores
    zero throughout.
    """
    if (
        subject.weight_kg is None
        or effective_mass_kg(subject) <= 0
        or not has_meaningful_profile(subject, FatigueState.FRESH, PowerMode.WATTS)
    ):
        return CharacteristicScores()

    def wkg(d: DurationKey) -> float:
        return duration_score(subject, d)

    def watts(d: DurationKey) -> float:
        return duration_score(subject, d, absolute=True)

    sprint_watts = watts(DurationKey.S5) * 0.6 + watts(DurationKey.S1) * 0.4
    sprint_wkg = wkg(DurationKey.S5) * 0.6 + wkg(DurationKey.S30) * 0.4
    chars = {
        "sprint": sprint_watts * 0.6 + sprint_wkg * 0.4,
        "anaerobic": wkg(DurationKey.S30) * 0.5 + wkg(DurationKey.MIN1) * 0.5,
        "puncher": wkg(DurationKey.MIN1) * 0.4 + wkg(DurationKey.MIN3) * 0.4 + wkg(DurationKey.MIN5) * 0.2,
        "climbing": wkg(DurationKey.MIN5) * 0.2 + wkg(DurationKey.MIN12) * 0.3 + wkg(DurationKey.MIN20) * 0.5,
    }
    all_round_watts = (
        watts(DurationKey.MIN5) * 0.2 + watts(DurationKey.MIN20) * 0.4 + watts(DurationKey.CP) * 0.4
    )
    all_round_wkg = wkg(DurationKey.MIN20) * 0.5 + wkg(DurationKey.CP) * 0.5
    chars["all_round"] = all_round_watts * 0.7 + all_round_wkg * 0.3

    weights = ROLE_WEIGHTS[subject.qualitative_profile or QualitativeProfile.OTHER]
    general = sum(chars[name] * weight for name, weight in weights.items())

    return CharacteristicScores(
        sprint=round_half_up(chars["sprint"]),
        anaerobic=round_half_up(chars["anaerobic"]),
        puncher=round_half_up(chars["puncher"]),
        climbing=round_half_up(chars["climbing"]),
        all_round=round_half_up(chars["all_round"]),
        general_performance=round_half_up(max(0.0, min(100.0, general))),
        fatigue_resistance=round_half_up(fatigue_resistance_score(subject)),
    )
