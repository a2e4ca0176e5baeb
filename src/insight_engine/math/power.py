"""Power extraction: uniform access to power at a duration under a fatigue state.

Every accessor returns 0.0 for "no data". Callers must treat 0.0 as
missing, never as a measured zero.
"""

from __future__ import annotations

import math

from insight_engine.models.enums import (
    DEFAULT_MASS_KG,
    DURATION_KEYS,
    DurationKey,
    FatigueState,
    PowerMode,
)
from insight_engine.models.subject import Subject


def effective_mass_kg(subject: Subject, default_mass_kg: float = DEFAULT_MASS_KG) -> float:
    """Body mass used for per-kilogram values.

    Missing mass falls back to *default_mass_kg*. A recorded mass that is
    zero, negative or non-finite is returned as 0.0 so callers can exclude
    the subject.
    """
    if subject.weight_kg is None:
        return default_mass_kg
    mass = float(subject.weight_kg)
    if not math.isfinite(mass) or mass <= 0:
        return 0.0
    return mass


def get_power(
    subject: Subject,
    duration: DurationKey | str,
    mode: PowerMode = PowerMode.PER_KG,
    fatigue_state: FatigueState = FatigueState.FRESH,
    default_mass_kg: float = DEFAULT_MASS_KG,
) -> float:
    """Power for *subject* at *duration*, in watts or W/kg.

    Args:
        subject: Athlete or scouting candidate.
        duration: Canonical duration key (enum or wire string).
        mode: Absolute watts or per-kilogram.
        fatigue_state: Which of the four profiles to read.
        default_mass_kg: Mass assumed when the subject has none.

    Returns:
        The value, or 0.0 when the profile, the duration, or a valid mass
        (per-kilogram mode) is missing.

    Raises:
        UnknownDurationError: If *duration* is not a canonical key.
    """
    key = DurationKey.parse(duration)
    profile = subject.profile(fatigue_state)
    if profile is None:
        return 0.0
    watts = profile.watts(key)
    if watts <= 0:
        return 0.0
    if mode is PowerMode.WATTS:
        return watts
    mass = effective_mass_kg(subject, default_mass_kg)
    if mass <= 0:
        return 0.0
    return watts / mass


def has_meaningful_profile(
    subject: Subject,
    fatigue_state: FatigueState = FatigueState.FRESH,
    mode: PowerMode = PowerMode.WATTS,
    default_mass_kg: float = DEFAULT_MASS_KG,
) -> bool:
    """True if the subject has at least one positive value in *mode*.

    In per-kilogram mode a subject with an invalid mass has no meaningful
    profile, which keeps it out of per-kilogram baselines.
    """
    return any(
        get_power(subject, d, mode, fatigue_state, default_mass_kg) > 0
        for d in DURATION_KEYS
    )


def compute_regression(fresh: float, fatigued: float) -> float | None:
    """Fractional power loss under fatigue: (fresh - fatigued) / fresh.

    Returns None when either value is missing (non-positive).
    """
    if fresh <= 0 or fatigued <= 0:
        return None
    return (fresh - fatigued) / fresh


def percent_difference(value: float, reference: float) -> float:
    """Signed percentage of *value* relative to *reference* (the denominator)."""
    return (value - reference) / reference * 100.0


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves rounded up toward +inf (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))


def format_power(value: float, mode: PowerMode) -> str:
    if mode is PowerMode.WATTS:
        return f"{round_half_up(value)} W"
    return f"{value:.1f} W/kg"
