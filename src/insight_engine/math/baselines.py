"""Group baseline calculation: mean power per duration by team, age category and sex.

Only subjects with a meaningful profile for the requested fatigue state
take part, and within them only positive values. A subject lacking one
duration is left out of that duration's mean instead of counting as zero.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

import numpy as np
import pandas as pd

from insight_engine.math.age import age_category
from insight_engine.math.power import get_power, has_meaningful_profile
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.enums import (
    DEFAULT_MASS_KG,
    DURATION_KEYS,
    UNKNOWN_SEX,
    DurationKey,
    FatigueState,
    PowerMode,
)
from insight_engine.models.subject import Subject

_COLUMNS = [d.value for d in DURATION_KEYS]


def power_frame(
    subjects: Iterable[Subject],
    mode: PowerMode = PowerMode.PER_KG,
    fatigue_state: FatigueState = FatigueState.FRESH,
    as_of: date | None = None,
    default_mass_kg: float = DEFAULT_MASS_KG,
) -> pd.DataFrame:
    """Tabulate eligible subjects: one row each, NaN where not measured.

    Columns are the duration wire keys plus ``category`` and ``sex``; the
    index is the subject id.
    """
    rows: list[dict[str, object]] = []
    ids: list[str] = []
    for subject in subjects:
        if not has_meaningful_profile(subject, fatigue_state, mode, default_mass_kg):
            continue
        row: dict[str, object] = {
            "category": age_category(subject.birth_date, as_of),
            "sex": subject.sex or UNKNOWN_SEX,
        }
        for duration in DURATION_KEYS:
            value = get_power(subject, duration, mode, fatigue_state, default_mass_kg)
            row[duration.value] = value if value > 0 else np.nan
        rows.append(row)
        ids.append(subject.id)

    frame = pd.DataFrame(rows, index=pd.Index(ids, name="subject_id"))
    if frame.empty:
        return pd.DataFrame(columns=_COLUMNS + ["category", "sex"], dtype=object)
    frame[_COLUMNS] = frame[_COLUMNS].astype(np.float64)
    return frame


def _means(series: pd.Series) -> dict[DurationKey, float]:
    """Drop NaN means so absent baselines stay absent."""
    return {
        DurationKey(key): float(value)
        for key, value in series.items()
        if pd.notna(value)
    }


def _partition_means(frame: pd.DataFrame, by: str) -> dict[str, dict[DurationKey, float]]:
    grouped = frame.groupby(by, sort=True)[_COLUMNS].mean()
    return {str(group): _means(row) for group, row in grouped.iterrows()}


def compute_baselines(
    subjects: Iterable[Subject],
    mode: PowerMode = PowerMode.PER_KG,
    fatigue_state: FatigueState = FatigueState.FRESH,
    as_of: date | None = None,
    default_mass_kg: float = DEFAULT_MASS_KG,
) -> GroupAverages:
    """Compute team, age-category and sex baselines.

    Args:
        subjects: Comparison group (normally the roster).
        mode: Absolute watts or per-kilogram.
        fatigue_state: Which profile to average.
        as_of: Reference date for age categories (default today).
        default_mass_kg: Mass assumed when a subject has none.

    Returns:
        GroupAverages in which a duration/partition with no eligible value
        has no entry.
    """
    frame = power_frame(subjects, mode, fatigue_state, as_of, default_mass_kg)
    if frame.empty:
        return GroupAverages(mode=mode, fatigue_state=fatigue_state)

    return GroupAverages(
        mode=mode,
        fatigue_state=fatigue_state,
        team=_means(frame[_COLUMNS].mean(skipna=True)),
        by_category=_partition_means(frame, "category"),
        by_sex=_partition_means(frame, "sex"),
        sample_count=len(frame),
    )
