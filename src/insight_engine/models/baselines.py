"""Group baselines: mean power per duration for the team and its partitions."""

from __future__ import annotations

from dataclasses import dataclass, field

from insight_engine.models.enums import DurationKey, FatigueState, PowerMode


@dataclass(frozen=True)
class GroupAverages:
    """Mean power at each duration for one (mode, fatigue state) pair.

    Durations with no eligible subject are absent from the mappings rather
    than stored as zero, so ``team.get(duration)`` returning ``None`` means
    "no baseline, skip the comparison".
    """

    mode: PowerMode
    fatigue_state: FatigueState
    team: dict[DurationKey, float] = field(default_factory=dict)
    by_category: dict[str, dict[DurationKey, float]] = field(default_factory=dict)
    by_sex: dict[str, dict[DurationKey, float]] = field(default_factory=dict)
    sample_count: int = 0

    def team_value(self, duration: DurationKey) -> float | None:
        return self.team.get(duration)

    def category_value(self, category: str, duration: DurationKey) -> float | None:
        return self.by_category.get(category, {}).get(duration)

    def sex_value(self, sex: str, duration: DurationKey) -> float | None:
        return self.by_sex.get(sex, {}).get(duration)

    def team_ratio_to_cp(self, duration: DurationKey) -> float | None:
        """Team mean at *duration* divided by team mean critical power."""
        value = self.team.get(duration)
        cp = self.team.get(DurationKey.CP)
        if not value or not cp:
            return None
        return value / cp
