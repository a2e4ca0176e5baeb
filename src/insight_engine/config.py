"""Detection thresholds with documented defaults and environment overrides."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields
from typing import Mapping

from insight_engine.exceptions import ConfigurationError
from insight_engine.models.enums import DEFAULT_MASS_KG

_ENV_VARS: dict[str, str] = {
    "above_team_pct": "INSIGHT_ABOVE_TEAM_PCT",
    "below_team_pct": "INSIGHT_BELOW_TEAM_PCT",
    "scout_above_team_pct": "INSIGHT_SCOUT_ABOVE_TEAM_PCT",
    "profile_mismatch_pct": "INSIGHT_PROFILE_MISMATCH_PCT",
    "regression_vs_fresh_pct": "INSIGHT_REGRESSION_PCT",
    "good_resistance_pct": "INSIGHT_GOOD_RESISTANCE_PCT",
    "default_mass_kg": "INSIGHT_DEFAULT_MASS_KG",
}


@dataclass(frozen=True)
class ThresholdConfig:
    """Thresholds used by every detector, expressed in percent.

    Attributes:
        above_team_pct: Value this far above a team/category mean is notable.
        below_team_pct: Value this far below the team mean is a warning.
        scout_above_team_pct: Scout this far above the team mean is a match.
        profile_mismatch_pct: Signature ratio this far below the team ratio
            contradicts the declared role.
        regression_vs_fresh_pct: Fatigued loss at or above this is flagged.
        good_resistance_pct: Fatigued loss at or below this is praised.
            Losses strictly between the two stay unflagged.
        default_mass_kg: Mass assumed when a subject has none recorded.
    """

    above_team_pct: float = 8.0
    below_team_pct: float = 8.0
    scout_above_team_pct: float = 5.0
    profile_mismatch_pct: float = 15.0
    regression_vs_fresh_pct: float = 10.0
    good_resistance_pct: float = 5.0
    default_mass_kg: float = DEFAULT_MASS_KG

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"{f.name} must be finite and non-negative, got {value}")
        if self.good_resistance_pct > self.regression_vs_fresh_pct:
            raise ConfigurationError(
                f"good_resistance_pct ({self.good_resistance_pct}) cannot exceed "
                f"regression_vs_fresh_pct ({self.regression_vs_fresh_pct})"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ThresholdConfig:
        """Build a config, overriding defaults from ``INSIGHT_*`` variables."""
        env = os.environ if environ is None else environ
        overrides: dict[str, float] = {}
        for name, var in _ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[name] = float(raw)
            except ValueError:
                raise ConfigurationError(f"{var} must be numeric, got {raw!r}") from None
        return cls(**overrides)


DEFAULT_THRESHOLDS = ThresholdConfig()
