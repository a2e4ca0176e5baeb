"""Shared test fixtures: athletes, scouts, rosters and reference dates."""

from __future__ import annotations

from datetime import date
from typing import Callable, Mapping

import pytest

from insight_engine.models.enums import QualitativeProfile
from insight_engine.models.subject import Athlete, PowerProfile, ScoutingCandidate

ProfileValues = Mapping[str, float] | None


def _profile(values: ProfileValues) -> PowerProfile | None:
    return PowerProfile.from_mapping(values) if values is not None else None


@pytest.fixture
def as_of() -> date:
    """Reference date for age categories: 2025 season."""
    return date(2025, 6, 1)


@pytest.fixture
def athlete_factory() -> Callable[..., Athlete]:
    """Factory fixture for Athlete instances.

    Profiles are given as duration-key → watts mappings, e.g.
    ``fresh={"cp": 300, "20min": 320}``.
    """

    def factory(
        id: str = "a1",
        fresh: ProfileValues = None,
        p15: ProfileValues = None,
        p30: ProfileValues = None,
        p45: ProfileValues = None,
        weight_kg: float | None = 70.0,
        birth_date: date | str | None = "1995-03-10",
        sex: str | None = "M",
        roster_role: str = "principal",
        qualitative_profile: QualitativeProfile | None = None,
        first_name: str = "Test",
        last_name: str | None = None,
    ) -> Athlete:
        return Athlete(
            id=id,
            first_name=first_name,
            last_name=last_name if last_name is not None else id.upper(),
            weight_kg=weight_kg,
            birth_date=birth_date,
            sex=sex,
            qualitative_profile=qualitative_profile,
            power_profile_fresh=_profile(fresh),
            power_profile_15kj=_profile(p15),
            power_profile_30kj=_profile(p30),
            power_profile_45kj=_profile(p45),
            roster_role=roster_role,
        )

    return factory


@pytest.fixture
def scout_factory() -> Callable[..., ScoutingCandidate]:
    """Factory fixture for ScoutingCandidate instances."""

    def factory(
        id: str = "s1",
        fresh: ProfileValues = None,
        weight_kg: float | None = 70.0,
        birth_date: date | str | None = "2004-08-20",
        sex: str | None = "M",
        qualitative_profile: QualitativeProfile | None = None,
        current_team: str | None = "Club Amateur",
    ) -> ScoutingCandidate:
        return ScoutingCandidate(
            id=id,
            first_name="Scout",
            last_name=id.upper(),
            weight_kg=weight_kg,
            birth_date=birth_date,
            sex=sex,
            qualitative_profile=qualitative_profile,
            power_profile_fresh=_profile(fresh),
            current_team=current_team,
        )

    return factory


@pytest.fixture
def squad(athlete_factory: Callable[..., Athlete]) -> list[Athlete]:
    """Three principal riders at 70 kg and 280 W critical power (4.0 W/kg)."""
    return [
        athlete_factory(
            id=f"p{i}",
            fresh={"cp": 280, "20min": 300, "5min": 380, "1min": 560, "5s": 1000},
            p15={"cp": 266, "20min": 285, "5min": 361, "1min": 532},
        )
        for i in (1, 2, 3)
    ]


@pytest.fixture
def full_profile() -> dict[str, float]:
    """A complete fresh profile for a 70 kg male rider."""
    return {
        "1s": 1250,
        "5s": 1100,
        "30s": 700,
        "1min": 550,
        "3min": 430,
        "5min": 400,
        "12min": 350,
        "20min": 330,
        "cp": 310,
    }
