"""Tests for PowerProfile and the two subject kinds."""

from __future__ import annotations

import dataclasses

import pytest

from insight_engine.exceptions import UnknownDurationError
from insight_engine.models.enums import DurationKey, FatigueState, SubjectType
from insight_engine.models.subject import Athlete, PowerProfile, ScoutingCandidate, Subject


class TestPowerProfile:
    def test_from_mapping(self) -> None:
        profile = PowerProfile.from_mapping({"cp": 300, "20min": 320, DurationKey.S5: 1000})
        assert profile.critical_power == 300
        assert profile.power_20min == 320
        assert profile.power_5s == 1000

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(UnknownDurationError) as excinfo:
            PowerProfile.from_mapping({"cp": 300, "2min": 400})
        assert excinfo.value.key == "2min"

    def test_watts_treats_non_positive_as_missing(self) -> None:
        profile = PowerProfile(critical_power=0, power_20min=-5, power_5min=float("inf"))
        assert profile.watts(DurationKey.CP) == 0.0
        assert profile.watts(DurationKey.MIN20) == 0.0
        assert profile.watts(DurationKey.MIN5) == 0.0
        assert not profile.has_data()

    def test_to_mapping_keeps_measured_values(self) -> None:
        profile = PowerProfile.from_mapping({"cp": 300, "1s": 0})
        assert profile.to_mapping() == {"cp": 300.0}

    def test_frozen(self) -> None:
        profile = PowerProfile(critical_power=300)
        with pytest.raises(dataclasses.FrozenInstanceError):
            profile.critical_power = 310  # type: ignore[misc]


class TestSubjects:
    def test_both_kinds_share_the_interface(self, athlete_factory, scout_factory) -> None:
        athlete = athlete_factory(fresh={"cp": 300})
        scout = scout_factory(fresh={"cp": 300})
        assert isinstance(athlete, Subject)
        assert isinstance(scout, Subject)
        assert athlete.subject_type is SubjectType.ATHLETE
        assert scout.subject_type is SubjectType.SCOUT

    def test_profile_by_fatigue_state(self, athlete_factory) -> None:
        athlete = athlete_factory(fresh={"cp": 300}, p15={"cp": 280}, p30={"cp": 260}, p45={"cp": 240})
        assert athlete.profile(FatigueState.FRESH).critical_power == 300
        assert athlete.profile(FatigueState.LOW).critical_power == 280
        assert athlete.profile(FatigueState.MEDIUM).critical_power == 260
        assert athlete.profile(FatigueState.HIGH).critical_power == 240

    def test_display_name(self) -> None:
        athlete = Athlete(id="1", first_name="Marie", last_name="Dupont")
        assert athlete.display_name == "Marie Dupont"

    def test_defaults(self) -> None:
        athlete = Athlete(id="1", first_name="A", last_name="B")
        scout = ScoutingCandidate(id="2", first_name="C", last_name="D")
        assert athlete.roster_role == "principal"
        assert athlete.weight_kg is None
        assert scout.potential_rating == 0
