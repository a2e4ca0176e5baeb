"""JSON snapshot decoding and report encoding.

A snapshot is the in-memory picture the roster application hands to the
engine: athletes, scouting candidates and, optionally, the season history
used for archives. Keys are snake_case; power profiles are keyed by
fatigue state, then by duration wire key:

    {"power_profiles": {"fresh": {"cp": 300, "20min": 320}, "15kj": {...}}}

All functions are pure (no I/O).
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping

from insight_engine.exceptions import SnapshotFormatError, UnknownDurationError
from insight_engine.models.archive import (
    AthleteRating,
    DebriefEntry,
    RaceEvent,
    SeasonArchive,
    StaffRating,
)
from insight_engine.models.baselines import GroupAverages
from insight_engine.models.enums import DurationKey, FatigueState, QualitativeProfile
from insight_engine.models.detection_trace import InsightReport
from insight_engine.models.subject import Athlete, PowerProfile, ScoutingCandidate

_PROFILE_FIELDS: dict[FatigueState, str] = {
    FatigueState.FRESH: "power_profile_fresh",
    FatigueState.LOW: "power_profile_15kj",
    FatigueState.MEDIUM: "power_profile_30kj",
    FatigueState.HIGH: "power_profile_45kj",
}


@dataclass(frozen=True)
class Snapshot:
    athletes: tuple[Athlete, ...] = field(default_factory=tuple)
    scouts: tuple[ScoutingCandidate, ...] = field(default_factory=tuple)
    events: tuple[RaceEvent, ...] = field(default_factory=tuple)
    debriefs: tuple[DebriefEntry, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _require(record: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in record or record[key] in (None, ""):
        raise SnapshotFormatError(f"{where}: missing required field {key!r}")
    return record[key]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_number(record: Mapping[str, Any], key: str, where: str) -> float | None:
    value = record.get(key)
    if value is None:
        return None
    if not _is_number(value) or not math.isfinite(value):
        raise SnapshotFormatError(f"{where}: {key} must be a finite number, got {value!r}")
    return value


def _flag(record: Mapping[str, Any], key: str, where: str, default: bool) -> bool:
    value = record.get(key, default)
    if not isinstance(value, bool):
        raise SnapshotFormatError(f"{where}: {key} must be true or false, got {value!r}")
    return value


def _mapping(raw: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError(f"{where}: expected an object, got {raw!r}")
    return raw


def _mappings(raw: Any, key: str, where: str) -> list[Mapping[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise SnapshotFormatError(f"{where}: {key} must be a list")
    return [_mapping(item, f"{where} {key}") for item in raw]


def _parse_date(raw: Any, where: str) -> date:
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise SnapshotFormatError(f"{where}: invalid date {raw!r}") from None


def _parse_role(raw: Any, where: str) -> QualitativeProfile | None:
    if raw in (None, ""):
        return None
    key = str(raw).strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return QualitativeProfile[key]
    except KeyError:
        raise SnapshotFormatError(f"{where}: unknown qualitative profile {raw!r}") from None


def _parse_profiles(raw: Any, where: str) -> dict[str, PowerProfile]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError(f"{where}: power_profiles must be an object")
    profiles: dict[str, PowerProfile] = {}
    for state_key, values in raw.items():
        try:
            state = FatigueState(state_key)
        except ValueError:
            raise SnapshotFormatError(f"{where}: unknown fatigue state {state_key!r}") from None
        if values is None:
            continue
        if not isinstance(values, Mapping):
            raise SnapshotFormatError(f"{where}: profile {state_key!r} must be an object")
        for duration, watts in values.items():
            if watts is not None and not _is_number(watts):
                raise SnapshotFormatError(f"{where}: {state_key}/{duration} must be a number")
        try:
            profiles[_PROFILE_FIELDS[state]] = PowerProfile.from_mapping(values)
        except UnknownDurationError as exc:
            raise SnapshotFormatError(f"{where}: {exc}") from exc
    return profiles


def _subject_kwargs(record: Mapping[str, Any], where: str) -> dict[str, Any]:
    weight = _optional_number(record, "weight_kg", where)
    return {
        "id": str(_require(record, "id", where)),
        "first_name": str(record.get("first_name", "")),
        "last_name": str(record.get("last_name", "")),
        "weight_kg": weight,
        "birth_date": record.get("birth_date"),
        "sex": record.get("sex"),
        "qualitative_profile": _parse_role(record.get("qualitative_profile"), where),
        **_parse_profiles(record.get("power_profiles"), where),
    }


def athlete_from_dict(record: Mapping[str, Any]) -> Athlete:
    where = f"athlete {record.get('id', '?')}"
    return Athlete(
        **_subject_kwargs(record, where),
        roster_role=str(record.get("roster_role", "principal")),
        is_active=_flag(record, "is_active", where, default=True),
    )


def scout_from_dict(record: Mapping[str, Any]) -> ScoutingCandidate:
    where = f"scout {record.get('id', '?')}"
    return ScoutingCandidate(
        **_subject_kwargs(record, where),
        current_team=record.get("current_team"),
        potential_rating=int(_optional_number(record, "potential_rating", where) or 0),
    )


def _event_from_dict(record: Mapping[str, Any]) -> RaceEvent:
    where = f"event {record.get('id', '?')}"
    return RaceEvent(
        id=str(_require(record, "id", where)),
        name=str(record.get("name", "")),
        start_date=_parse_date(_require(record, "start_date", where), where),
    )


def _debrief_from_dict(record: Mapping[str, Any]) -> DebriefEntry:
    where = f"debrief {record.get('id', '?')}"
    ranking = record.get("overall_ranking")
    return DebriefEntry(
        id=str(_require(record, "id", where)),
        event_id=str(record.get("event_id", "")),
        entry_date=_parse_date(_require(record, "entry_date", where), where),
        general_objectives=str(record.get("general_objectives") or ""),
        results_summary=str(record.get("results_summary") or ""),
        key_learnings=str(record.get("key_learnings") or ""),
        overall_ranking=str(ranking) if ranking is not None else None,
        athlete_ratings=tuple(
            AthleteRating(
                athlete_id=str(_require(r, "athlete_id", where)),
                collective_score=_optional_number(r, "collective_score", where),
                technical_score=_optional_number(r, "technical_score", where),
                physical_score=_optional_number(r, "physical_score", where),
            )
            for r in _mappings(record.get("athlete_ratings"), "athlete_ratings", where)
        ),
        staff_ratings=tuple(
            StaffRating(
                staff_id=str(_require(r, "staff_id", where)),
                rating=float(_optional_number(r, "rating", where) or 0),
                event_id=str(r.get("event_id", "")),
            )
            for r in _mappings(record.get("staff_ratings"), "staff_ratings", where)
        ),
    )


def _records(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    raw = data.get(key) or []
    if not isinstance(raw, list) or not all(isinstance(r, Mapping) for r in raw):
        raise SnapshotFormatError(f"{key!r} must be a list of objects")
    return raw


def snapshot_from_dict(data: Mapping[str, Any]) -> Snapshot:
    """Decode a snapshot.

    Raises:
        SnapshotFormatError: On a missing id, an unknown duration key,
            fatigue state or role, a malformed date, a non-numeric score
            or rating, or a rating that is not an object.
    """
    if not isinstance(data, Mapping):
        raise SnapshotFormatError("snapshot must be a JSON object")
    return Snapshot(
        athletes=tuple(athlete_from_dict(r) for r in _records(data, "athletes")),
        scouts=tuple(scout_from_dict(r) for r in _records(data, "scouts")),
        events=tuple(_event_from_dict(r) for r in _records(data, "events")),
        debriefs=tuple(_debrief_from_dict(r) for r in _records(data, "debriefs")),
    )


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode(value: Any) -> Any:
    """Enums by lowercase name; durations and fatigue states by wire key."""
    if isinstance(value, (DurationKey, FatigueState)):
        return value.value
    if isinstance(value, Enum):
        return value.name.lower()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _record_to_dict(record: Any) -> dict[str, Any]:
    return {
        name: _encode(value)
        for name, value in vars(record).items()
        if value is not None
    }


def baselines_to_dict(baselines: GroupAverages) -> dict[str, Any]:
    def by_key(values: Mapping[DurationKey, float]) -> dict[str, float]:
        return {d.value: v for d, v in values.items()}

    return {
        "mode": _encode(baselines.mode),
        "fatigue_state": _encode(baselines.fatigue_state),
        "sample_count": baselines.sample_count,
        "team": by_key(baselines.team),
        "by_category": {k: by_key(v) for k, v in baselines.by_category.items()},
        "by_sex": {k: by_key(v) for k, v in baselines.by_sex.items()},
    }


def report_to_dict(report: InsightReport) -> dict[str, Any]:
    """Convert an InsightReport to plain JSON-compatible data."""
    return {
        "insights": [_record_to_dict(i) for i in report.insights],
        "alerts": [_record_to_dict(a) for a in report.alerts],
        "trace": {
            "subjects_analysed": report.trace.subjects_analysed,
            "detectors": [_record_to_dict(r) for r in report.trace.detector_results],
        },
        "baselines": baselines_to_dict(report.baselines),
    }


def report_to_json(report: InsightReport, indent: int = 2) -> str:
    return json.dumps(report_to_dict(report), indent=indent)


def archive_to_dict(archive: SeasonArchive) -> dict[str, Any]:
    """Convert a SeasonArchive to plain JSON-compatible data."""
    group = archive.group_averages
    return {
        "id": archive.id,
        "season": archive.season,
        "archived_on": archive.archived_on.isoformat(),
        "group_averages": {
            "total_athletes": group.total_athletes,
            "average_age": group.average_age,
            "category_counts": dict(group.category_counts),
            "power_coverage": group.power_coverage,
            "baselines": baselines_to_dict(group.baselines),
        },
        "athlete_quality": [
            {
                **_record_to_dict(record),
                "characteristics": vars(record.characteristics).copy(),
            }
            for record in archive.athlete_quality
        ],
        "staff_quality": [_record_to_dict(r) for r in archive.staff_quality],
        "team_metrics": _record_to_dict(archive.team_metrics),
    }
