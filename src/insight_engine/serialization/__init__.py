"""Serialization module: plain-dict and JSON conversion of snapshots and reports."""

from insight_engine.serialization.json_io import (
    Snapshot,
    archive_to_dict,
    report_to_dict,
    report_to_json,
    snapshot_from_dict,
)

__all__ = [
    "Snapshot",
    "archive_to_dict",
    "report_to_dict",
    "report_to_json",
    "snapshot_from_dict",
]
