"""Custom exception hierarchy for the insight engine.

Detection functions absorb data conditions (missing values, empty
baselines) and never raise. These exceptions are for programmer errors
caught at the call boundary.
"""

from __future__ import annotations


class InsightEngineError(Exception):
    """Base exception for all insight_engine errors."""


class UnknownDurationError(InsightEngineError, ValueError):
    """A duration key outside the canonical set was supplied."""

    def __init__(self, key: object) -> None:
        super().__init__(f"Unknown duration key: {key!r}")
        self.key = key


class ConfigurationError(InsightEngineError, ValueError):
    """Threshold configuration is invalid."""


class SnapshotFormatError(InsightEngineError, ValueError):
    """A serialized snapshot could not be decoded."""
