"""Insight detectors, discovered automatically by the DetectorRegistry."""
