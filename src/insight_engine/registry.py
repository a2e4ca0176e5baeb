"""Detector registry with auto-discovery of InsightDetector subclasses."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path

from insight_engine.detectors.base import InsightDetector


class DetectorRegistry:
    """Discovers and manages all InsightDetector implementations.

    Auto-discovers detectors by scanning the detectors/ package for any
    concrete subclasses of InsightDetector. New detectors are added simply
    by placing a .py file in that package, with no manual registration.
    """

    def __init__(self) -> None:
        self._detectors: dict[str, InsightDetector] = {}

    def discover_detectors(self) -> None:
        """Scan the detectors package and register all InsightDetector subclasses."""
        import insight_engine.detectors as detectors_pkg

        detectors_path = Path(detectors_pkg.__file__).parent  # type: ignore[arg-type]
        self._scan_package(detectors_pkg.__name__, str(detectors_path))

    def _scan_package(self, package_name: str, package_path: str) -> None:
        """Recursively import all modules under a package and register detectors."""
        for _importer, module_name, _is_pkg in pkgutil.walk_packages(
            [package_path], prefix=package_name + "."
        ):
            module = importlib.import_module(module_name)

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type)
                    and issubclass(attr, InsightDetector)
                    and attr is not InsightDetector
                    and attr.__module__ == module.__name__
                    and not getattr(attr, "__abstractmethods__", set())
                ):
                    self.register(attr())

    def register(self, detector: InsightDetector) -> None:
        """Register a detector instance by its detector_id."""
        self._detectors[detector.detector_id] = detector

    def get(self, detector_id: str) -> InsightDetector | None:
        return self._detectors.get(detector_id)

    def get_all_detectors(self) -> list[InsightDetector]:
        """Return all registered detectors sorted by order (lowest first)."""
        # detector_id breaks ties so equal-order detectors keep a stable output order
        return sorted(self._detectors.values(), key=lambda d: (d.order, d.detector_id))

    @property
    def detector_ids(self) -> list[str]:
        """List all registered detector IDs."""
        return list(self._detectors.keys())
