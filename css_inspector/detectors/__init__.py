"""Detector table.

Keys are the ``checks`` flags of ``AnalysisOptions``; the order is the order
in which results appear in an analysis.
"""

from . import accessibility, compatibility, layout, maintainability, performance
from .base import Detector

DETECTORS: dict[str, Detector] = {
    "layout": layout.detect,
    "maintainability": maintainability.detect,
    "performance": performance.detect,
    "accessibility": accessibility.detect,
    "compatibility": compatibility.detect,
}

__all__ = ["DETECTORS", "Detector"]
