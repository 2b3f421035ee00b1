"""
Registry of screening methods.

Detectors register themselves by subclassing BaseDetector; the registry maps
a method name derived from the class name (ZScoreDetector -> 'zscore') to the
class.
"""

from typing import Dict, Type
from .base import BaseDetector


# Import detector modules to register subclasses
from .range import detector as range_detector
from .zscore import detector as zscore_detector


def _build_registry() -> Dict[str, Type[BaseDetector]]:
    """Build the registry by discovering BaseDetector subclasses."""
    registry = {}
    for cls in BaseDetector.__subclasses__():
        method_name = cls.__name__.replace("Detector", "").lower()
        registry[method_name] = cls
    return registry


registry = _build_registry()

__all__ = ["registry", "range_detector", "zscore_detector"]
