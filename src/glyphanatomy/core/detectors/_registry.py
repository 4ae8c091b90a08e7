"""Registration table for feature detectors."""

from collections.abc import Callable, Mapping
from typing import Any

from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.domain import FeatureName, FeatureResult

DetectorOutput = bool | FeatureResult | Mapping[str, Any]
Detector = Callable[[DetectionContext], DetectorOutput]

# Filled at import time by @detector, in registration order
DETECTORS: dict[FeatureName, Detector] = {}


def detector(feature: FeatureName) -> Callable[[Detector], Detector]:
    """Register a function as the detector for a feature.

    Raises:
        ValueError: If the feature already has a detector
    """

    def register(func: Detector) -> Detector:
        if feature in DETECTORS:
            raise ValueError(f"Duplicate detector for {feature.value}")
        DETECTORS[feature] = func
        return func

    return register
