"""
Finger-count classification of the active touch set.
"""

import enum

from ..config.settings import ArbitrationConfig, validate_threshold


class Classification(enum.Enum):
    """What the current set of active touches amounts to."""

    UNCLASSIFIED = "unclassified"
    BELOW_THRESHOLD = "below_threshold"
    SYSTEM_GESTURE = "system_gesture"


def classify(active_count: int, threshold: int) -> Classification:
    """Classify an active touch count against a finger-count threshold."""
    if active_count <= 0:
        return Classification.UNCLASSIFIED
    if active_count >= threshold:
        return Classification.SYSTEM_GESTURE
    return Classification.BELOW_THRESHOLD


class GestureClassifier:
    """Classifier bound to a fixed threshold, read once at construction."""

    def __init__(self, threshold: int = ArbitrationConfig.FINGER_THRESHOLD):
        self.threshold = validate_threshold(threshold)

    def classify(self, active_count: int) -> Classification:
        return classify(active_count, self.threshold)

    def __repr__(self):
        return f"GestureClassifier(threshold={self.threshold})"
