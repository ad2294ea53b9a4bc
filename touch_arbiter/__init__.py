"""
Touch Arbiter Package
Per-touch arbitration between application input and multi-finger system gestures.
"""

from .core.lifecycle import LifecycleController, ArbitrationStats
from .core.policy import ArbitrationPolicy, Disposition
from .core.signals import SignalHub
from .core.subsystems import AttributeSubsystem, SubsystemToggle
from .core.tracker import TouchEvent, TouchPhase, TouchSequenceTracker
from .gestures.classifier import Classification, GestureClassifier

__version__ = "1.0.0"
__all__ = [
    "LifecycleController",
    "ArbitrationStats",
    "ArbitrationPolicy",
    "Disposition",
    "SignalHub",
    "AttributeSubsystem",
    "SubsystemToggle",
    "TouchEvent",
    "TouchPhase",
    "TouchSequenceTracker",
    "Classification",
    "GestureClassifier",
]
