"""
Arbitration core: touch tracking, per-touch policy, subsystem toggling
and lifecycle control.

The evdev listener is imported from ``touch_arbiter.core.listener``
directly so the core stays usable without an input device.
"""

from .tracker import TouchEvent, TouchPhase, TouchPoint, TouchSequenceTracker
from .policy import ArbitrationPolicy, Disposition
from .subsystems import AttributeSubsystem, Subsystem, SubsystemState, SubsystemToggle
from .signals import SignalHub
from .lifecycle import ArbitrationStats, EngineLifecycle, LifecycleController

__all__ = [
    'TouchEvent',
    'TouchPhase',
    'TouchPoint',
    'TouchSequenceTracker',
    'ArbitrationPolicy',
    'Disposition',
    'AttributeSubsystem',
    'Subsystem',
    'SubsystemState',
    'SubsystemToggle',
    'SignalHub',
    'ArbitrationStats',
    'EngineLifecycle',
    'LifecycleController',
]
