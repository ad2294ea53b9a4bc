"""
Top-level enable/disable control of touch arbitration.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Set, Tuple, Union

from ..config.settings import ArbitrationConfig, validate_threshold
from ..gestures.classifier import GestureClassifier
from .policy import ArbitrationPolicy, Disposition
from .signals import SignalHub
from .subsystems import Subsystem, SubsystemToggle
from .tracker import TouchEvent, TouchSequenceTracker

logger = logging.getLogger(__name__)

SubsystemSource = Union[Sequence[Optional[Subsystem]], Callable[[], Sequence[Optional[Subsystem]]]]


@dataclass
class EngineLifecycle:
    """Enablement state and the subscriptions made while enabled."""

    active: bool = False
    listener_handles: Set[Tuple[Any, int]] = field(default_factory=set)


@dataclass
class ArbitrationStats:
    """Runtime counters."""

    enabled: bool
    active_touches: int
    events_seen: int = 0
    passed: int = 0
    suppressed: int = 0
    synthetic_begins: int = 0
    duplicate_begins: int = 0
    unmatched_ends: int = 0
    desync_resets: int = 0
    subsystem_warnings: int = 0
    reassert_passes: int = 0
    fail_opens: int = 0


class LifecycleController:
    """Wires tracker, classifier and policy to the host and its subsystems.

    Features:
    - Idempotent enable()/disable()
    - Re-suppression on focus and fullscreen changes
    - Fail-open: any unexpected error disables arbitration and restores
      the subsystems
    - Usable as a context manager
    """

    def __init__(
        self,
        subsystems: SubsystemSource = (),
        signals: Optional[SignalHub] = None,
        event_source: Optional[SignalHub] = None,
        threshold: int = ArbitrationConfig.FINGER_THRESHOLD,
    ):
        self.threshold = validate_threshold(threshold)
        self.signals = signals
        self.event_source = event_source
        self._subsystems = subsystems

        self.lifecycle = EngineLifecycle()
        self.toggle = SubsystemToggle()
        self.tracker: Optional[TouchSequenceTracker] = None
        self.classifier: Optional[GestureClassifier] = None
        self.policy: Optional[ArbitrationPolicy] = None

        self.reassert_passes = 0
        self.fail_opens = 0

    @property
    def enabled(self) -> bool:
        return self.lifecycle.active

    @property
    def active_touches(self) -> int:
        return len(self.tracker) if self.tracker is not None else 0

    def enable(self):
        """Start arbitrating. Does nothing if already enabled."""
        if self.lifecycle.active:
            logger.debug("Touch arbitration already enabled")
            return

        self.tracker = TouchSequenceTracker()
        self.classifier = GestureClassifier(self.threshold)
        self.policy = ArbitrationPolicy(self.tracker, self.classifier)
        self.lifecycle.active = True

        try:
            self.toggle.suppress_all(self._current_subsystems())
            if self.signals is not None:
                for name in ArbitrationConfig.REASSERT_SIGNALS:
                    self._subscribe(self.signals, name, self.reassert)
            if self.event_source is not None:
                self._subscribe(
                    self.event_source, ArbitrationConfig.TOUCH_EVENT_SIGNAL, self.handle_event
                )
        except Exception:
            logger.exception("Touch arbitration failed to enable")
            self._fail_open()
            return

        logger.info("Touch arbitration: enabled")

    def disable(self):
        """Stop arbitrating and restore every subsystem. Does nothing if disabled."""
        if not self.lifecycle.active:
            logger.debug("Touch arbitration already disabled")
            return
        self.lifecycle.active = False

        for source, handle in list(self.lifecycle.listener_handles):
            try:
                source.disconnect(handle)
            except Exception as e:
                logger.warning(f"Could not disconnect handler {handle}: {e}")
        self.lifecycle.listener_handles.clear()

        self.toggle.restore_all()

        if self.tracker is not None:
            self.tracker.clear()
        if self.policy is not None:
            self.policy.reset()

        logger.info("Touch arbitration: disabled")

    def handle_event(self, event: TouchEvent) -> Disposition:
        """Return the disposition of one raw touch event."""
        if not self.lifecycle.active:
            return Disposition.PASS
        try:
            return self.policy.decide(event)
        except Exception:
            logger.exception(f"Arbitration failed on {event}, disabling")
            self._fail_open()
            return Disposition.PASS

    def reassert(self, *args):
        """Run the suppress pass again; connected to the re-assertion signals."""
        if not self.lifecycle.active:
            return
        self.reassert_passes += 1
        logger.debug("Re-asserting subsystem suppression")
        try:
            self.toggle.suppress_all(self._current_subsystems())
        except Exception:
            logger.exception("Re-assertion failed, disabling")
            self._fail_open()

    def stats(self) -> ArbitrationStats:
        stats = ArbitrationStats(
            enabled=self.lifecycle.active,
            active_touches=self.active_touches,
            subsystem_warnings=self.toggle.total_warnings,
            reassert_passes=self.reassert_passes,
            fail_opens=self.fail_opens,
        )
        if self.policy is not None:
            stats.events_seen = self.policy.events_seen
            stats.passed = self.policy.passed
            stats.suppressed = self.policy.suppressed
            stats.duplicate_begins = self.policy.duplicate_begins
            stats.desync_resets = self.policy.desync_resets
        if self.tracker is not None:
            stats.synthetic_begins = self.tracker.synthetic_begins
            stats.unmatched_ends = self.tracker.unmatched_ends
        return stats

    def _subscribe(self, source: SignalHub, name: str, callback: Callable):
        handle = source.connect(name, callback)
        self.lifecycle.listener_handles.add((source, handle))

    def _current_subsystems(self):
        if callable(self._subsystems):
            return list(self._subsystems())
        return list(self._subsystems)

    def _fail_open(self):
        self.fail_opens += 1
        self.disable()

    def __enter__(self):
        self.enable()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disable()
        return False
