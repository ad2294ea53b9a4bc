"""
Per-touch arbitration between application input and system gestures.
"""

import enum
import logging
from typing import Dict, Hashable, Optional

from ..exceptions import DesyncError, DuplicateIdError
from ..gestures.classifier import Classification, GestureClassifier
from .tracker import TouchEvent, TouchPhase, TouchSequenceTracker

logger = logging.getLogger(__name__)


class Disposition(enum.Enum):
    """What happens to an event."""

    PASS = "pass"
    SUPPRESS = "suppress"


class ArbitrationPolicy:
    """Assigns each touch sequence a disposition that holds for its lifetime.

    A sequence is classified once, when its first event arrives, against the
    active set as of that event. Later changes in finger count never flip it:
    on a 3-finger threshold the first two fingers of a 3-finger swipe pass
    through, only the third is suppressed, and a suppressed finger stays
    suppressed after the others lift.
    """

    def __init__(self, tracker: TouchSequenceTracker, classifier: GestureClassifier):
        self.tracker = tracker
        self.classifier = classifier
        self._dispositions: Dict[Hashable, Disposition] = {}

        # Diagnostics
        self.events_seen = 0
        self.passed = 0
        self.suppressed = 0
        self.duplicate_begins = 0
        self.desync_resets = 0

    def disposition_of(self, touch_id: Hashable) -> Optional[Disposition]:
        return self._dispositions.get(touch_id)

    def decide(self, event: TouchEvent) -> Disposition:
        """Return the disposition for one event. Never raises on bad input."""
        self.events_seen += 1
        touch_id = event.touch_id

        try:
            self.tracker.on_event(event.phase, touch_id, event.timestamp)
        except DuplicateIdError as e:
            # The event is dropped; the running sequence keeps its disposition
            logger.warning(f"{e}; event dropped")
            self.duplicate_begins += 1
            disposition = self._dispositions.get(touch_id)
            if disposition is None:
                self.desync_resets += 1
                disposition = self._assign(touch_id)
            return self._count(disposition)

        if event.phase.is_terminal:
            disposition = self._dispositions.pop(touch_id, None)
            return self._count(disposition or Disposition.PASS)

        try:
            self._check_consistency(event)
        except DesyncError as e:
            logger.warning(f"{e}; re-deriving disposition")
            self.desync_resets += 1
            self._dispositions.pop(touch_id, None)

        disposition = self._dispositions.get(touch_id)
        if disposition is None:
            disposition = self._assign(touch_id)
        return self._count(disposition)

    def _check_consistency(self, event: TouchEvent):
        touch_id = event.touch_id
        known = touch_id in self._dispositions

        if event.phase is TouchPhase.BEGIN and known:
            raise DesyncError(f"Stale disposition for new touch {touch_id!r}", touch_id)
        if event.phase is TouchPhase.UPDATE:
            if self.tracker.last_synthetic and known:
                raise DesyncError(f"Tracker lost touch {touch_id!r}", touch_id)
            if not self.tracker.last_synthetic and not known:
                raise DesyncError(f"No disposition for active touch {touch_id!r}", touch_id)

    def _assign(self, touch_id: Hashable) -> Disposition:
        classification = self.classifier.classify(len(self.tracker))
        if classification is Classification.SYSTEM_GESTURE:
            disposition = Disposition.SUPPRESS
        else:
            disposition = Disposition.PASS
        self._dispositions[touch_id] = disposition
        logger.debug(
            f"Touch {touch_id!r}: {disposition.name} "
            f"({classification.name}, {len(self.tracker)} active)"
        )
        return disposition

    def _count(self, disposition: Disposition) -> Disposition:
        if disposition is Disposition.SUPPRESS:
            self.suppressed += 1
        else:
            self.passed += 1
        return disposition

    def reset(self):
        """Forget every disposition. Does not touch the tracker."""
        self._dispositions.clear()
