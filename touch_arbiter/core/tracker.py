"""
Tracking of concurrently active touch sequences.
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Hashable, Optional

from ..exceptions import DuplicateIdError

logger = logging.getLogger(__name__)


class TouchPhase(enum.Enum):
    """Phase of a raw touch-point event."""

    BEGIN = "begin"
    UPDATE = "update"
    END = "end"
    CANCEL = "cancel"

    @property
    def is_terminal(self) -> bool:
        return self in (TouchPhase.END, TouchPhase.CANCEL)


@dataclass(frozen=True)
class TouchEvent:
    """A single raw touch-point event."""

    phase: TouchPhase
    touch_id: Hashable
    timestamp: float = field(default_factory=time.monotonic)


@dataclass
class TouchPoint:
    """An active touch sequence."""

    touch_id: Hashable
    start_time: float
    last_phase: TouchPhase
    synthetic: bool = False


class TouchSequenceTracker:
    """Keeps the set of touch ids between BEGIN and END/CANCEL."""

    def __init__(self):
        self.active: Dict[Hashable, TouchPoint] = {}

        # Diagnostics
        self.last_synthetic = False
        self.synthetic_begins = 0
        self.unmatched_ends = 0

    def __len__(self):
        return len(self.active)

    def __contains__(self, touch_id):
        return touch_id in self.active

    def on_event(self, phase: TouchPhase, touch_id: Hashable,
                 timestamp: Optional[float] = None) -> Dict[Hashable, TouchPoint]:
        """Apply one event to the active set and return a snapshot of it.

        A BEGIN for an id that is already active leaves the set untouched and
        raises DuplicateIdError. An UPDATE for an unknown id is treated as an
        implicit BEGIN and flagged through ``last_synthetic``. END and CANCEL
        for an unknown id are ignored. New sequences start at ``timestamp``,
        or at the current monotonic time when none is given.
        """
        self.last_synthetic = False
        now = timestamp if timestamp is not None else time.monotonic()

        if phase is TouchPhase.BEGIN:
            if touch_id in self.active:
                raise DuplicateIdError(
                    f"BEGIN for already active touch {touch_id!r}", touch_id
                )
            self.active[touch_id] = TouchPoint(touch_id, now, phase)

        elif phase is TouchPhase.UPDATE:
            point = self.active.get(touch_id)
            if point is None:
                logger.warning(f"UPDATE for unknown touch {touch_id!r}, treating as BEGIN")
                self.active[touch_id] = TouchPoint(
                    touch_id, now, phase, synthetic=True
                )
                self.last_synthetic = True
                self.synthetic_begins += 1
            else:
                point.last_phase = phase

        else:
            if self.active.pop(touch_id, None) is None:
                logger.debug(f"{phase.name} for unknown touch {touch_id!r} ignored")
                self.unmatched_ends += 1

        return self.snapshot()

    def snapshot(self) -> Dict[Hashable, TouchPoint]:
        return dict(self.active)

    def clear(self):
        self.active.clear()
        self.last_synthetic = False
