"""
Logging utilities for touch events and arbitration decisions.
"""

import datetime
import logging
from typing import Optional

logger = logging.getLogger(__name__)

_PHASE_ICONS = {
    'BEGIN': '👇',
    'UPDATE': '👉',
    'END': '👆',
    'CANCEL': '✖️',
}


def _timestamp() -> str:
    return datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]


class TouchLogger:
    """Console and debug-file logging of arbitration decisions."""

    def __init__(self, debug_file: Optional[str] = None, verbose: bool = False):
        self.verbose = verbose
        self.debug_file = None
        if debug_file:
            try:
                self.debug_file = open(debug_file, 'w')
                self.debug_file.write(f"Debug logging started at {datetime.datetime.now()}\n")
                self.debug_file.flush()
            except OSError as e:
                logger.warning(f"Could not open debug file: {e}")

    def log_disposition(self, event, disposition, active_count: int):
        """Log the disposition of a touch event."""
        phase = event.phase.name
        if self.verbose and phase != 'UPDATE':
            icon = _PHASE_ICONS.get(phase, '•')
            mark = '🚫' if disposition.name == 'SUPPRESS' else '✅'
            print(f"[{_timestamp()}] {icon} {phase:<6} touch {event.touch_id}: "
                  f"{mark} {disposition.name} ({active_count} active)")

        self._write(f"{phase} {event.touch_id} {disposition.name} active={active_count}")

    def log_stats(self, stats):
        """Print a summary of runtime counters."""
        print(f"📊 Events: {stats.events_seen}  passed: {stats.passed}  "
              f"suppressed: {stats.suppressed}")
        if stats.synthetic_begins or stats.duplicate_begins or stats.desync_resets:
            print(f"   Recovered: {stats.synthetic_begins} synthetic begin(s), "
                  f"{stats.duplicate_begins} duplicate begin(s), "
                  f"{stats.desync_resets} desync reset(s)")
        if stats.subsystem_warnings:
            print(f"   Subsystem warnings: {stats.subsystem_warnings}")
        if stats.fail_opens:
            print(f"   ⚠️ Failed open {stats.fail_opens} time(s)")

        self._write(f"STATS {stats}")

    def _write(self, message: str):
        if self.debug_file:
            self.debug_file.write(f"[{_timestamp()}] {message}\n")
            self.debug_file.flush()

    def close(self):
        """Close the debug file."""
        if self.debug_file:
            self.debug_file.close()
            self.debug_file = None
