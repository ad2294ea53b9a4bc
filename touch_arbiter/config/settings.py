"""
Configuration settings for touch arbitration.
"""

from ..exceptions import ConfigError


class ArbitrationConfig:
    """Configuration constants for touch arbitration."""

    # Number of concurrently active touches that makes a system gesture
    FINGER_THRESHOLD = 3

    # Host notifications that trigger a full re-suppress pass
    FOCUS_CHANGED_SIGNAL = "focus-changed"
    FULLSCREEN_CHANGED_SIGNAL = "fullscreen-changed"
    REASSERT_SIGNALS = (FOCUS_CHANGED_SIGNAL, FULLSCREEN_CHANGED_SIGNAL)

    # Inbound raw touch stream
    TOUCH_EVENT_SIGNAL = "touch-event"

    # Virtual device that receives passed events
    VIRTUAL_DEVICE_NAME = "touch-arbiter virtual touchscreen"

    # Debug log file (None disables it)
    DEBUG_LOG_FILE = None


def validate_threshold(threshold) -> int:
    """Return the threshold if it is a positive integer, else raise ConfigError."""
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise ConfigError(f"Finger threshold must be an integer, got {threshold!r}")
    if threshold < 1:
        raise ConfigError(f"Finger threshold must be positive, got {threshold}")
    return threshold
