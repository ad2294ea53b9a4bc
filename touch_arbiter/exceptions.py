"""
Exception hierarchy for touch arbitration.

Only ConfigError ever reaches callers; the rest are raised and recovered
inside the engine.
"""


class ArbiterError(Exception):
    """Base exception for all touch arbitration errors."""


class ConfigError(ArbiterError):
    """Invalid arbitration configuration."""


class DesyncError(ArbiterError):
    """Internal touch state disagrees with the incoming event stream."""

    def __init__(self, message: str, touch_id=None):
        self.touch_id = touch_id
        super().__init__(message)


class DuplicateIdError(DesyncError):
    """BEGIN received for a touch id that is already active."""


class SubsystemUnavailableError(ArbiterError):
    """A subsystem handle is missing or failed on access."""

    def __init__(self, message: str, subsystem=None):
        self.subsystem = subsystem
        super().__init__(message)
