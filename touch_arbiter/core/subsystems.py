"""
Suppression and restoration of external gesture-handling subsystems.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol

from ..exceptions import SubsystemUnavailableError

logger = logging.getLogger(__name__)


class Subsystem(Protocol):
    """Anything exposing a readable and writable boolean ``enabled``."""

    enabled: bool


class AttributeSubsystem:
    """Subsystem reached through a dotted attribute path on a host object.

    The path is resolved on every access, so a component the host creates or
    drops later (an overview swipe tracker, say) is picked up or reported as
    unavailable at the time of the pass.
    """

    def __init__(self, host: Any, path: str, name: Optional[str] = None):
        self.host = host
        self.path = path
        self.name = name or path

    def resolve(self) -> Any:
        target = self.host
        for part in self.path.split("."):
            target = getattr(target, part, None)
            if target is None:
                return None
        return target

    def _target(self) -> Any:
        target = self.resolve()
        if target is None:
            raise SubsystemUnavailableError(f"{self.name} is not available", self)
        return target

    @property
    def enabled(self) -> bool:
        return bool(self._target().enabled)

    @enabled.setter
    def enabled(self, value: bool):
        self._target().enabled = value

    def __eq__(self, other):
        if not isinstance(other, AttributeSubsystem):
            return NotImplemented
        return self.host is other.host and self.path == other.path

    def __hash__(self):
        return hash((id(self.host), self.path))

    def __repr__(self):
        return f"AttributeSubsystem({self.name!r})"


@dataclass
class SubsystemState:
    """Enabled flag of a subsystem as captured before it was suppressed."""

    subsystem: Any
    was_enabled: bool


def _describe(ref) -> str:
    return getattr(ref, "name", None) or type(ref).__name__


class SubsystemToggle:
    """Disables a list of subsystems and puts their flags back afterwards."""

    def __init__(self):
        self._snapshot: List[SubsystemState] = []
        self.warnings: List[str] = []
        self.total_warnings = 0

    @property
    def snapshot(self):
        return tuple(self._snapshot)

    def suppress_all(self, subsystems: Iterable[Optional[Subsystem]]):
        """Capture each subsystem's flag in order, then disable it.

        The snapshot holds every subsystem disabled since the last
        restore_all(), including ones missing from this pass. A subsystem
        found enabled again is re-baselined as enabled; one that still
        reads disabled keeps the flag captured when it was first disabled,
        so repeated passes never turn "we switched it off" into "it was off".
        """
        self.warnings = []

        for ref in subsystems:
            try:
                current = self._read(ref)
                self._write(ref, False)
            except SubsystemUnavailableError as e:
                self._warn(e)
                continue

            state = self._find(self._snapshot, ref)
            if state is None:
                self._snapshot.append(SubsystemState(ref, current))
            elif current:
                state.was_enabled = True

    def restore_all(self):
        """Put every captured flag back and forget the snapshot.

        Subsystems are restored in reverse capture order.
        """
        snapshot = self._snapshot
        self._snapshot = []
        for state in reversed(snapshot):
            try:
                self._write(state.subsystem, state.was_enabled)
            except SubsystemUnavailableError as e:
                self._warn(e)

    @staticmethod
    def _find(states: List[SubsystemState], ref) -> Optional[SubsystemState]:
        for state in states:
            if state.subsystem is ref or state.subsystem == ref:
                return state
        return None

    @staticmethod
    def _read(ref) -> bool:
        if ref is None:
            raise SubsystemUnavailableError("Subsystem reference is missing")
        try:
            return bool(ref.enabled)
        except SubsystemUnavailableError:
            raise
        except Exception as e:
            raise SubsystemUnavailableError(
                f"Could not read {_describe(ref)}: {e}", ref
            ) from e

    @staticmethod
    def _write(ref, value: bool):
        if ref is None:
            raise SubsystemUnavailableError("Subsystem reference is missing")
        try:
            ref.enabled = value
        except SubsystemUnavailableError:
            raise
        except Exception as e:
            raise SubsystemUnavailableError(
                f"Could not set {_describe(ref)}: {e}", ref
            ) from e

    def _warn(self, error: SubsystemUnavailableError):
        message = str(error)
        self.warnings.append(message)
        self.total_warnings += 1
        logger.warning(f"Skipping subsystem: {message}")
