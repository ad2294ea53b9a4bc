"""
Minimal named-signal hub used as the host's notification source.
"""

import itertools
import logging
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class SignalHub:
    """Connect callbacks to named signals and emit them synchronously.

    ``connect`` returns an opaque handle for ``disconnect``, in the manner of
    GObject's ``connect``/``disconnect``.
    """

    def __init__(self):
        self._handlers: Dict[int, Tuple[str, Callable]] = {}
        self._ids = itertools.count(1)

    def connect(self, name: str, callback: Callable) -> int:
        handle = next(self._ids)
        self._handlers[handle] = (name, callback)
        return handle

    def disconnect(self, handle: int):
        if self._handlers.pop(handle, None) is None:
            logger.debug(f"Disconnect of unknown handle {handle} ignored")

    def is_connected(self, handle: int) -> bool:
        return handle in self._handlers

    def handler_count(self, name: str) -> int:
        return sum(1 for signal, _ in self._handlers.values() if signal == name)

    def emit(self, name: str, *args) -> List[Any]:
        """Call every handler of ``name`` in connection order, return their results."""
        handlers = [cb for signal, cb in list(self._handlers.values()) if signal == name]
        return [callback(*args) for callback in handlers]
