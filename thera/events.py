"""A multicast event: callbacks registered under handles, invoked in order."""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict


class Event:
    """A list of callbacks that are all called when the event is invoked."""

    def __init__(self) -> None:
        self._handlers: Dict[int, Callable[..., Any]] = {}
        self._handles = itertools.count(1)

    def register(self, callback: Callable[..., Any]) -> int:
        """Add a callback and return the handle that removes it."""
        handle = next(self._handles)
        self._handlers[handle] = callback
        return handle

    def deregister(self, handle: int) -> bool:
        """Remove the callback with this handle; return whether it was present."""
        return self._handlers.pop(handle, None) is not None

    def invoke(self, *args: Any) -> None:
        """Call every registered callback with the given arguments."""
        for callback in list(self._handlers.values()):
            callback(*args)

    __call__ = invoke

    def __len__(self) -> int:
        return len(self._handlers)