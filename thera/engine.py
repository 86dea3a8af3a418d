"""The engine's main loop: frame timing, deferred work and lifecycle events."""

from __future__ import annotations

import argparse
import signal
import threading
import time
from typing import Callable, List, Optional, Sequence

from .events import Event
from .input import InputSystem

Operation = Callable[[], object]

DEFAULT_WINDOW_WIDTH = 1024
DEFAULT_WINDOW_HEIGHT = 768
DEFAULT_DELTA_TIME = 0.16666


def _close_signal() -> Optional[int]:
    for name in ("SIGBREAK", "SIGHUP"):
        number = getattr(signal, name, None)
        if number is not None:
            return number
    return None


class Engine:
    """Runs frames, measures their duration and dispatches the engine events."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.window_width = DEFAULT_WINDOW_WIDTH
        self.window_height = DEFAULT_WINDOW_HEIGHT
        self.frame_count = 1
        self.delta_time = DEFAULT_DELTA_TIME
        self.on_init = Event()
        self.on_input_poll = Event()
        self.on_progress = Event()
        self.on_final_validate = Event()
        self.window_resized = Event()
        self.input = InputSystem(frame_counter=lambda: self.frame_count)
        self._clock = clock
        self._last_time = clock()
        self._deferred: List[Operation] = []
        self._deferred_lock = threading.Lock()
        self._closing = threading.Event()

    @property
    def closing(self) -> bool:
        return self._closing.is_set()

    def initialise(self) -> None:
        """Announce that the engine is set up."""
        self.on_init.invoke()

    def resize(self, width: int, height: int) -> None:
        """Record a new window size, announcing it only when it changed."""
        if (width, height) == (self.window_width, self.window_height):
            return
        self.window_width = width
        self.window_height = height
        self.window_resized.invoke(width, height)

    def defer(self, operation: Operation) -> None:
        """Queue an operation to run at the end of the current frame."""
        with self._deferred_lock:
            self._deferred.append(operation)

    def run_deferred_operations(self) -> None:
        """Run and forget the operations queued so far."""
        with self._deferred_lock:
            pending = self._deferred
            self._deferred = []
        for operation in pending:
            operation()

    def _measure_delta(self) -> float:
        now = self._clock()
        delta = now - self._last_time
        self._last_time = now
        return delta

    def step(self, delta: Optional[float] = None) -> float:
        """Run one frame; measure its delta from the clock unless one is given."""
        measured = self._measure_delta()
        self.delta_time = measured if delta is None else delta
        self.on_progress.invoke(self.delta_time)
        self.run_deferred_operations()
        self.on_final_validate.invoke()
        self.frame_count += 1
        return self.delta_time

    def request_close(self) -> None:
        """Ask the running loop to stop after the current frame."""
        self._closing.set()

    def _on_close_signal(self, signum: int, frame: object) -> None:
        self.request_close()

    def run(self, should_stop: Optional[Callable[[], bool]] = None) -> int:
        """Run frames until closed or ``should_stop`` returns true; return 0."""
        number = _close_signal()
        previous = None
        install = number is not None and threading.current_thread() is threading.main_thread()
        if install:
            previous = signal.signal(number, self._on_close_signal)
        self._last_time = self._clock()
        try:
            while not self._closing.is_set():
                if should_stop is not None and should_stop():
                    break
                self.step()
        finally:
            if install:
                signal.signal(number, previous)
        return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the engine without a window and run until closed."""
    parser = argparse.ArgumentParser(prog="thera", description="Run the engine loop.")
    parser.add_argument(
        "--frames", type=int, default=None, help="stop after this many frames"
    )
    args = parser.parse_args(argv)
    engine = Engine()
    engine.initialise()
    should_stop = None
    if args.frames is not None:
        limit = args.frames

        def should_stop() -> bool:
            return engine.frame_count > limit

    return engine.run(should_stop)


if __name__ == "__main__":
    raise SystemExit(main())