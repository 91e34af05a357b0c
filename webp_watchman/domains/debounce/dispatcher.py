"""
Per-path debouncing of filesystem events.

A single file write usually produces several create/modify notifications,
and the first one often arrives while the file is still being written.
``DebounceDispatcher`` collapses each burst of events for a path into one
settled dispatch, fired ``settle_window`` seconds after the last event.

Timers run on their own threads. All registry access happens under one
lock, and the lock is always released before the settled handler runs.
"""

import itertools
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Union

from loguru import logger

from webp_watchman.domains.conversion.filters import is_convertible
from webp_watchman.models.errors import TransportError
from webp_watchman.models.schemas import RawEvent

TimerFactory = Callable[..., Any]


@dataclass(slots=True)
class PendingTimer:
    """Armed countdown for one path."""

    path: str
    deadline: Any
    generation: int
    first_seen: float


class DebounceDispatcher:
    """Collapses bursts of raw events into one settled dispatch per path."""

    def __init__(
        self,
        on_settled: Callable[[str], Any],
        settle_window: float = 0.25,
        *,
        accept: Callable[[str], bool] = is_convertible,
        max_wait: Optional[float] = None,
        timer_factory: TimerFactory = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            on_settled: Called with the path once its burst has settled
            settle_window: Quiet period after the last event, in seconds
            accept: Predicate deciding whether a settled path is handled
            max_wait: Optional ceiling on how long a burst may postpone
                its dispatch, measured from the first event. ``None``
                means a burst that never pauses never fires.
            timer_factory: Builds a startable, cancellable timer with the
                ``threading.Timer(interval, function, args)`` signature
            clock: Monotonic time source used for ``max_wait``
        """
        if settle_window <= 0:
            raise ValueError("settle_window must be positive")
        if max_wait is not None and max_wait < settle_window:
            raise ValueError("max_wait must not be shorter than settle_window")

        self.on_settled = on_settled
        self.settle_window = settle_window
        self.max_wait = max_wait
        self._accept = accept
        self._timer_factory = timer_factory
        self._clock = clock
        self._timers: Dict[str, PendingTimer] = {}
        # Shared across paths and bursts so a generation is never reused.
        self._generations = itertools.count()
        self._lock = threading.Lock()

    def observe(self, event: RawEvent) -> None:
        """Arm or reset the timer for ``event.path``; ignore other kinds."""
        if not event.qualifies:
            return

        now = self._clock()

        with self._lock:
            entry = self._timers.get(event.path)

            if entry is None:
                entry = PendingTimer(path=event.path, deadline=None, generation=next(self._generations), first_seen=now)
                self._timers[event.path] = entry
                logger.debug(f"Armed timer for {event.path} ({event.kind.value})")
            else:
                entry.deadline.cancel()
                entry.generation = next(self._generations)
                logger.debug(f"Reset timer for {event.path} ({event.kind.value})")

            self._arm(entry, self._delay_for(entry, now))

    def pending(self) -> list[str]:
        """Paths whose timers are armed and have not fired yet."""
        with self._lock:
            return sorted(self._timers)

    def run(self, source: Iterable[Union[RawEvent, TransportError]]) -> None:
        """
        Consume an event source until it is closed.

        Transport errors are logged and the loop keeps going.

        Args:
            source: Iterable yielding events and transport errors; the loop
                returns when iteration ends
        """
        logger.info("Debounce dispatcher started")

        for item in source:
            if isinstance(item, TransportError):
                logger.warning(f"Event source error: {item}")
                continue
            self.observe(item)

        logger.info("Event source closed, debounce dispatcher stopped")

    def shutdown(self) -> None:
        """Cancel and forget every armed timer without dispatching."""
        with self._lock:
            abandoned = list(self._timers.values())
            self._timers.clear()

        for entry in abandoned:
            entry.deadline.cancel()

        if abandoned:
            logger.info(f"Abandoned {len(abandoned)} pending timer(s)")

    def _delay_for(self, entry: PendingTimer, now: float) -> float:
        if self.max_wait is None:
            return self.settle_window
        remaining = entry.first_seen + self.max_wait - now
        return max(0.0, min(self.settle_window, remaining))

    def _arm(self, entry: PendingTimer, delay: float) -> None:
        # Caller holds the lock.
        timer = self._timer_factory(delay, self._fire, args=(entry.path, entry.generation))
        timer.daemon = True
        entry.deadline = timer
        timer.start()

    def _fire(self, path: str, generation: int) -> None:
        with self._lock:
            entry = self._timers.get(path)
            # A reset cancelled this timer after it had already started.
            if entry is None or entry.generation != generation:
                return
            del self._timers[path]

        if not self._accept(path):
            logger.debug(f"Skipping {path}: not a convertible file")
            return

        logger.info(f"Settled: {path}")

        try:
            self.on_settled(path)
        except Exception as e:
            logger.exception(f"Handler failed for {path}: {e}")
