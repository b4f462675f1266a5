"""TickScheduler - timer thread, pacing, and the per-tick system pipeline."""

import logging
import threading
import time
from contextlib import nullcontext
from enum import Enum
from typing import Callable, ContextManager

from gridcity.clock import Clock
from gridcity.types import System, TickContext

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class TickScheduler:
    def __init__(
        self,
        clock: Clock,
        guard: Callable[[], ContextManager[object]] | None = None,
    ) -> None:
        self._clock = clock
        self._guard = guard if guard is not None else nullcontext
        self._systems: list[System] = []
        self._control = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def state(self) -> SchedulerState:
        if self._thread is None:
            return SchedulerState.STOPPED
        return SchedulerState.RUNNING

    @property
    def running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def _tick(self) -> TickContext:
        self._clock.advance()
        ctx = self._clock.context()
        for system in self._systems:
            system(ctx)
        return ctx

    def step(self) -> TickContext:
        """Fire one tick synchronously, inside the guard."""
        with self._guard():
            return self._tick()

    def start(self) -> None:
        with self._control:
            if self._thread is not None:
                return
            self._stop_event = threading.Event()
            first_fire = time.monotonic() + self._clock.dt
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event, first_fire),
                name="gridcity-ticks",
                daemon=True,
            )
            self._thread.start()
        logger.info("scheduler started (interval %d ms)", self._clock.interval_ms)

    def stop(self, timeout: float | None = None) -> None:
        with self._control:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("scheduler stopped at %s", self._clock.date)

    def _run(self, stop_event: threading.Event, next_fire: float) -> None:
        # Each firing is one discrete day; a late firing never catches up
        # by advancing more than one.
        while True:
            if stop_event.wait(max(0.0, next_fire - time.monotonic())):
                break
            try:
                with self._guard():
                    # A stop may land while this thread waits on the guard.
                    if stop_event.is_set():
                        break
                    self._tick()
            except Exception:
                logger.exception("tick %d failed", self._clock.tick_number)
            next_fire = max(next_fire + self._clock.dt, time.monotonic())
