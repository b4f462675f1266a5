"""Payload-free change notifier with publish/flush semantics."""
from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Observer = Callable[[], None]


class ChangeNotifier:
    """Ordered observer registry.

    ``publish()`` marks the state as changed; ``flush()`` delivers a single
    notification to every observer if anything was published since the last
    flush. Observers receive no payload and re-read whatever they need.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []
        self._pending: bool = False

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    def publish(self) -> None:
        self._pending = True

    def flush(self) -> int:
        """Deliver a pending notification. Returns the number of observers that failed."""
        if not self._pending:
            return 0
        self._pending = False
        failures = 0
        for observer in list(self._observers):
            try:
                observer()
            except Exception:
                failures += 1
                logger.exception("change observer %r failed", observer)
        return failures
