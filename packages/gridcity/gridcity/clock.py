"""Calendar clock and TickContext for the day-per-tick scheduler."""

import datetime

from gridcity.types import TickContext

EPOCH = datetime.date(2026, 1, 1)
_ONE_DAY = datetime.timedelta(days=1)


class Clock:
    def __init__(self, interval_ms: int = 3000, start: datetime.date = EPOCH) -> None:
        self._interval_ms = _checked_interval(interval_ms)
        self._date = start
        self._tick_number = 0

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @interval_ms.setter
    def interval_ms(self, value: int) -> None:
        self._interval_ms = _checked_interval(value)

    @property
    def dt(self) -> float:
        """Real seconds between firings."""
        return self._interval_ms / 1000.0

    @property
    def date(self) -> datetime.date:
        return self._date

    @property
    def tick_number(self) -> int:
        return self._tick_number

    def advance(self) -> datetime.date:
        """Move forward exactly one simulated day."""
        self._tick_number += 1
        self._date = self._date + _ONE_DAY
        return self._date

    def context(self) -> TickContext:
        return TickContext(
            tick_number=self._tick_number,
            date=self._date,
            dt=self.dt,
        )

    def reset(self, date: datetime.date, tick_number: int = 0) -> None:
        self._date = date
        self._tick_number = tick_number


def _checked_interval(value: int) -> int:
    if value <= 0:
        raise ValueError("interval_ms must be positive")
    return int(value)
