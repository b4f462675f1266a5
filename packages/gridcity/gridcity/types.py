"""Shared types, aliases and errors for the city simulation."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

Coord = tuple[int, int]


@dataclass
class Structure:
    """A placed building occupying one grid tile."""

    type_id: str
    x: int
    y: int
    is_connected: bool = False

    @property
    def position(self) -> Coord:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    date: datetime.date
    dt: float

    @property
    def is_month_start(self) -> bool:
        return self.date.day == 1


class InsufficientFunds(Exception):
    """Raised when a debit exceeds the available balance."""

    def __init__(self, requested: Decimal, available: Decimal) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds: requested {requested}, available {available}"
        )


class InvalidLoadData(Exception):
    """Raised on restore failures (version mismatch, missing or malformed fields)."""


System = Callable[[TickContext], None]
