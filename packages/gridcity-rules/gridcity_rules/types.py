"""Core types for building rule lookup."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class RuleKind(str, Enum):
    """The four independent per-category rule tables."""

    COST = "cost"
    REVENUE = "revenue"
    UPKEEP = "upkeep"
    POPULATION = "population"


class MatchPolicy(str, Enum):
    """How a type identifier is matched against category keys.

    FIRST: the first key (in table insertion order) contained in the
    identifier wins.
    LONGEST: the longest contained key wins; equal lengths fall back to
    insertion order.
    """

    FIRST = "first"
    LONGEST = "longest"


@dataclass(frozen=True)
class RuleDefaults:
    """Values returned for an identifier that matches no category.

    Attributes:
        cost: Purchase price of an unknown building (must be positive).
        revenue: Commercial revenue per settlement.
        upkeep: Operating cost per settlement.
        population: Residents contributed when connected.
    """

    cost: Decimal = Decimal("100")
    revenue: Decimal = Decimal("0")
    upkeep: Decimal = Decimal("0")
    population: int = 0

    def __post_init__(self) -> None:
        for name in ("cost", "revenue", "upkeep"):
            amount = Decimal(getattr(self, name))
            if not amount.is_finite() or amount < 0:
                raise ValueError(f"default {name} must be a finite amount >= 0, got {amount}")
        if self.cost <= 0:
            raise ValueError(f"default cost must be positive, got {self.cost}")
        if self.population < 0:
            raise ValueError(f"default population must be >= 0, got {self.population}")

    def value(self, kind: RuleKind) -> Decimal | int:
        return getattr(self, kind.value)
