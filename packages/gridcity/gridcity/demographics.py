"""Demographics and economy recalculation.

Population and income are never updated incrementally: every call walks the
full structure set, so the result depends only on the structures (with their
connectivity flags), the rule table, the tax rate and the per-capita base.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from gridcity.types import Structure

if TYPE_CHECKING:
    from gridcity_rules import RuleTable

_ZERO = Decimal("0")


@dataclass(frozen=True)
class Demographics:
    """Derived city figures for one recalculation.

    Attributes:
        population: Residents of connected structures.
        residential_tax: ``population * per_capita_tax * tax_rate``.
        commercial_revenue: Revenue of connected structures.
        upkeep: Operating cost of every structure, connected or not.
        connected: Number of connected structures.
        disconnected: Number of structures without road access.
    """

    population: int = 0
    residential_tax: Decimal = _ZERO
    commercial_revenue: Decimal = _ZERO
    upkeep: Decimal = _ZERO
    connected: int = 0
    disconnected: int = 0

    @property
    def total_income(self) -> Decimal:
        return self.residential_tax + self.commercial_revenue

    @property
    def net_income(self) -> Decimal:
        return self.total_income - self.upkeep


def recalculate_demographics(
    structures: Iterable[Structure],
    rules: RuleTable,
    tax_rate: Decimal,
    per_capita_tax: Decimal,
) -> Demographics:
    population = 0
    revenue = _ZERO
    upkeep = _ZERO
    connected = 0
    disconnected = 0

    for structure in structures:
        upkeep += rules.upkeep(structure.type_id)
        if not structure.is_connected:
            disconnected += 1
            continue
        connected += 1
        population += rules.population(structure.type_id)
        revenue += rules.revenue(structure.type_id)

    return Demographics(
        population=population,
        residential_tax=population * per_capita_tax * tax_rate,
        commercial_revenue=revenue,
        upkeep=upkeep,
        connected=connected,
        disconnected=disconnected,
    )
