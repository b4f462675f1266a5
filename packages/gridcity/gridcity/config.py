"""City settings dataclass."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from gridcity.ledger import to_money


@dataclass(frozen=True)
class CitySettings:
    """Immutable runtime configuration; replace the instance to change it.

    Attributes:
        tick_interval_ms: Real milliseconds between simulated days.
        grid_size: Side length of the buildable square (renderer hint; also
            the bounds used when ``strict_placement`` is on).
        tax_rate: Residential tax rate in [0, 1].
        per_capita_tax: Taxable value of one resident per month.
        strict_placement: Reject out-of-bounds and occupied tiles on purchase.
    """

    tick_interval_ms: int = 3000
    grid_size: int = 20
    tax_rate: Decimal = Decimal("0.10")
    per_capita_tax: Decimal = Decimal("10")
    strict_placement: bool = False

    def __post_init__(self) -> None:
        # Frozen: normalise through object.__setattr__.
        object.__setattr__(self, "tax_rate", to_money(self.tax_rate))
        object.__setattr__(self, "per_capita_tax", to_money(self.per_capita_tax))
        if self.tick_interval_ms <= 0:
            raise ValueError(
                f"tick_interval_ms must be positive, got {self.tick_interval_ms}"
            )
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")
        if not (0 <= self.tax_rate <= 1):
            raise ValueError(f"tax_rate must be in [0, 1], got {self.tax_rate}")
        if self.per_capita_tax < 0:
            raise ValueError(
                f"per_capita_tax must be >= 0, got {self.per_capita_tax}"
            )

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size

    def snapshot(self) -> dict[str, Any]:
        return {
            "tick_interval_ms": self.tick_interval_ms,
            "grid_size": self.grid_size,
            "tax_rate": str(self.tax_rate),
            "per_capita_tax": str(self.per_capita_tax),
            "strict_placement": self.strict_placement,
        }

    @classmethod
    def from_snapshot(
        cls, data: Mapping[str, Any], base: CitySettings | None = None
    ) -> CitySettings:
        """Build settings from snapshot data; absent fields come from *base*."""
        base = base if base is not None else cls()
        return cls(
            tick_interval_ms=int(data.get("tick_interval_ms", base.tick_interval_ms)),
            grid_size=int(data.get("grid_size", base.grid_size)),
            tax_rate=to_money(data.get("tax_rate", base.tax_rate)),
            per_capita_tax=to_money(data.get("per_capita_tax", base.per_capita_tax)),
            strict_placement=bool(data.get("strict_placement", base.strict_placement)),
        )
