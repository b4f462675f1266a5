"""RuleTable class."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Mapping, Union

from gridcity_rules.types import MatchPolicy, RuleDefaults, RuleKind

RuleValue = Union[Decimal, int]

_DEFAULT_COSTS: dict[str, int] = {
    "Road": 10,
    "Home": 500,
    "Apartment": 2000,
    "Gas": 1000,
    "Food": 1500,
    "Restaurant": 1500,
    "Shop": 1200,
    "Store": 1200,
    "Arcade": 2500,
    "Mall": 10000,
    "Bank": 5000,
    "Police": 5000,
    "Fire": 5000,
    "Medical": 8000,
    "Park": 500,
}

_DEFAULT_REVENUE: dict[str, int] = {
    "Food": 50,
    "Shop": 80,
    "Gas": 100,
    "Arcade": 150,
    "Bank": 300,
    "Mall": 1000,
}

_DEFAULT_UPKEEP: dict[str, int] = {
    "Road": 1,
    "Police": 100,
    "Fire": 100,
    "Medical": 150,
    "Park": 5,
}

_DEFAULT_POPULATION: dict[str, int] = {
    "Home": 4,
    "Apartment": 40,
}


def _coerce(kind: RuleKind, value: Any) -> RuleValue:
    """Convert a rule value. Raises ValueError unless it is a finite amount >= 0."""
    if kind is RuleKind.POPULATION:
        try:
            result = int(value)
        except OverflowError as exc:
            raise ValueError(f"population must be finite, got {value!r}") from exc
        if result < 0:
            raise ValueError(f"population must be >= 0, got {result}")
        return result
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except ArithmeticError as exc:
        raise ValueError(f"{kind.value} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"{kind.value} must be finite, got {value!r}")
    if amount < 0:
        raise ValueError(f"{kind.value} must be >= 0, got {amount}")
    return amount


class RuleTable:
    """Per-category cost, revenue, upkeep and population lookup.

    Keys are matched as case-insensitive substrings of a building's type
    identifier, so ``"Home"`` covers ``"SuburbanHomeHiFi.json"``. The table
    is plain mutable data; whoever owns the simulation decides when a change
    is applied.
    """

    def __init__(
        self,
        costs: Mapping[str, Any] | None = None,
        revenue: Mapping[str, Any] | None = None,
        upkeep: Mapping[str, Any] | None = None,
        population: Mapping[str, Any] | None = None,
        *,
        policy: MatchPolicy = MatchPolicy.LONGEST,
        defaults: RuleDefaults | None = None,
    ) -> None:
        self.policy = MatchPolicy(policy)
        self.defaults = defaults if defaults is not None else RuleDefaults()
        self._tables: dict[RuleKind, dict[str, RuleValue]] = {
            kind: {} for kind in RuleKind
        }
        for kind, mapping in (
            (RuleKind.COST, costs),
            (RuleKind.REVENUE, revenue),
            (RuleKind.UPKEEP, upkeep),
            (RuleKind.POPULATION, population),
        ):
            if mapping:
                self.update(kind, mapping)

    @classmethod
    def default(cls, *, policy: MatchPolicy = MatchPolicy.LONGEST) -> RuleTable:
        """Return a table populated with the stock building categories."""
        return cls(
            _DEFAULT_COSTS,
            _DEFAULT_REVENUE,
            _DEFAULT_UPKEEP,
            _DEFAULT_POPULATION,
            policy=policy,
        )

    # -- Lookup --

    def match(self, kind: RuleKind | str, type_id: str) -> str | None:
        """Return the category key that applies to *type_id*, or None."""
        table = self._tables[RuleKind(kind)]
        if not type_id:
            return None
        needle = type_id.lower()
        best: str | None = None
        for key in table:
            if key.lower() not in needle:
                continue
            if self.policy is MatchPolicy.FIRST:
                return key
            if best is None or len(key) > len(best):
                best = key
        return best

    def lookup(self, kind: RuleKind | str, type_id: str) -> RuleValue:
        kind = RuleKind(kind)
        key = self.match(kind, type_id)
        if key is None:
            return self.defaults.value(kind)
        return self._tables[kind][key]

    def cost(self, type_id: str) -> Decimal:
        return Decimal(self.lookup(RuleKind.COST, type_id))

    def revenue(self, type_id: str) -> Decimal:
        return Decimal(self.lookup(RuleKind.REVENUE, type_id))

    def upkeep(self, type_id: str) -> Decimal:
        return Decimal(self.lookup(RuleKind.UPKEEP, type_id))

    def population(self, type_id: str) -> int:
        return int(self.lookup(RuleKind.POPULATION, type_id))

    # -- Mutation --

    def define(self, kind: RuleKind | str, key: str, value: Any) -> None:
        """Set one category value. Overwrites in place if the key exists."""
        if not key:
            raise ValueError("rule key must be non-empty")
        kind = RuleKind(kind)
        self._tables[kind][key] = _coerce(kind, value)

    def update(self, kind: RuleKind | str, mapping: Mapping[str, Any]) -> None:
        for key, value in mapping.items():
            self.define(kind, key, value)

    def replace(self, kind: RuleKind | str, mapping: Mapping[str, Any]) -> None:
        """Swap a whole table; the new mapping's order becomes the match order."""
        kind = RuleKind(kind)
        table: dict[str, RuleValue] = {}
        for key, value in mapping.items():
            if not key:
                raise ValueError("rule key must be non-empty")
            table[key] = _coerce(kind, value)
        self._tables[kind] = table

    def remove(self, kind: RuleKind | str, key: str) -> None:
        """Remove a category. Raises KeyError if not defined."""
        table = self._tables[RuleKind(kind)]
        if key not in table:
            raise KeyError(key)
        del table[key]

    # -- Snapshot / restore --

    def snapshot(self) -> dict[str, Any]:
        """Serialize to JSON-compatible data. Order of each table is preserved."""
        data: dict[str, Any] = {"policy": self.policy.value}
        for kind, table in self._tables.items():
            if kind is RuleKind.POPULATION:
                data[kind.value] = [[k, v] for k, v in table.items()]
            else:
                data[kind.value] = [[k, str(v)] for k, v in table.items()]
        return data

    def restore(self, data: Mapping[str, Any]) -> None:
        """Restore from snapshot data. Tables absent from *data* are left untouched."""
        if "policy" in data:
            self.policy = MatchPolicy(data["policy"])
        for kind in RuleKind:
            entries = data.get(kind.value)
            if entries is None:
                continue
            self.replace(kind, _entries_to_mapping(entries))


def _entries_to_mapping(entries: Iterable[Any] | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(entries, Mapping):
        return dict(entries)
    return {key: value for key, value in entries}
