"""gridcity-rules - Building rule tables for the city simulation."""
from __future__ import annotations

from gridcity_rules.table import RuleTable, RuleValue
from gridcity_rules.types import MatchPolicy, RuleDefaults, RuleKind

__all__ = [
    "MatchPolicy",
    "RuleDefaults",
    "RuleKind",
    "RuleTable",
    "RuleValue",
]
