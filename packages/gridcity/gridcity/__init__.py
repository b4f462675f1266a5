"""gridcity - Simulation core for a grid-based city builder."""

from gridcity.clock import EPOCH, Clock
from gridcity.config import CitySettings
from gridcity.connectivity import orthogonal_neighbors, resolve_connectivity
from gridcity.demographics import Demographics, recalculate_demographics
from gridcity.ledger import FundsLedger
from gridcity.registry import StructureRegistry, is_road
from gridcity.scheduler import SchedulerState, TickScheduler
from gridcity.settlement import Settlement, settle_month
from gridcity.simulation import STARTING_FUNDS, CitySimulation
from gridcity.types import InsufficientFunds, InvalidLoadData, Structure, TickContext

__all__ = [
    "CitySimulation",
    "CitySettings",
    "Clock",
    "Demographics",
    "EPOCH",
    "FundsLedger",
    "InsufficientFunds",
    "InvalidLoadData",
    "STARTING_FUNDS",
    "SchedulerState",
    "Settlement",
    "Structure",
    "StructureRegistry",
    "TickContext",
    "TickScheduler",
    "is_road",
    "orthogonal_neighbors",
    "recalculate_demographics",
    "resolve_connectivity",
    "settle_month",
]
