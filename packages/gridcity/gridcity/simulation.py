"""CitySimulation - single owner of the city's economic and spatial state."""
from __future__ import annotations

import dataclasses
import datetime
import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterator, Mapping

from gridcity_rules import RuleKind, RuleTable
from gridcity_signal import ChangeNotifier, Observer

from gridcity.clock import EPOCH, Clock
from gridcity.config import CitySettings
from gridcity.connectivity import resolve_connectivity
from gridcity.demographics import Demographics, recalculate_demographics
from gridcity.ledger import FundsLedger, to_money
from gridcity.registry import StructureRegistry, is_road
from gridcity.scheduler import SchedulerState, TickScheduler
from gridcity.settlement import Settlement, make_settlement_system
from gridcity.types import Coord, InsufficientFunds, InvalidLoadData, Structure, TickContext

logger = logging.getLogger(__name__)

_SNAPSHOT_VERSION = 1

STARTING_FUNDS = Decimal("20000")


class CitySimulation:
    """Structures, treasury, calendar and derived demographics behind one lock.

    Every mutation (placement, purchase, tick, settings change, load) runs as
    a single unit of work under a re-entrant lock. Observers are told about a
    change once, when the outermost unit finishes.

    The rule table is borrowed, not owned: it is passed into every
    recalculation. Editing it directly takes effect on the next tick; editing
    it through ``update_rules`` / ``set_rule`` recalculates immediately.
    """

    def __init__(
        self,
        rules: RuleTable | None = None,
        settings: CitySettings | None = None,
        *,
        funds: Decimal | int | str = STARTING_FUNDS,
        start: datetime.date = EPOCH,
        autostart: bool = True,
    ) -> None:
        self._rules = rules if rules is not None else RuleTable.default()
        self._settings = settings if settings is not None else CitySettings()
        self._lock = threading.RLock()
        self._depth = 0
        # Lock holds, including the flush after the outermost unit.
        self._held = 0
        self._owner: int | None = None
        self._notifier = ChangeNotifier()
        self._registry = StructureRegistry()
        self._ledger = FundsLedger(funds, self._notifier)
        self._clock = Clock(self._settings.tick_interval_ms, start)
        self._demographics = Demographics()
        self._last_settlement: Settlement | None = None

        self._scheduler = TickScheduler(self._clock, guard=self._transaction)
        self._scheduler.add_system(self._demographics_system)
        self._scheduler.add_system(
            make_settlement_system(
                self._ledger,
                lambda: self._demographics.net_income,
                self._record_settlement,
            )
        )
        self._scheduler.add_system(self._publish_system)

        if autostart:
            self._scheduler.start()

    # -- Unit of work --

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self._lock:
            if self._held == 0:
                self._owner = threading.get_ident()
            self._held += 1
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                try:
                    if self._depth == 0:
                        self._notifier.flush()
                finally:
                    self._held -= 1
                    if self._held == 0:
                        self._owner = None

    def _in_transaction(self) -> bool:
        """True when the calling thread is inside a unit of work or its notification."""
        return self._owner == threading.get_ident()

    def _recalculate(self) -> Demographics:
        resolve_connectivity(self._registry)
        self._demographics = recalculate_demographics(
            self._registry,
            self._rules,
            self._settings.tax_rate,
            self._settings.per_capita_tax,
        )
        return self._demographics

    # -- Tick systems --

    def _demographics_system(self, ctx: TickContext) -> None:
        self._recalculate()

    def _record_settlement(self, settlement: Settlement) -> None:
        self._last_settlement = settlement

    def _publish_system(self, ctx: TickContext) -> None:
        self._notifier.publish()

    # -- Read-only views --

    @property
    def rules(self) -> RuleTable:
        return self._rules

    @property
    def settings(self) -> CitySettings:
        return self._settings

    @property
    def funds(self) -> Decimal:
        return self._ledger.funds

    @property
    def tax_rate(self) -> Decimal:
        return self._settings.tax_rate

    @property
    def demographics(self) -> Demographics:
        return self._demographics

    @property
    def population(self) -> int:
        return self._demographics.population

    @property
    def net_income(self) -> Decimal:
        return self._demographics.net_income

    @property
    def game_time(self) -> datetime.date:
        return self._clock.date

    @property
    def tick_number(self) -> int:
        return self._clock.tick_number

    @property
    def last_settlement(self) -> Settlement | None:
        return self._last_settlement

    @property
    def scheduler_state(self) -> SchedulerState:
        return self._scheduler.state

    @property
    def road_index(self) -> frozenset[Coord]:
        return self._registry.road_index

    def structures(self) -> list[Structure]:
        """Copies of the placed structures, in placement order."""
        with self._lock:
            return [dataclasses.replace(s) for s in self._registry]

    def structures_at(self, x: int, y: int) -> list[Structure]:
        with self._lock:
            return [dataclasses.replace(s) for s in self._registry.at(x, y)]

    # -- Change notification --

    def subscribe(self, observer: Observer) -> None:
        self._notifier.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._notifier.unsubscribe(observer)

    # -- Structures --

    def register(self, type_id: str, x: int, y: int) -> Structure:
        """Place a structure without charging for it."""
        with self._transaction():
            structure = self._registry.register(type_id, x, y)
            self._recalculate()
            self._notifier.publish()
            logger.debug(
                "placed %s at (%d, %d), connected=%s",
                type_id, x, y, structure.is_connected,
            )
            return dataclasses.replace(structure)

    def recalculate_demographics(self) -> Demographics:
        with self._transaction():
            result = self._recalculate()
            self._notifier.publish()
            return result

    # -- Treasury --

    def debit(self, amount: Decimal | int | str) -> Decimal:
        with self._transaction():
            return self._ledger.debit(amount)

    def credit(self, amount: Decimal | int | str) -> Decimal:
        with self._transaction():
            return self._ledger.credit(amount)

    # -- Purchase boundary --

    def get_cost(self, building_type: str) -> Decimal:
        return self._rules.cost(building_type)

    def can_afford(self, building_type: str) -> bool:
        return self._ledger.can_afford(self.get_cost(building_type))

    def can_place(self, building_type: str, x: int, y: int) -> bool:
        """Placement check applied before charging. Always True unless strict."""
        if not building_type:
            return False
        if not self._settings.strict_placement:
            return True
        if not self._settings.in_bounds(x, y):
            return False
        if is_road(building_type):
            return all(is_road(s.type_id) for s in self._registry.at(x, y))
        return not self._registry.occupied(x, y)

    def try_purchase(self, building_type: str, x: int, y: int) -> bool:
        """Charge for and place a building. Either both happen or neither does."""
        with self._transaction():
            if not self.can_place(building_type, x, y):
                logger.warning("purchase of %r at (%d, %d) rejected: placement", building_type, x, y)
                return False
            cost = self.get_cost(building_type)
            try:
                self._ledger.debit(cost)
            except InsufficientFunds as exc:
                logger.warning("purchase of %r at (%d, %d) rejected: %s", building_type, x, y, exc)
                return False
            self.register(building_type, x, y)
            return True

    # -- Scheduler --

    def tick(self) -> TickContext:
        """Advance one simulated day right now."""
        return self._scheduler.step()

    def start(self) -> None:
        self._scheduler.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the tick thread.

        Called from an observer or any other code holding the simulation
        lock, this does not wait for the thread: a pending tick may be
        blocked on that lock, and it is discarded once the lock is released.
        """
        if self._in_transaction():
            timeout = 0
        self._scheduler.stop(timeout)

    def close(self) -> None:
        self.stop()

    def __enter__(self) -> CitySimulation:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Configuration --

    def configure(self, **changes: Any) -> CitySettings:
        """Replace selected settings. Unknown names raise TypeError."""
        with self._transaction():
            self._apply_settings(dataclasses.replace(self._settings, **changes))
            return self._settings

    def _apply_settings(self, settings: CitySettings) -> None:
        self._settings = settings
        self._clock.interval_ms = settings.tick_interval_ms
        self._recalculate()
        self._notifier.publish()

    def update_rules(self, kind: RuleKind | str, mapping: Mapping[str, Any]) -> None:
        with self._transaction():
            self._rules.update(kind, mapping)
            self._recalculate()
            self._notifier.publish()

    def replace_rules(self, kind: RuleKind | str, mapping: Mapping[str, Any]) -> None:
        with self._transaction():
            self._rules.replace(kind, mapping)
            self._recalculate()
            self._notifier.publish()

    def set_rule(self, kind: RuleKind | str, key: str, value: Any) -> None:
        with self._transaction():
            self._rules.define(kind, key, value)
            self._recalculate()
            self._notifier.publish()

    def remove_rule(self, kind: RuleKind | str, key: str) -> None:
        """Drop a category; matching buildings fall back to the defaults."""
        with self._transaction():
            self._rules.remove(kind, key)
            self._recalculate()
            self._notifier.publish()

    # -- Snapshot / restore --

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "version": _SNAPSHOT_VERSION,
                "funds": str(self._ledger.funds),
                "population": self._demographics.population,
                "game_time": self._clock.date.isoformat(),
                "tick_number": self._clock.tick_number,
                "structures": self._registry.snapshot(),
                "settings": self._settings.snapshot(),
                "rules": self._rules.snapshot(),
            }

    def restore(self, data: Mapping[str, Any]) -> None:
        """Replace the live state wholesale.

        Everything is parsed before anything is applied, so a rejected
        snapshot leaves the simulation as it was. The stored population is
        ignored in favour of a fresh recalculation.
        """
        if not isinstance(data, Mapping):
            raise InvalidLoadData(f"Snapshot must be a mapping, got {type(data).__name__}")
        version = data.get("version")
        if version != _SNAPSHOT_VERSION:
            raise InvalidLoadData(
                f"Unsupported snapshot version {version!r}, expected {_SNAPSHOT_VERSION}"
            )
        try:
            funds = to_money(data["funds"])
            if not funds.is_finite() or funds < 0:
                raise ValueError(f"funds must be a finite amount >= 0, got {funds}")
            game_time = datetime.date.fromisoformat(str(data["game_time"]))
            tick_number = int(data.get("tick_number", 0))
            staged = StructureRegistry()
            staged.restore(data.get("structures"))
            settings = self._settings
            if data.get("settings") is not None:
                settings = CitySettings.from_snapshot(data["settings"], base=settings)
            rules_data = data.get("rules")
            if rules_data is not None:
                RuleTable().restore(rules_data)
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise InvalidLoadData(f"Malformed snapshot: {exc!r}") from exc

        with self._transaction():
            self._ledger.reset(funds)
            self._clock.reset(game_time, tick_number)
            self._registry.replace(staged)
            if rules_data is not None:
                self._rules.restore(rules_data)
            self._last_settlement = None
            self._apply_settings(settings)
            logger.info(
                "loaded %d structures at %s, funds %s",
                len(self._registry), game_time, funds,
            )

    load = restore

    @classmethod
    def from_snapshot(
        cls,
        data: Mapping[str, Any],
        rules: RuleTable | None = None,
        *,
        autostart: bool = False,
    ) -> CitySimulation:
        sim = cls(rules, autostart=False)
        sim.restore(data)
        if autostart:
            sim.start()
        return sim
