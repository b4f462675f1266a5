"""Tests for CitySimulation: purchases, notifications, settlement, configuration."""
from __future__ import annotations

import datetime
import time
from decimal import Decimal

import pytest
from gridcity import CitySettings, CitySimulation, InsufficientFunds, SchedulerState
from gridcity_rules import RuleTable


@pytest.fixture
def sim():
    simulation = CitySimulation(autostart=False)
    yield simulation
    simulation.close()


def counted(simulation: CitySimulation) -> list[int]:
    calls: list[int] = []
    simulation.subscribe(lambda: calls.append(1))
    return calls


def advance_to_next_month(simulation: CitySimulation) -> None:
    simulation.tick()
    while simulation.game_time.day != 1:
        simulation.tick()


class TestInitialState:
    def test_defaults(self, sim) -> None:
        assert sim.funds == Decimal("20000")
        assert sim.game_time == datetime.date(2026, 1, 1)
        assert sim.tax_rate == Decimal("0.10")
        assert sim.population == 0
        assert sim.net_income == 0
        assert sim.structures() == []
        assert sim.road_index == frozenset()
        assert sim.last_settlement is None

    def test_autostart_runs_the_scheduler(self) -> None:
        with CitySimulation(settings=CitySettings(tick_interval_ms=5)) as running:
            assert running.scheduler_state is SchedulerState.RUNNING
            deadline = time.monotonic() + 5.0
            while running.tick_number < 2 and time.monotonic() < deadline:
                time.sleep(0.005)
            assert running.game_time > datetime.date(2026, 1, 1)
        assert running.scheduler_state is SchedulerState.STOPPED

    def test_start_and_stop(self, sim) -> None:
        assert sim.scheduler_state is SchedulerState.STOPPED
        sim.start()
        assert sim.scheduler_state is SchedulerState.RUNNING
        sim.stop()
        assert sim.scheduler_state is SchedulerState.STOPPED


class TestScenario:
    def test_city_building_walkthrough(self, sim) -> None:
        assert sim.try_purchase("Road", 5, 5) is True
        assert sim.funds == Decimal("19990")
        [road] = sim.structures_at(5, 5)
        assert road.is_connected is True

        assert sim.try_purchase("Home", 6, 5) is True
        assert sim.funds == Decimal("19490")
        [home] = sim.structures_at(6, 5)
        assert home.is_connected is True
        assert sim.population == 4

        assert sim.try_purchase("Home", 10, 10) is True
        assert sim.funds == Decimal("18990")
        [remote] = sim.structures_at(10, 10)
        assert remote.is_connected is False
        assert sim.population == 4

        assert sim.try_purchase("Mall", 0, 0) is True
        assert sim.funds == Decimal("8990")

    def test_mall_refused_when_short(self) -> None:
        with CitySimulation(funds=5000, autostart=False) as poor:
            assert poor.try_purchase("Mall", 0, 0) is False
            assert poor.funds == Decimal("5000")
            assert poor.structures() == []


class TestPurchase:
    def test_get_cost(self, sim) -> None:
        assert sim.get_cost("Road") == Decimal("10")
        assert sim.get_cost("SuburbanHomeHiFi_20260128_181032.json") == Decimal("500")
        assert sim.get_cost("Lighthouse") == Decimal("100")

    def test_can_afford(self) -> None:
        with CitySimulation(funds=600, autostart=False) as small:
            assert small.can_afford("Home")
            assert not small.can_afford("Apartment")

    def test_failed_purchase_changes_nothing(self) -> None:
        with CitySimulation(funds=1999, autostart=False) as small:
            small.try_purchase("Road", 0, 0)
            before = (small.funds, small.structures(), small.road_index, small.demographics)
            assert small.try_purchase("Apartment", 1, 0) is False
            after = (small.funds, small.structures(), small.road_index, small.demographics)
            assert before == after

    def test_unknown_building_charged_default_cost(self, sim) -> None:
        assert sim.try_purchase("Lighthouse", 3, 3) is True
        assert sim.funds == Decimal("19900")

    def test_empty_building_type_rejected(self, sim) -> None:
        assert sim.try_purchase("", 0, 0) is False
        assert sim.funds == Decimal("20000")

    def test_permissive_placement_by_default(self, sim) -> None:
        assert sim.try_purchase("Home", -50, 999) is True
        assert sim.try_purchase("Home", -50, 999) is True
        assert len(sim.structures_at(-50, 999)) == 2

    def test_register_places_without_charge(self, sim) -> None:
        structure = sim.register("Road", 1, 1)
        assert structure.is_connected is True
        assert sim.funds == Decimal("20000")
        assert sim.road_index == frozenset({(1, 1)})

    def test_returned_structures_are_copies(self, sim) -> None:
        sim.try_purchase("Home", 1, 1)
        sim.structures()[0].is_connected = True
        assert sim.structures()[0].is_connected is False


class TestStrictPlacement:
    @pytest.fixture
    def strict(self):
        simulation = CitySimulation(
            settings=CitySettings(strict_placement=True, grid_size=10), autostart=False
        )
        yield simulation
        simulation.close()

    def test_out_of_bounds_rejected_without_charge(self, strict) -> None:
        assert strict.try_purchase("Home", 10, 0) is False
        assert strict.try_purchase("Home", -1, 0) is False
        assert strict.funds == Decimal("20000")

    def test_occupied_tile_rejected(self, strict) -> None:
        assert strict.try_purchase("Home", 2, 2) is True
        assert strict.try_purchase("Shop", 2, 2) is False
        assert strict.funds == Decimal("19500")

    def test_roads_stack_on_roads_only(self, strict) -> None:
        assert strict.try_purchase("Road", 4, 4) is True
        assert strict.try_purchase("Road", 4, 4) is True
        assert strict.try_purchase("Home", 4, 4) is False
        assert strict.try_purchase("Home", 5, 5) is True
        assert strict.try_purchase("Road", 5, 5) is False

    def test_can_place(self, strict) -> None:
        assert strict.can_place("Home", 0, 0)
        assert not strict.can_place("Home", 0, 10)


class TestNotifications:
    def test_purchase_notifies_once(self, sim) -> None:
        calls = counted(sim)
        sim.try_purchase("Road", 0, 0)
        assert calls == [1]

    def test_failed_purchase_does_not_notify(self) -> None:
        with CitySimulation(funds=5, autostart=False) as poor:
            calls = counted(poor)
            assert poor.try_purchase("Road", 0, 0) is False
            assert calls == []

    def test_failed_debit_raises_and_does_not_notify(self, sim) -> None:
        calls = counted(sim)
        with pytest.raises(InsufficientFunds):
            sim.debit(50_000)
        assert calls == []
        assert sim.funds == Decimal("20000")

    def test_debit_and_credit_notify(self, sim) -> None:
        calls = counted(sim)
        sim.debit(100)
        sim.credit(50)
        assert calls == [1, 1]
        assert sim.funds == Decimal("19950")

    def test_tick_notifies(self, sim) -> None:
        calls = counted(sim)
        sim.tick()
        sim.tick()
        assert len(calls) == 2

    def test_register_notifies(self, sim) -> None:
        calls = counted(sim)
        sim.register("Home", 0, 0)
        assert calls == [1]

    def test_observer_sees_completed_state(self, sim) -> None:
        seen = []
        sim.subscribe(lambda: seen.append((sim.funds, len(sim.structures()), sim.population)))
        sim.try_purchase("Road", 5, 5)
        sim.try_purchase("Home", 6, 5)
        assert seen == [
            (Decimal("19990"), 1, 0),
            (Decimal("19490"), 2, 4),
        ]

    def test_failing_observer_does_not_break_purchase(self, sim) -> None:
        def broken() -> None:
            raise RuntimeError("renderer down")

        sim.subscribe(broken)
        assert sim.try_purchase("Road", 0, 0) is True
        assert sim.funds == Decimal("19990")

    def test_unsubscribe(self, sim) -> None:
        calls: list[int] = []

        def observer() -> None:
            calls.append(1)

        sim.subscribe(observer)
        sim.unsubscribe(observer)
        sim.try_purchase("Road", 0, 0)
        assert calls == []


class TestSettlement:
    def test_surplus_credited_on_first_of_month(self, sim) -> None:
        sim.try_purchase("Road", 5, 5)
        sim.try_purchase("Home", 6, 5)
        assert sim.net_income == Decimal("3")

        for _ in range(30):
            sim.tick()
        assert sim.game_time == datetime.date(2026, 1, 31)
        assert sim.funds == Decimal("19490")

        net_before = sim.net_income
        funds_before = sim.funds
        sim.tick()
        assert sim.game_time == datetime.date(2026, 2, 1)
        assert sim.funds == funds_before + net_before
        assert sim.last_settlement.applied is True
        assert sim.last_settlement.net_income == Decimal("3")

    def test_deficit_debited(self, sim) -> None:
        sim.try_purchase("Police", 0, 0)
        funds_before = sim.funds
        advance_to_next_month(sim)
        assert sim.funds == funds_before - Decimal("100")

    def test_unaffordable_deficit_leaves_funds(self) -> None:
        with CitySimulation(funds=10, autostart=False) as broke:
            assert broke.try_purchase("Road", 0, 0)
            assert broke.funds == 0
            assert broke.net_income == Decimal("-1")
            advance_to_next_month(broke)
            assert broke.funds == 0
            assert broke.last_settlement.applied is False
            # The scheduler keeps going.
            broke.tick()
            assert broke.game_time == datetime.date(2026, 2, 2)

    def test_settlement_uses_income_recomputed_in_the_tick(self, sim) -> None:
        sim.try_purchase("Police", 0, 0)
        for _ in range(30):
            sim.tick()
        sim.rules.define("upkeep", "Police", 40)
        assert sim.net_income == Decimal("-100")
        funds_before = sim.funds

        sim.tick()
        assert sim.game_time == datetime.date(2026, 2, 1)
        assert sim.last_settlement.net_income == Decimal("-40")
        assert sim.funds == funds_before - Decimal("40")

    def test_no_settlement_mid_month(self, sim) -> None:
        sim.try_purchase("Police", 0, 0)
        funds_before = sim.funds
        for _ in range(10):
            sim.tick()
        assert sim.funds == funds_before
        assert sim.last_settlement is None


class TestConfiguration:
    def test_tax_rate_change_recalculates(self, sim) -> None:
        sim.try_purchase("Road", 5, 5)
        sim.try_purchase("Home", 6, 5)
        calls = counted(sim)
        settings = sim.configure(tax_rate=Decimal("0.5"))
        assert settings.tax_rate == Decimal("0.5")
        assert sim.tax_rate == Decimal("0.5")
        assert sim.net_income == Decimal("19")
        assert calls == [1]

    def test_invalid_change_leaves_settings(self, sim) -> None:
        with pytest.raises(ValueError):
            sim.configure(tax_rate=Decimal("1.5"))
        assert sim.tax_rate == Decimal("0.10")

    def test_unknown_setting_raises(self, sim) -> None:
        with pytest.raises(TypeError):
            sim.configure(speed=3)

    def test_tick_interval_reconfigurable(self, sim) -> None:
        sim.configure(tick_interval_ms=50)
        assert sim.settings.tick_interval_ms == 50
        assert sim.tick().dt == pytest.approx(0.05)

    def test_set_rule_recalculates_and_notifies(self, sim) -> None:
        sim.try_purchase("Road", 5, 5)
        sim.try_purchase("Home", 6, 5)
        calls = counted(sim)
        sim.set_rule("population", "Home", 10)
        assert sim.population == 10
        assert calls == [1]

    def test_update_rules_changes_costs(self, sim) -> None:
        sim.update_rules("cost", {"Road": 25, "Castle": 900})
        assert sim.get_cost("Road") == Decimal("25")
        assert sim.get_cost("Castle") == Decimal("900")

    def test_invalid_rule_values_rejected(self, sim) -> None:
        calls = counted(sim)
        with pytest.raises(ValueError):
            sim.set_rule("cost", "Road", -5)
        with pytest.raises(ValueError):
            sim.set_rule("upkeep", "Road", "NaN")
        assert sim.get_cost("Road") == Decimal("10")
        assert calls == []
        assert sim.try_purchase("Road", 0, 0) is True

    def test_settlement_survives_rejected_rule_edit(self, sim) -> None:
        sim.try_purchase("Road", 0, 0)
        with pytest.raises(ValueError):
            sim.update_rules("upkeep", {"Road": "Infinity"})
        advance_to_next_month(sim)
        assert sim.last_settlement.applied is True
        assert sim.last_settlement.net_income == Decimal("-1")

    def test_remove_rule_falls_back_to_defaults(self, sim) -> None:
        sim.try_purchase("Road", 5, 5)
        sim.try_purchase("Home", 6, 5)
        calls = counted(sim)
        sim.remove_rule("population", "Home")
        assert sim.population == 0
        assert calls == [1]
        with pytest.raises(KeyError):
            sim.remove_rule("population", "Home")

    def test_replace_rules(self, sim) -> None:
        sim.try_purchase("Road", 0, 0)
        sim.replace_rules("upkeep", {"Road": 3})
        assert sim.net_income == Decimal("-3")

    def test_direct_rule_edit_applies_on_next_tick(self, sim) -> None:
        sim.try_purchase("Road", 5, 5)
        sim.try_purchase("Home", 6, 5)
        sim.rules.define("population", "Home", 7)
        assert sim.population == 4
        sim.tick()
        assert sim.population == 7

    def test_shared_rule_table(self) -> None:
        rules = RuleTable(costs={"Road": 1})
        with CitySimulation(rules, autostart=False) as custom:
            assert custom.rules is rules
            assert custom.try_purchase("Road", 0, 0)
            assert custom.funds == Decimal("19999")

    def test_recalculate_demographics_is_repeatable(self, sim) -> None:
        sim.try_purchase("Road", 0, 0)
        sim.try_purchase("Apartment", 1, 0)
        first = sim.recalculate_demographics()
        assert sim.recalculate_demographics() == first
        assert first.population == 40
