"""gridcity - headless city runner."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

from gridcity.config import CitySettings
from gridcity.simulation import CitySimulation
from gridcity.types import InvalidLoadData

DEMO_CITY: list[tuple[str, int, int]] = (
    [("Road", x, 3) for x in range(1, 9)]
    + [("Road", 7, y) for y in range(4, 9)]
    + [
        ("SuburbanHomeHiFi", 2, 2),
        ("SuburbanHomeHiFi", 3, 2),
        ("ModernApartmentComplex", 2, 4),
        ("MetropolitanPoliceStation", 8, 8),
    ]
)


def _tax_rate(value: str) -> Decimal:
    try:
        rate = Decimal(value)
    except ArithmeticError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not (0 <= rate <= 1):
        raise argparse.ArgumentTypeError(f"must be in [0, 1], got {value}")
    return rate


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="gridcity", description="Run the city simulation headless")
    p.add_argument("--days", type=int, default=90, help="Simulated days to run (default: 90)")
    p.add_argument("--demo", action="store_true", help="Build the demo city before running")
    p.add_argument("--load", type=Path, default=None, help="Load a JSON snapshot first")
    p.add_argument("--save", type=Path, default=None, help="Write a JSON snapshot at the end")
    p.add_argument("--tax-rate", type=_tax_rate, default=None, help="Residential tax rate in [0, 1]")
    p.add_argument("--strict", action="store_true", help="Reject out-of-bounds or occupied tiles")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                   type=str.upper, help="Logging level (default: WARNING)")
    return p.parse_args(argv)


def build_demo(sim: CitySimulation) -> int:
    """Purchase the demo layout. Returns how many placements succeeded."""
    placed = 0
    for type_id, x, y in DEMO_CITY:
        if sim.try_purchase(type_id, x, y):
            placed += 1
    return placed


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.tax_rate is not None:
        overrides["tax_rate"] = args.tax_rate
    if args.strict:
        overrides["strict_placement"] = True

    with CitySimulation(settings=CitySettings(**overrides), autostart=False) as sim:
        if args.load is not None:
            try:
                sim.restore(json.loads(args.load.read_text()))
            except (OSError, ValueError, InvalidLoadData) as exc:
                print(f"gridcity: cannot load {args.load}: {exc}", file=sys.stderr)
                return 1
            # Command-line flags win over the loaded settings.
            if overrides:
                sim.configure(**overrides)

        if args.demo:
            placed = build_demo(sim)
            print(f"Demo city: {placed}/{len(DEMO_CITY)} placements, funds {sim.funds}")

        for _ in range(args.days):
            ctx = sim.tick()
            if ctx.is_month_start and sim.last_settlement is not None:
                s = sim.last_settlement
                status = "applied" if s.applied else "skipped"
                print(f"{s.date.isoformat()}  net {s.net_income:>10}  {status:<8} funds {sim.funds}")

        print(
            f"{sim.game_time.isoformat()}: funds {sim.funds}, population {sim.population}, "
            f"net income {sim.net_income}, structures {len(sim.structures())}"
        )

        if args.save is not None:
            args.save.write_text(json.dumps(sim.snapshot(), indent=2))
    return 0
