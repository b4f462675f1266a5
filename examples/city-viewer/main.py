"""City Viewer: place buildings on a live gridcity simulation with pygame."""
from __future__ import annotations

import argparse
import logging
import sys

import pygame

from gridcity import CitySettings, CitySimulation, SchedulerState

from ui.constants import (
    BUILDINGS, FPS, MAP_H, MAP_W, SCREEN_H, SCREEN_W, TILE_SIZE,
)
from ui.hud import Hud
from ui.renderer import draw_grid, draw_hover, draw_structures

SPEEDS_MS = [3000, 1000, 250, 50]


class ViewerState:
    """Holds the simulation and UI state."""

    def __init__(self, tick_interval_ms: int, strict: bool) -> None:
        settings = CitySettings(
            tick_interval_ms=tick_interval_ms,
            grid_size=MAP_W,
            strict_placement=strict,
        )
        self.sim = CitySimulation(settings=settings)
        self.hud = Hud()
        # Set from the tick thread, read by the render loop.
        self.dirty = True
        self.sim.subscribe(self._on_change)

    def _on_change(self) -> None:
        self.dirty = True

    def refresh(self) -> None:
        self.dirty = False
        sim = self.sim
        state = "running" if sim.scheduler_state is SchedulerState.RUNNING else "paused"
        lines = [
            f"Date  {sim.game_time.isoformat()}",
            f"Funds {sim.funds}",
            f"Pop   {sim.population}",
            f"Net   {sim.net_income}/mo",
            f"Speed {sim.settings.tick_interval_ms}ms ({state})",
        ]
        settlement = sim.last_settlement
        if settlement is not None:
            mark = "" if settlement.applied else " skipped"
            lines.append(f"Last  {settlement.net_income}{mark}")
        self.hud.set_figures(lines)

    def place(self, mx: int, my: int) -> None:
        type_id, label = self.hud.selected_type, self.hud.selected_label
        if self.sim.try_purchase(type_id, mx, my):
            self.hud.set_message(f"Placed {label} at ({mx}, {my})", (100, 255, 100))
        elif not self.sim.can_afford(type_id):
            self.hud.set_message(
                f"{label} costs {self.sim.get_cost(type_id)}, funds {self.sim.funds}",
                (255, 80, 80),
            )
        else:
            self.hud.set_message(f"Cannot place {label} here", (255, 80, 80))

    def toggle_pause(self) -> None:
        if self.sim.scheduler_state is SchedulerState.RUNNING:
            self.sim.stop()
        else:
            self.sim.start()
        self.dirty = True

    def cycle_speed(self) -> None:
        current = self.sim.settings.tick_interval_ms
        idx = SPEEDS_MS.index(current) if current in SPEEDS_MS else -1
        self.sim.configure(tick_interval_ms=SPEEDS_MS[(idx + 1) % len(SPEEDS_MS)])


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive gridcity viewer")
    parser.add_argument("--interval", type=int, default=1000,
                        help="milliseconds per simulated day (default: 1000)")
    parser.add_argument("--strict", action="store_true",
                        help="reject out-of-bounds and overlapping placements")
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_W, SCREEN_H))
    pygame.display.set_caption("City Viewer")
    clock = pygame.time.Clock()

    state = ViewerState(args.interval, args.strict)
    number_keys = [pygame.K_1 + i for i in range(len(BUILDINGS))]

    running = True
    while running:
        clock.tick(FPS)

        # --- Events ---
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    state.toggle_pause()
                elif event.key == pygame.K_f:
                    state.cycle_speed()
                elif event.key in number_keys:
                    state.hud.select(number_keys.index(event.key))
                    state.hud.set_message(f"Selected: {state.hud.selected_label}")

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                mx, my = event.pos[0] // TILE_SIZE, event.pos[1] // TILE_SIZE
                if 0 <= mx < MAP_W and 0 <= my < MAP_H:
                    state.place(mx, my)

        if state.dirty:
            state.refresh()

        # --- Render ---
        screen.fill((20, 20, 30))
        draw_grid(screen)
        draw_structures(screen, state.sim.structures())

        mouse_x, mouse_y = pygame.mouse.get_pos()
        draw_hover(
            screen, mouse_x // TILE_SIZE, mouse_y // TILE_SIZE,
            state.sim.can_afford(state.hud.selected_type),
        )

        costs = [state.sim.get_cost(type_id) for type_id, _, _ in BUILDINGS]
        state.hud.draw(screen, costs)

        pygame.display.flip()

    state.sim.close()
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
