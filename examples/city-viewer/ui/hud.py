"""Sidebar (palette + city figures) and bottom status bar."""
from __future__ import annotations

from decimal import Decimal

import pygame

from ui.constants import BUILDINGS, GRID_H, GRID_W, SCREEN_W, STATUS_H


class Hud:
    def __init__(self) -> None:
        self.selected = 0
        self._message = ""
        self._message_color = (200, 200, 200)
        self._lines: list[str] = []
        self._font: pygame.font.Font | None = None

    def _get_font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont("monospace", 14)
        return self._font

    @property
    def selected_type(self) -> str:
        return BUILDINGS[self.selected][0]

    @property
    def selected_label(self) -> str:
        return BUILDINGS[self.selected][1]

    def select(self, index: int) -> None:
        if 0 <= index < len(BUILDINGS):
            self.selected = index

    def set_message(self, message: str, color: tuple[int, int, int] = (200, 200, 200)) -> None:
        self._message = message
        self._message_color = color

    def set_figures(self, lines: list[str]) -> None:
        self._lines = lines

    def draw(self, surface: pygame.Surface, costs: list[Decimal]) -> None:
        font = self._get_font()
        pygame.draw.rect(surface, (25, 25, 35), pygame.Rect(GRID_W, 0, SCREEN_W - GRID_W, GRID_H))
        x0, y0 = GRID_W + 8, 8

        surface.blit(font.render("Buildings", True, (255, 255, 255)), (x0, y0))
        y0 += 24
        for i, ((_, label, color), cost) in enumerate(zip(BUILDINGS, costs)):
            if i == self.selected:
                pygame.draw.rect(surface, (60, 60, 80), pygame.Rect(x0 - 4, y0 - 2, 204, 22))
            swatch = pygame.Rect(x0, y0, 14, 14)
            pygame.draw.rect(surface, color, swatch)
            text = font.render(f"{i + 1} {label:<10}{cost:>7}", True, (220, 220, 220))
            surface.blit(text, (x0 + 20, y0))
            y0 += 22

        y0 += 16
        for line in self._lines:
            surface.blit(font.render(line, True, (230, 230, 160)), (x0, y0))
            y0 += 20

        pygame.draw.rect(surface, (30, 30, 40), pygame.Rect(0, GRID_H, SCREEN_W, STATUS_H))
        if self._message:
            text = font.render(self._message, True, self._message_color)
            surface.blit(text, (8, GRID_H + 8))
