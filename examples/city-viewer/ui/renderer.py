"""Grid and structure rendering."""
from __future__ import annotations

import pygame

from gridcity import Structure

from ui.constants import COLORS_BY_TYPE, GRID_H, GRID_W, MAP_H, MAP_W, TILE_SIZE


def draw_grid(surface: pygame.Surface) -> None:
    surface.fill((76, 175, 80), pygame.Rect(0, 0, GRID_W, GRID_H))
    for x in range(MAP_W + 1):
        pygame.draw.line(surface, (50, 120, 55), (x * TILE_SIZE, 0), (x * TILE_SIZE, GRID_H))
    for y in range(MAP_H + 1):
        pygame.draw.line(surface, (50, 120, 55), (0, y * TILE_SIZE), (GRID_W, y * TILE_SIZE))


def draw_structures(surface: pygame.Surface, structures: list[Structure]) -> None:
    """Filled tile per structure; a red outline marks no road access."""
    for s in structures:
        if not (0 <= s.x < MAP_W and 0 <= s.y < MAP_H):
            continue
        color = COLORS_BY_TYPE.get(s.type_id, (200, 200, 200))
        rect = pygame.Rect(s.x * TILE_SIZE + 2, s.y * TILE_SIZE + 2, TILE_SIZE - 4, TILE_SIZE - 4)
        pygame.draw.rect(surface, color, rect)
        outline = (255, 255, 255) if s.is_connected else (230, 40, 40)
        pygame.draw.rect(surface, outline, rect, 1 if s.is_connected else 2)


def draw_hover(surface: pygame.Surface, mx: int, my: int, affordable: bool) -> None:
    if mx < 0 or my < 0 or mx >= MAP_W or my >= MAP_H:
        return
    color = (255, 255, 0) if affordable else (255, 80, 80)
    rect = pygame.Rect(mx * TILE_SIZE, my * TILE_SIZE, TILE_SIZE, TILE_SIZE)
    pygame.draw.rect(surface, color, rect, 2)
