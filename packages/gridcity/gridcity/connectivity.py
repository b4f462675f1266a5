"""Road-adjacency resolution over the structure registry."""
from __future__ import annotations

from typing import Collection

from gridcity.registry import StructureRegistry, is_road
from gridcity.types import Coord

_ORTHOGONAL = ((1, 0), (-1, 0), (0, 1), (0, -1))


def orthogonal_neighbors(x: int, y: int) -> list[Coord]:
    """The four edge-sharing tiles. Diagonals never count."""
    return [(x + dx, y + dy) for dx, dy in _ORTHOGONAL]


def touches_road(x: int, y: int, road_index: Collection[Coord]) -> bool:
    return any(coord in road_index for coord in orthogonal_neighbors(x, y))


def resolve_connectivity(registry: StructureRegistry) -> int:
    """Recompute every ``is_connected`` flag. Returns the connected count.

    Roads are always connected; anything else needs a road on one of its
    four orthogonal neighbours. Full pass, no incremental bookkeeping.
    """
    roads = registry.road_index
    connected = 0
    for structure in registry:
        if is_road(structure.type_id):
            structure.is_connected = True
        else:
            structure.is_connected = touches_road(structure.x, structure.y, roads)
        if structure.is_connected:
            connected += 1
    return connected
