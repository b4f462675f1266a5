"""StructureRegistry - placed structures plus a road-tile index."""
from __future__ import annotations

from typing import Any, Iterable, Iterator

from gridcity.types import Coord, Structure

ROAD_MARKER = "road"


def is_road(type_id: str) -> bool:
    """True when *type_id* denotes road infrastructure (case-insensitive)."""
    return ROAD_MARKER in type_id.lower()


class StructureRegistry:
    """Append-only structure store.

    Invariant: ``road_index`` holds exactly the coordinates of road
    structures. Several structures may share a tile.
    """

    def __init__(self) -> None:
        self._structures: list[Structure] = []
        self._roads: set[Coord] = set()

    def register(self, type_id: str, x: int, y: int) -> Structure:
        structure = Structure(type_id=type_id, x=x, y=y, is_connected=False)
        self._structures.append(structure)
        if is_road(type_id):
            self._roads.add(structure.position)
        return structure

    def structures(self) -> list[Structure]:
        return list(self._structures)

    def __iter__(self) -> Iterator[Structure]:
        return iter(self._structures)

    def __len__(self) -> int:
        return len(self._structures)

    @property
    def road_index(self) -> frozenset[Coord]:
        return frozenset(self._roads)

    def has_road(self, x: int, y: int) -> bool:
        return (x, y) in self._roads

    def at(self, x: int, y: int) -> list[Structure]:
        return [s for s in self._structures if s.position == (x, y)]

    def occupied(self, x: int, y: int) -> bool:
        return any(s.position == (x, y) for s in self._structures)

    def replace(self, structures: Iterable[Structure]) -> None:
        """Swap in a whole structure set and rebuild the road index."""
        self._structures = list(structures)
        self._roads = {
            s.position for s in self._structures if is_road(s.type_id)
        }

    def clear(self) -> None:
        self._structures.clear()
        self._roads.clear()

    # -- Snapshot / restore --

    def snapshot(self) -> list[dict[str, Any]]:
        return [
            {
                "type_id": s.type_id,
                "x": s.x,
                "y": s.y,
                "is_connected": s.is_connected,
            }
            for s in self._structures
        ]

    def restore(self, data: Iterable[dict[str, Any]] | None) -> None:
        """Restore from snapshot data. ``None`` restores an empty city."""
        if data is None:
            self.clear()
            return
        self.replace(
            Structure(
                type_id=str(entry["type_id"]),
                x=int(entry["x"]),
                y=int(entry["y"]),
                is_connected=bool(entry.get("is_connected", False)),
            )
            for entry in data
        )
