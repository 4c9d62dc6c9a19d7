"""Spatial queries: nearest player, players in radius, broad-phase grid."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, List, Optional

from ..core.entities import Player
from ..core.vec2 import Vec2


GRID_CELL_SIZE = 100.0


class SpatialQuery:
    """Distance queries over a fixed set of players."""

    def __init__(self, players: Iterable[Player]):
        self.players = list(players)

    def find_nearest(self, pos: Vec2, exclude_id: Optional[str] = None) -> Optional[Player]:
        """Nearest player to a position, optionally skipping one id."""
        nearest = None
        nearest_dist = float('inf')

        for player in self.players:
            if player.id == exclude_id:
                continue
            dist = pos.distance_to(player.pos)
            if dist < nearest_dist:
                nearest = player
                nearest_dist = dist

        return nearest

    def find_players_in_radius(self, center: Vec2, radius: float) -> List[Player]:
        """All players within radius of a point."""
        return [p for p in self.players if center.distance_to(p.pos) <= radius]

    def nearest_n(self, pos: Vec2, n: int) -> List[Player]:
        """The n players closest to a position, nearest first."""
        return sorted(self.players, key=lambda p: pos.distance_to(p.pos))[:n]


class SpatialGrid:
    """Uniform grid bucketing players by position.

    Pairs are generated from same-cell and neighbor-cell buckets, which is
    enough for circles no larger than a cell.
    """

    def __init__(self, cell_size: float = GRID_CELL_SIZE):
        self.cell_size = cell_size
        self._cells: dict[tuple[int, int], list[Player]] = defaultdict(list)

    def _cell_of(self, pos: Vec2) -> tuple[int, int]:
        return int(pos.x // self.cell_size), int(pos.y // self.cell_size)

    def rebuild(self, players: Iterable[Player]) -> None:
        self._cells.clear()
        for player in players:
            self._cells[self._cell_of(player.pos)].append(player)

    def candidate_pairs(self) -> List[tuple[Player, Player]]:
        """Unique unordered pairs that may be in contact."""
        pairs: List[tuple[Player, Player]] = []
        seen: set[tuple[str, str]] = set()

        for (cx, cy), bucket in self._cells.items():
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    neighbor = self._cells.get((cx + dx, cy + dy))
                    if not neighbor:
                        continue
                    for a in bucket:
                        for b in neighbor:
                            if a.id == b.id:
                                continue
                            key = (a.id, b.id) if a.id < b.id else (b.id, a.id)
                            if key in seen:
                                continue
                            seen.add(key)
                            pairs.append((a, b))

        return pairs


def all_pairs(players: List[Player]) -> List[tuple[Player, Player]]:
    """Plain O(n²) pair enumeration."""
    return [
        (players[i], players[j])
        for i in range(len(players))
        for j in range(i + 1, len(players))
    ]
