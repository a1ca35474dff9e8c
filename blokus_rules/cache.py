"""Per-player frontier of diagonal anchor candidates.

Rescanning the whole board for legal anchors after every move costs O(N^2).
Instead each player keeps the set of empty cells diagonally reachable from
their own pieces that are not edge-adjacent to them; the enumerator only
probes placements that cover one of these cells.
"""

from __future__ import annotations

from typing import Iterable

from blokus_rules.grid import DIAGONAL, EMPTY, ORTHOGONAL, PLAYER_IDS, Coord, Grid


class ConnectablePositionCache:
    def __init__(self, grid: Grid):
        self.grid = grid
        self._positions: dict[int, set[Coord]] = {}
        self.reset_all()

    def reset_all(self) -> None:
        self._positions = {pid: {self.grid.corners[pid]} for pid in PLAYER_IDS}

    def positions(self, player_id: int) -> set[Coord]:
        """A copy of the player's candidate set (empty for unknown players)."""
        return set(self._positions.get(player_id, ()))

    def is_connectable(self, pos: Coord, player_id: int) -> bool:
        """On board, empty, and not edge-adjacent to one of the player's cells."""
        if not self.grid.in_bounds(pos) or self.grid.owner(pos) != EMPTY:
            return False
        return not any(self.grid.is_owned_by(pos + d, player_id) for d in ORTHOGONAL)

    def update_after_placement(self, player_id: int, new_cells: Iterable[Coord]) -> None:
        """Refresh ``player_id``'s candidates; the grid must already hold ``new_cells``."""
        cells = list(new_cells)
        candidates = self._positions[player_id]
        candidates.difference_update(cells)
        for pos in cells:
            for direction in DIAGONAL:
                corner = pos + direction
                if self.is_connectable(corner, player_id):
                    candidates.add(corner)

    def snapshot(self) -> dict[int, list[Coord]]:
        return {pid: sorted(self._positions[pid]) for pid in PLAYER_IDS}

    def replace(self, positions: dict[int, set[Coord]]) -> None:
        self._positions = {pid: set(positions.get(pid, ())) for pid in PLAYER_IDS}
