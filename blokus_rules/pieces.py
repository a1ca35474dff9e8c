"""Polyomino pieces: shape offsets, orientation transforms, and the standard set."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from blokus_rules.grid import ORTHOGONAL, Coord

# Piece id -> (name, cell offsets). Ids follow the usual smallest-first ordering.
STANDARD_SHAPES: dict[int, tuple[str, tuple[tuple[int, int], ...]]] = {
    1: ("monomino", ((0, 0),)),
    2: ("domino", ((0, 0), (1, 0))),
    3: ("tromino-i", ((0, 0), (1, 0), (2, 0))),
    4: ("tromino-l", ((0, 0), (1, 0), (0, 1))),
    5: ("tetromino-i", ((0, 0), (1, 0), (2, 0), (3, 0))),
    6: ("tetromino-o", ((0, 0), (1, 0), (0, 1), (1, 1))),
    7: ("tetromino-l", ((0, 0), (1, 0), (2, 0), (0, 1))),
    8: ("tetromino-t", ((0, 0), (1, 0), (2, 0), (1, 1))),
    9: ("tetromino-z", ((0, 0), (1, 0), (1, 1), (2, 1))),
    10: ("pentomino-i", ((0, 0), (1, 0), (2, 0), (3, 0), (4, 0))),
    11: ("pentomino-l", ((0, 0), (1, 0), (2, 0), (3, 0), (0, 1))),
    12: ("pentomino-y", ((0, 0), (1, 0), (2, 0), (3, 0), (1, 1))),
    13: ("pentomino-n", ((0, 0), (1, 0), (1, 1), (2, 1), (3, 1))),
    14: ("pentomino-p", ((0, 0), (1, 0), (0, 1), (1, 1), (0, 2))),
    15: ("pentomino-u", ((0, 0), (1, 0), (0, 1), (2, 0), (2, 1))),
    16: ("pentomino-t", ((0, 0), (1, 0), (2, 0), (1, 1), (1, 2))),
    17: ("pentomino-v", ((0, 0), (1, 0), (2, 0), (0, 1), (0, 2))),
    18: ("pentomino-w", ((0, 0), (1, 0), (1, 1), (2, 1), (2, 2))),
    19: ("pentomino-z", ((0, 0), (1, 0), (1, 1), (1, 2), (2, 2))),
    20: ("pentomino-f", ((0, 0), (1, 0), (1, 1), (2, 1), (1, 2))),
    21: ("pentomino-x", ((1, 0), (0, 1), (1, 1), (2, 1), (1, 2))),
}


def normalize(shape: Iterable[Coord]) -> list[Coord]:
    """Shift a shape so its minimum x and minimum y are both 0."""
    cells = list(shape)
    if not cells:
        return cells
    min_x = min(c.x for c in cells)
    min_y = min(c.y for c in cells)
    offset = Coord(min_x, min_y)
    return [c - offset for c in cells]


@dataclass
class Piece:
    """A polyomino given as cell offsets relative to its anchor.

    ``placed`` is owned by the caller: the engine never sets it, the caller
    flips it after a successful placement.
    """

    piece_id: int
    shape: list[Coord]
    placed: bool = field(default=False, compare=False)

    @classmethod
    def from_cells(cls, piece_id: int, cells: Iterable[Coord | tuple[int, int]]) -> Piece:
        shape = [Coord.of(c) for c in cells]
        if len(set(shape)) != len(shape):
            raise ValueError(f"Piece {piece_id} has duplicate cells")
        piece = cls(piece_id=piece_id, shape=shape)
        if not piece.is_connected():
            raise ValueError(f"Piece {piece_id} is not edge-connected")
        return piece

    @property
    def size(self) -> int:
        return len(self.shape)

    def occupied_cells(self, anchor: Coord) -> list[Coord]:
        return [anchor + offset for offset in self.shape]

    def rotated_90(self) -> Piece:
        """Clockwise quarter turn: (x, y) -> (y, -x)."""
        rotated = normalize(Coord(c.y, -c.x) for c in self.shape)
        return Piece(piece_id=self.piece_id, shape=rotated, placed=self.placed)

    def flipped_horizontal(self) -> Piece:
        """Mirror across the vertical axis: (x, y) -> (-x, y)."""
        flipped = normalize(Coord(-c.x, c.y) for c in self.shape)
        return Piece(piece_id=self.piece_id, shape=flipped, placed=self.placed)

    def transformed(self, rotation: int, flipped: bool) -> Piece:
        """Mirror first (if asked), then rotate ``rotation`` quarter turns."""
        piece = self.flipped_horizontal() if flipped else self
        for _ in range(rotation % 4):
            piece = piece.rotated_90()
        return piece

    def orientations(self) -> Iterator[Piece]:
        """Yield each distinct shape among the 4 rotations x 2 reflections."""
        seen: set[frozenset[Coord]] = set()
        for base in (self, self.flipped_horizontal()):
            piece = base
            for _ in range(4):
                key = frozenset(normalize(piece.shape))
                if key not in seen:
                    seen.add(key)
                    yield piece
                piece = piece.rotated_90()

    def is_connected(self) -> bool:
        if len(self.shape) <= 1:
            return True
        cells = set(self.shape)
        start = self.shape[0]
        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for direction in ORTHOGONAL:
                nxt = current + direction
                if nxt in cells and nxt not in visited:
                    visited.add(nxt)
                    queue.append(nxt)
        return len(visited) == len(cells)


def piece_name(piece_id: int) -> str:
    entry = STANDARD_SHAPES.get(piece_id)
    return entry[0] if entry else "unknown"


def standard_piece(piece_id: int) -> Piece:
    """Build a fresh, unplaced copy of standard piece ``piece_id`` (1-21)."""
    if piece_id not in STANDARD_SHAPES:
        raise KeyError(f"Unknown piece id: {piece_id}")
    _, cells = STANDARD_SHAPES[piece_id]
    return Piece.from_cells(piece_id, cells)


def standard_set() -> dict[int, Piece]:
    return {piece_id: standard_piece(piece_id) for piece_id in STANDARD_SHAPES}
