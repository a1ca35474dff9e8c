"""Board occupancy: coordinates, the NxN grid, and per-player first-move flags."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BOARD_SIZE = 20
MAX_PLAYERS = 4
PLAYER_IDS = range(1, MAX_PLAYERS + 1)
EMPTY = 0
OFF_BOARD = -1


@dataclass(frozen=True, order=True)
class Coord:
    x: int
    y: int

    def __add__(self, other: Coord | tuple[int, int]) -> Coord:
        other = Coord.of(other)
        return Coord(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Coord | tuple[int, int]) -> Coord:
        other = Coord.of(other)
        return Coord(self.x - other.x, self.y - other.y)

    @classmethod
    def of(cls, value: Coord | tuple[int, int]) -> Coord:
        if isinstance(value, Coord):
            return value
        x, y = value
        return cls(int(x), int(y))


# Edge neighbours: up, down, left, right
ORTHOGONAL = (Coord(0, 1), Coord(0, -1), Coord(-1, 0), Coord(1, 0))

# Corner neighbours
DIAGONAL = (Coord(1, 1), Coord(1, -1), Coord(-1, 1), Coord(-1, -1))


def is_valid_player(player_id: object) -> bool:
    if isinstance(player_id, bool) or not isinstance(player_id, int):
        return False
    return player_id in PLAYER_IDS


def starting_corners(size: int) -> dict[int, Coord]:
    """Corner each player's first piece must cover, keyed by player id."""
    last = size - 1
    return {
        1: Coord(0, 0),
        2: Coord(last, 0),
        3: Coord(last, last),
        4: Coord(0, last),
    }


class Grid:
    def __init__(self, size: int = DEFAULT_BOARD_SIZE):
        if size < 1:
            raise ValueError(f"Board size must be positive, got {size}")
        self.size: int = size
        self.cells: list[list[int]] = [[EMPTY] * size for _ in range(size)]
        self.first_piece_placed: list[bool] = [False] * MAX_PLAYERS
        self.corners: dict[int, Coord] = starting_corners(size)

    def in_bounds(self, pos: Coord) -> bool:
        return 0 <= pos.x < self.size and 0 <= pos.y < self.size

    def owner(self, pos: Coord) -> int:
        """Return the player owning ``pos``, 0 if empty, -1 if off the board."""
        if not self.in_bounds(pos):
            return OFF_BOARD
        return self.cells[pos.x][pos.y]

    def is_owned_by(self, pos: Coord, player_id: int) -> bool:
        return self.in_bounds(pos) and self.cells[pos.x][pos.y] == player_id

    def has_placed(self, player_id: int) -> bool:
        return self.first_piece_placed[player_id - 1]

    def mark(self, cells: list[Coord], player_id: int) -> None:
        for pos in cells:
            self.cells[pos.x][pos.y] = player_id
        self.first_piece_placed[player_id - 1] = True

    def clear(self) -> None:
        for column in self.cells:
            for y in range(self.size):
                column[y] = EMPTY
        for i in range(MAX_PLAYERS):
            self.first_piece_placed[i] = False

    def copy_cells(self) -> list[list[int]]:
        return [list(column) for column in self.cells]

    def flatten(self) -> list[int]:
        """Row-major flattening: index ``x * size + y``."""
        return [value for column in self.cells for value in column]

    @staticmethod
    def unflatten(data: list[int], size: int) -> list[list[int]]:
        return [list(data[x * size:(x + 1) * size]) for x in range(size)]
