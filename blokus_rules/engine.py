"""Board engine: owns the grid, first-move flags and connectable caches."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from blokus_rules import enumerator, serializer
from blokus_rules.cache import ConnectablePositionCache
from blokus_rules.grid import DEFAULT_BOARD_SIZE, PLAYER_IDS, Coord, Grid, is_valid_player
from blokus_rules.serializer import BoardStateBlob
from blokus_rules.validator import PlacementResult, piece_cells, validate_placement

logger = logging.getLogger(__name__)


class BoardObserver:
    """Receives synchronous notifications after successful board mutations."""

    def on_board_initialized(self, engine: BoardEngine) -> None:
        pass

    def on_piece_placed(
        self, engine: BoardEngine, player_id: int, piece, anchor: Coord, cells: list[Coord]
    ) -> None:
        pass

    def on_board_cleared(self, engine: BoardEngine) -> None:
        pass

    def on_board_restored(self, engine: BoardEngine) -> None:
        pass


class BoardEngine:
    """Rule engine for one Blokus board.

    Not thread-safe and not reentrant: callers are expected to resolve one
    operation fully before issuing the next. External readers only ever get
    copies of the grid and caches.
    """

    def __init__(self, board_size: int = DEFAULT_BOARD_SIZE, observer: BoardObserver | None = None):
        self.board_size = board_size
        self.observer = observer or BoardObserver()
        self.grid: Grid
        self.cache: ConnectablePositionCache
        self.initialize_board()

    def initialize_board(self) -> None:
        self.grid = Grid(self.board_size)
        self.cache = ConnectablePositionCache(self.grid)
        logger.info("Board initialized (%dx%d)", self.board_size, self.board_size)
        self.observer.on_board_initialized(self)

    # ------------------------------------------------------------------
    # Validation and placement
    # ------------------------------------------------------------------

    def validate_placement(
        self, piece, anchor: Coord | tuple[int, int], player_id: int
    ) -> PlacementResult:
        return validate_placement(self.grid, piece, Coord.of(anchor), player_id)

    def is_valid_placement(self, piece, anchor: Coord | tuple[int, int], player_id: int) -> bool:
        return self.validate_placement(piece, anchor, player_id).is_valid

    def place_piece(self, piece, anchor: Coord | tuple[int, int], player_id: int) -> bool:
        """Place ``piece`` if legal. Returns False and leaves the board untouched otherwise."""
        anchor = Coord.of(anchor)
        result = self.validate_placement(piece, anchor, player_id)
        if not result.is_valid:
            logger.debug("Player %s cannot place at %s: %s", player_id, anchor, result.rule.value)
            return False

        cells = piece_cells(piece, anchor)
        self.grid.mark(cells, player_id)
        self.cache.update_after_placement(player_id, cells)
        logger.debug("Player %d placed %d cells at %s", player_id, len(cells), anchor)
        self.observer.on_piece_placed(self, player_id, piece, anchor, cells)
        return True

    def get_valid_placements(self, piece, player_id: int) -> list[Coord]:
        return enumerator.get_valid_placements(self.grid, self.cache, piece, player_id)

    def has_valid_moves(self, player_id: int, pieces: Iterable | None) -> bool:
        return enumerator.has_valid_moves(self.grid, self.cache, player_id, pieces)

    def blocked_players(self, pieces_by_player: dict[int, Iterable]) -> list[int]:
        """Players with no legal placement left for any of their unplaced pieces."""
        return [
            pid for pid in PLAYER_IDS if not self.has_valid_moves(pid, pieces_by_player.get(pid))
        ]

    def is_game_over(self, pieces_by_player: dict[int, Iterable]) -> bool:
        return len(self.blocked_players(pieces_by_player)) == len(PLAYER_IDS)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_position_owner(self, pos: Coord | tuple[int, int]) -> int:
        return self.grid.owner(Coord.of(pos))

    def is_position_valid(self, pos: Coord | tuple[int, int]) -> bool:
        return self.grid.in_bounds(Coord.of(pos))

    def get_starting_corner(self, player_id: int) -> Coord:
        if not is_valid_player(player_id):
            logger.warning("Invalid player id %r, returning origin", player_id)
            return Coord(0, 0)
        return self.grid.corners[player_id]

    def is_first_placement(self, player_id: int) -> bool:
        return is_valid_player(player_id) and not self.grid.has_placed(player_id)

    def get_connectable_positions(self, player_id: int) -> set[Coord]:
        return self.cache.positions(player_id)

    def get_board_state(self) -> list[list[int]]:
        return self.grid.copy_cells()

    # ------------------------------------------------------------------
    # Reset and persistence
    # ------------------------------------------------------------------

    def clear_board(self) -> None:
        self.grid.clear()
        self.cache.reset_all()
        logger.info("Board cleared")
        self.observer.on_board_cleared(self)

    def serialize_board_state(self) -> dict[str, Any]:
        return serializer.serialize(self.grid, self.cache).model_dump(by_alias=True)

    def deserialize_board_state(self, blob: BoardStateBlob | dict[str, Any] | str | bytes) -> bool:
        if not serializer.restore(blob, self.grid, self.cache):
            return False
        logger.info("Board state restored")
        self.observer.on_board_restored(self)
        return True
