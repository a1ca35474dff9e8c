"""Board state snapshots: grid, first-move flags, and connectable caches."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from blokus_rules.cache import ConnectablePositionCache
from blokus_rules.grid import MAX_PLAYERS, PLAYER_IDS, Coord, Grid

logger = logging.getLogger(__name__)


class CoordData(BaseModel):
    x: int
    y: int


class ConnectablePositionsData(BaseModel):
    player1: list[CoordData] = Field(default_factory=list)
    player2: list[CoordData] = Field(default_factory=list)
    player3: list[CoordData] = Field(default_factory=list)
    player4: list[CoordData] = Field(default_factory=list)

    def for_player(self, player_id: int) -> list[CoordData]:
        return getattr(self, f"player{player_id}")


class BoardStateBlob(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    board_size: int = Field(alias="boardSize")
    grid_data: list[int] = Field(alias="gridData")
    player_first_piece_placed: list[bool] = Field(alias="playerFirstPiecePlaced")
    connectable_positions: ConnectablePositionsData = Field(
        default_factory=ConnectablePositionsData, alias="connectablePositions"
    )


@dataclass
class RestoredState:
    cells: list[list[int]]
    first_piece_placed: list[bool]
    positions: dict[int, set[Coord]]


def serialize(grid: Grid, cache: ConnectablePositionCache) -> BoardStateBlob:
    positions = cache.snapshot()
    return BoardStateBlob(
        board_size=grid.size,
        grid_data=grid.flatten(),
        player_first_piece_placed=list(grid.first_piece_placed),
        connectable_positions=ConnectablePositionsData(
            **{
                f"player{pid}": [CoordData(x=c.x, y=c.y) for c in positions[pid]]
                for pid in PLAYER_IDS
            }
        ),
    )


def parse_blob(data: BoardStateBlob | dict[str, Any] | str | bytes) -> BoardStateBlob | None:
    """Coerce a model, mapping, or JSON text into a blob; None if malformed."""
    if isinstance(data, BoardStateBlob):
        return data
    try:
        if isinstance(data, (str, bytes)):
            return BoardStateBlob.model_validate_json(data)
        return BoardStateBlob.model_validate(data)
    except (ValidationError, json.JSONDecodeError, TypeError) as e:
        logger.warning("Malformed board state: %s", e)
        return None


def decode(blob: BoardStateBlob, size: int) -> RestoredState | None:
    """Validate ``blob`` against a board of ``size`` and build the state to swap in.

    Nothing is mutated here so a failure leaves the caller's state intact.
    """
    if blob.board_size != size:
        logger.warning("Board size mismatch: expected %d, got %d", size, blob.board_size)
        return None
    if len(blob.grid_data) != size * size:
        logger.warning("Grid data length %d does not match %dx%d", len(blob.grid_data), size, size)
        return None
    if any(value < 0 or value > MAX_PLAYERS for value in blob.grid_data):
        logger.warning("Grid data contains an unknown player id")
        return None
    if len(blob.player_first_piece_placed) != MAX_PLAYERS:
        logger.warning(
            "Expected %d first-piece flags, got %d",
            MAX_PLAYERS,
            len(blob.player_first_piece_placed),
        )
        return None

    positions: dict[int, set[Coord]] = {}
    for pid in PLAYER_IDS:
        coords = {Coord(c.x, c.y) for c in blob.connectable_positions.for_player(pid)}
        if any(not (0 <= c.x < size and 0 <= c.y < size) for c in coords):
            logger.warning("Connectable position off the board for player %d", pid)
            return None
        positions[pid] = coords

    return RestoredState(
        cells=Grid.unflatten(blob.grid_data, size),
        first_piece_placed=list(blob.player_first_piece_placed),
        positions=positions,
    )


def restore(
    data: BoardStateBlob | dict[str, Any] | str | bytes,
    grid: Grid,
    cache: ConnectablePositionCache,
) -> bool:
    blob = parse_blob(data)
    if blob is None:
        return False
    state = decode(blob, grid.size)
    if state is None:
        return False
    grid.cells = state.cells
    grid.first_piece_placed = state.first_piece_placed
    cache.replace(state.positions)
    return True
