"""Pydantic models for WebSocket message protocol."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError


# ---------------------------------------------------------------------------
# Client → Server
# ---------------------------------------------------------------------------

class CreateBoardMsg(BaseModel):
    type: Literal["create_board"] = "create_board"


class PieceMove(BaseModel):
    player_id: int
    piece_id: int
    rotation: int = Field(default=0, ge=0, le=3)
    flipped: bool = False


class ValidatePlacementMsg(PieceMove):
    type: Literal["validate_placement"] = "validate_placement"
    x: int
    y: int


class PlacePieceMsg(PieceMove):
    type: Literal["place_piece"] = "place_piece"
    x: int
    y: int


class ListPlacementsMsg(PieceMove):
    type: Literal["list_placements"] = "list_placements"


class HasMovesMsg(BaseModel):
    type: Literal["has_moves"] = "has_moves"
    player_id: int


class GameOverMsg(BaseModel):
    type: Literal["game_over"] = "game_over"


class GetStateMsg(BaseModel):
    type: Literal["get_state"] = "get_state"


class SnapshotMsg(BaseModel):
    type: Literal["snapshot"] = "snapshot"


class RestoreMsg(BaseModel):
    type: Literal["restore"] = "restore"
    board: dict[str, Any]
    placed_pieces: dict[str, list[int]] | None = None


class ClearBoardMsg(BaseModel):
    type: Literal["clear_board"] = "clear_board"


class LeaveBoardMsg(BaseModel):
    type: Literal["leave_board"] = "leave_board"


ClientMessage = (
    CreateBoardMsg
    | ValidatePlacementMsg
    | PlacePieceMsg
    | ListPlacementsMsg
    | HasMovesMsg
    | GameOverMsg
    | GetStateMsg
    | SnapshotMsg
    | RestoreMsg
    | ClearBoardMsg
    | LeaveBoardMsg
)


# ---------------------------------------------------------------------------
# Server → Client
# ---------------------------------------------------------------------------

class CellModel(BaseModel):
    x: int
    y: int


class BoardCreatedMsg(BaseModel):
    type: Literal["board_created"] = "board_created"
    session_id: str
    board_size: int
    starting_corners: dict[str, CellModel]


class PlacementCheckedMsg(BaseModel):
    type: Literal["placement_checked"] = "placement_checked"
    valid: bool
    rule: str
    reason: str
    conflicts: list[CellModel] = Field(default_factory=list)


class PiecePlacedMsg(BaseModel):
    type: Literal["piece_placed"] = "piece_placed"
    player_id: int
    piece_id: int
    x: int
    y: int
    cells: list[CellModel]


class PlacementsMsg(BaseModel):
    type: Literal["placements"] = "placements"
    player_id: int
    piece_id: int
    anchors: list[CellModel]


class HasMovesResultMsg(BaseModel):
    type: Literal["has_moves_result"] = "has_moves_result"
    player_id: int
    has_moves: bool


class GameOverResultMsg(BaseModel):
    type: Literal["game_over_result"] = "game_over_result"
    game_over: bool
    blocked_players: list[int]


class BoardStateMsg(BaseModel):
    type: Literal["board_state"] = "board_state"
    board: list[list[int]]
    first_placement: dict[str, bool]


class SnapshotResultMsg(BaseModel):
    type: Literal["snapshot"] = "snapshot"
    board: dict[str, Any]
    placed_pieces: dict[str, list[int]]


class BoardRestoredMsg(BaseModel):
    type: Literal["board_restored"] = "board_restored"


class BoardClearedMsg(BaseModel):
    type: Literal["board_cleared"] = "board_cleared"


class ErrorMsg(BaseModel):
    type: Literal["error"] = "error"
    message: str
    rule: str | None = None


def parse_client_message(data: dict) -> ClientMessage | None:
    """Parse a raw dict into a typed client message, or None if invalid."""
    if not isinstance(data, dict):
        return None
    msg_type = data.get("type")
    mapping: dict[str, type[BaseModel]] = {
        "create_board": CreateBoardMsg,
        "validate_placement": ValidatePlacementMsg,
        "place_piece": PlacePieceMsg,
        "list_placements": ListPlacementsMsg,
        "has_moves": HasMovesMsg,
        "game_over": GameOverMsg,
        "get_state": GetStateMsg,
        "snapshot": SnapshotMsg,
        "restore": RestoreMsg,
        "clear_board": ClearBoardMsg,
        "leave_board": LeaveBoardMsg,
    }
    model = mapping.get(msg_type)  # type: ignore[arg-type]
    if model is None:
        return None
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError:
        return None
