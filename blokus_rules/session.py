"""Board sessions: one engine plus per-player piece inventories per connection."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field

from fastapi import WebSocket

from blokus_rules import config
from blokus_rules.engine import BoardEngine
from blokus_rules.grid import PLAYER_IDS, Coord, is_valid_player
from blokus_rules.models import (
    BoardClearedMsg,
    BoardCreatedMsg,
    BoardRestoredMsg,
    BoardStateMsg,
    CellModel,
    ErrorMsg,
    GameOverResultMsg,
    HasMovesResultMsg,
    PiecePlacedMsg,
    PieceMove,
    PlacementCheckedMsg,
    PlacementsMsg,
    SnapshotResultMsg,
)
from blokus_rules.pieces import Piece, standard_set

logger = logging.getLogger(__name__)


def _cell(c: Coord) -> CellModel:
    return CellModel(x=c.x, y=c.y)


def _player_from_key(key: str) -> int:
    """Map "player3" to 3; anything else to 0."""
    digits = key.removeprefix("player")
    if digits == key or not digits.isdigit():
        return 0
    return int(digits)


@dataclass
class BoardSession:
    session_id: str
    engine: BoardEngine
    inventories: dict[int, dict[int, Piece]] = field(
        default_factory=lambda: {pid: standard_set() for pid in PLAYER_IDS}
    )

    def oriented_piece(self, move: PieceMove) -> tuple[Piece | None, str | None]:
        """Resolve a move's piece in its requested orientation, or an error message."""
        if not is_valid_player(move.player_id):
            return None, "Player id must be between 1 and 4"
        piece = self.inventories[move.player_id].get(move.piece_id)
        if piece is None:
            return None, f"Unknown piece id: {move.piece_id}"
        if piece.placed:
            return None, "Piece has already been placed"
        return piece.transformed(move.rotation, move.flipped), None

    def placed_piece_ids(self) -> dict[str, list[int]]:
        return {
            f"player{pid}": sorted(p.piece_id for p in self.inventories[pid].values() if p.placed)
            for pid in PLAYER_IDS
        }

    def reset_inventories(self) -> None:
        for inventory in self.inventories.values():
            for piece in inventory.values():
                piece.placed = False


class SessionManager:
    def __init__(
        self, board_size: int = config.BOARD_SIZE, max_sessions: int = config.MAX_SESSIONS
    ):
        self.board_size = board_size
        self.max_sessions = max_sessions
        self.sessions: dict[str, BoardSession] = {}
        self._ws_to_session: dict[WebSocket, str] = {}

    def _generate_session_id(self) -> str:
        while True:
            session_id = secrets.token_hex(4)
            if session_id not in self.sessions:
                return session_id

    async def create_board(self, ws: WebSocket) -> BoardSession | None:
        existing = self.get_session_for_ws(ws)
        if existing is not None:
            self._cleanup_session(existing.session_id)
        if len(self.sessions) >= self.max_sessions:
            await ws.send_json(ErrorMsg(message="Too many active boards").model_dump())
            return None

        session_id = self._generate_session_id()
        session = BoardSession(session_id=session_id, engine=BoardEngine(self.board_size))
        self.sessions[session_id] = session
        self._ws_to_session[ws] = session_id
        logger.info("Created board session %s", session_id)

        corners = {
            f"player{pid}": _cell(session.engine.get_starting_corner(pid)) for pid in PLAYER_IDS
        }
        await ws.send_json(
            BoardCreatedMsg(
                session_id=session_id, board_size=self.board_size, starting_corners=corners
            ).model_dump()
        )
        return session

    async def _require_session(self, ws: WebSocket) -> BoardSession | None:
        session = self.get_session_for_ws(ws)
        if session is None:
            await ws.send_json(ErrorMsg(message="No board created").model_dump())
        return session

    async def validate_placement(self, ws: WebSocket, move: PieceMove, x: int, y: int):
        session = await self._require_session(ws)
        if session is None:
            return
        piece, error = session.oriented_piece(move)
        if error:
            await ws.send_json(ErrorMsg(message=error).model_dump())
            return

        result = session.engine.validate_placement(piece, Coord(x, y), move.player_id)
        await ws.send_json(
            PlacementCheckedMsg(
                valid=result.is_valid,
                rule=result.rule.value,
                reason=result.message,
                conflicts=[_cell(c) for c in result.conflicts],
            ).model_dump()
        )

    async def place_piece(self, ws: WebSocket, move: PieceMove, x: int, y: int):
        session = await self._require_session(ws)
        if session is None:
            return
        piece, error = session.oriented_piece(move)
        if error:
            await ws.send_json(ErrorMsg(message=error).model_dump())
            return

        anchor = Coord(x, y)
        if not session.engine.place_piece(piece, anchor, move.player_id):
            result = session.engine.validate_placement(piece, anchor, move.player_id)
            await ws.send_json(
                ErrorMsg(message=result.message, rule=result.rule.value).model_dump()
            )
            return

        session.inventories[move.player_id][move.piece_id].placed = True
        await ws.send_json(
            PiecePlacedMsg(
                player_id=move.player_id,
                piece_id=move.piece_id,
                x=x,
                y=y,
                cells=[_cell(c) for c in piece.occupied_cells(anchor)],
            ).model_dump()
        )

    async def list_placements(self, ws: WebSocket, move: PieceMove):
        session = await self._require_session(ws)
        if session is None:
            return
        piece, error = session.oriented_piece(move)
        if error:
            await ws.send_json(ErrorMsg(message=error).model_dump())
            return

        anchors = session.engine.get_valid_placements(piece, move.player_id)
        await ws.send_json(
            PlacementsMsg(
                player_id=move.player_id,
                piece_id=move.piece_id,
                anchors=[_cell(a) for a in anchors],
            ).model_dump()
        )

    async def has_moves(self, ws: WebSocket, player_id: int):
        session = await self._require_session(ws)
        if session is None:
            return
        if not is_valid_player(player_id):
            await ws.send_json(ErrorMsg(message="Player id must be between 1 and 4").model_dump())
            return

        pieces = list(session.inventories[player_id].values())
        await ws.send_json(
            HasMovesResultMsg(
                player_id=player_id, has_moves=session.engine.has_valid_moves(player_id, pieces)
            ).model_dump()
        )

    async def game_over(self, ws: WebSocket):
        session = await self._require_session(ws)
        if session is None:
            return
        pieces = {pid: list(inventory.values()) for pid, inventory in session.inventories.items()}
        blocked = session.engine.blocked_players(pieces)
        await ws.send_json(
            GameOverResultMsg(
                game_over=len(blocked) == len(PLAYER_IDS), blocked_players=blocked
            ).model_dump()
        )

    async def get_state(self, ws: WebSocket):
        session = await self._require_session(ws)
        if session is None:
            return
        engine = session.engine
        await ws.send_json(
            BoardStateMsg(
                board=engine.get_board_state(),
                first_placement={
                    f"player{pid}": engine.is_first_placement(pid) for pid in PLAYER_IDS
                },
            ).model_dump()
        )

    async def snapshot(self, ws: WebSocket):
        session = await self._require_session(ws)
        if session is None:
            return
        await ws.send_json(
            SnapshotResultMsg(
                board=session.engine.serialize_board_state(),
                placed_pieces=session.placed_piece_ids(),
            ).model_dump()
        )

    async def restore(self, ws: WebSocket, board: dict, placed_pieces: dict[str, list[int]] | None):
        session = await self._require_session(ws)
        if session is None:
            return

        placed: dict[int, set[int]] = {pid: set() for pid in PLAYER_IDS}
        for key, ids in (placed_pieces or {}).items():
            pid = _player_from_key(key)
            if not is_valid_player(pid) or any(i not in session.inventories[pid] for i in ids):
                await ws.send_json(ErrorMsg(message="Invalid placed piece list").model_dump())
                return
            placed[pid] = set(ids)

        if not session.engine.deserialize_board_state(board):
            await ws.send_json(ErrorMsg(message="Invalid board state").model_dump())
            return

        if placed_pieces is not None:
            for pid, inventory in session.inventories.items():
                for piece_id, piece in inventory.items():
                    piece.placed = piece_id in placed[pid]
        await ws.send_json(BoardRestoredMsg().model_dump())

    async def clear_board(self, ws: WebSocket):
        session = await self._require_session(ws)
        if session is None:
            return
        session.engine.clear_board()
        session.reset_inventories()
        await ws.send_json(BoardClearedMsg().model_dump())

    async def handle_disconnect(self, ws: WebSocket):
        session_id = self._ws_to_session.pop(ws, None)
        if session_id is None:
            return
        self._cleanup_session(session_id)

    def _cleanup_session(self, session_id: str):
        if self.sessions.pop(session_id, None) is not None:
            logger.info("Closed board session %s", session_id)
        for ws, sid in list(self._ws_to_session.items()):
            if sid == session_id:
                del self._ws_to_session[ws]

    def get_session_for_ws(self, ws: WebSocket) -> BoardSession | None:
        session_id = self._ws_to_session.get(ws)
        if session_id is None:
            return None
        return self.sessions.get(session_id)


session_manager = SessionManager()
