"""WebSocket endpoint and message routing."""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from blokus_rules.models import (
    ClearBoardMsg,
    CreateBoardMsg,
    ErrorMsg,
    GameOverMsg,
    GetStateMsg,
    HasMovesMsg,
    LeaveBoardMsg,
    ListPlacementsMsg,
    PlacePieceMsg,
    RestoreMsg,
    SnapshotMsg,
    ValidatePlacementMsg,
    parse_client_message,
)
from blokus_rules.session import session_manager

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    try:
        while True:
            try:
                data = await ws.receive_json()
            except ValueError:
                await ws.send_json(ErrorMsg(message="Message is not valid JSON").model_dump())
                continue
            msg = parse_client_message(data)
            if msg is None:
                await ws.send_json(ErrorMsg(message="Unknown or invalid message").model_dump())
                continue

            if isinstance(msg, CreateBoardMsg):
                await session_manager.create_board(ws)

            elif isinstance(msg, ValidatePlacementMsg):
                await session_manager.validate_placement(ws, msg, msg.x, msg.y)

            elif isinstance(msg, PlacePieceMsg):
                await session_manager.place_piece(ws, msg, msg.x, msg.y)

            elif isinstance(msg, ListPlacementsMsg):
                await session_manager.list_placements(ws, msg)

            elif isinstance(msg, HasMovesMsg):
                await session_manager.has_moves(ws, msg.player_id)

            elif isinstance(msg, GameOverMsg):
                await session_manager.game_over(ws)

            elif isinstance(msg, GetStateMsg):
                await session_manager.get_state(ws)

            elif isinstance(msg, SnapshotMsg):
                await session_manager.snapshot(ws)

            elif isinstance(msg, RestoreMsg):
                await session_manager.restore(ws, msg.board, msg.placed_pieces)

            elif isinstance(msg, ClearBoardMsg):
                await session_manager.clear_board(ws)

            elif isinstance(msg, LeaveBoardMsg):
                await session_manager.handle_disconnect(ws)
    except WebSocketDisconnect:
        pass
    finally:
        await session_manager.handle_disconnect(ws)
