"""FastAPI app: WebSocket game endpoint plus room and health routes."""

import logging
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from game.config import GameConfig
from game.errors import ActionRejected, GameError
from game.events import Connected, ErrorMessage, roster
from game.service import GameService
from api.connections import ConnectionManager
from api.models import (
    ChatMessage,
    CreateRoom,
    DetectiveChoose,
    InboundAction,
    JoinRoom,
    MafiaChoose,
    MedicChoose,
    RequestLobby,
    RoomSnapshot,
    StartGame,
    Vote,
    parse_action,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

config = GameConfig.from_env()
connections = ConnectionManager()
service = GameService(connections, config=config)
registry = service.registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Mafia server starting up...")
    yield
    service.shutdown()
    logger.info("Mafia server shutting down.")


app = FastAPI(title="Mafia Rooms", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def dispatch(player_id: str, action: InboundAction) -> None:
    """Route one validated action to the service."""
    if isinstance(action, CreateRoom):
        await service.create_room(player_id, action.username, action.mafia_count)
    elif isinstance(action, JoinRoom):
        await service.join_room(player_id, action.username, action.room_code)
    elif isinstance(action, RequestLobby):
        await service.request_lobby(player_id, action.room_code)
    elif isinstance(action, StartGame):
        await service.start_game(player_id, action.room_code)
    elif isinstance(action, MafiaChoose):
        await service.mafia_choose(player_id, action.room_code, action.target_id)
    elif isinstance(action, MedicChoose):
        await service.medic_choose(player_id, action.room_code, action.target_id)
    elif isinstance(action, DetectiveChoose):
        await service.detective_choose(player_id, action.room_code, action.target_id)
    elif isinstance(action, Vote):
        await service.vote(player_id, action.room_code, action.target_id)
    elif isinstance(action, ChatMessage):
        await service.chat(player_id, action.room_code, action.text)
    else:
        raise TypeError(f"Unhandled action {type(action).__name__}")


async def handle_frame(player_id: str, raw: str) -> None:
    """Validate and dispatch one frame; failures become errorMessage for this player only."""
    try:
        action = parse_action(raw)
    except ValidationError as e:
        logger.debug("Malformed frame from %s: %s", player_id, e)
        await connections.send_to_player(player_id, ErrorMessage(text="Malformed message."))
        return
    try:
        await dispatch(player_id, action)
    except ActionRejected as e:
        if config.report_rejected_actions:
            await connections.send_to_player(player_id, ErrorMessage(text=e.message))
        else:
            logger.debug("Dropped %s from %s: %s", action.event, player_id, e.message)
    except GameError as e:
        await connections.send_to_player(player_id, ErrorMessage(text=e.message))


@app.websocket("/ws")
async def game_socket(websocket: WebSocket, player_id: str | None = Query(default=None, alias="playerId")):
    """One connection per player. The player id is stable and never the socket itself."""
    player_id = player_id or uuid.uuid4().hex
    await websocket.accept()
    connections.connect(player_id, websocket)
    await connections.send_to_player(player_id, Connected(player_id=player_id))
    try:
        while True:
            raw = await websocket.receive_text()
            await handle_frame(player_id, raw)
    except WebSocketDisconnect:
        logger.info("%s disconnected", player_id)
    finally:
        connections.disconnect(player_id, websocket)
        # a newer socket for the same player keeps the seat
        if player_id not in connections:
            await service.disconnect(player_id)


@app.get("/rooms", response_model=list[str], tags=["Rooms"], summary="List room codes")
def list_rooms():
    """List live room codes."""
    return registry.codes()


@app.get("/rooms/{code}", response_model=RoomSnapshot, tags=["Rooms"], summary="Get room state")
def get_room(code: str):
    """Public roster and phase of a room; roles stay hidden until a player is dead."""
    room = registry.find(code)
    if room is None:
        raise HTTPException(404, "Room not found")
    return RoomSnapshot(
        code=room.code,
        host=room.host_id,
        phase=room.phase.value,
        players=roster(room),
        mafia_count=room.settings.mafia_count,
        min_players=room.settings.min_players,
        max_players=room.settings.max_players,
    )


@app.get("/health", tags=["System"], summary="Health check")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("MAFIA_HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "5000")))
